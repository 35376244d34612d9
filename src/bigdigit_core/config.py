from __future__ import annotations

from dataclasses import dataclass
import os

from bigdigit_core.errors import DigitConfigError
from bigdigit_core.modes import ValidateMode, coerce_validate_mode

SUPPORTED_DIGIT_BITS = (30, 15)


def _coerce_digit_bits(value) -> int:
    if value is None or value == "":
        return SUPPORTED_DIGIT_BITS[0]
    text = str(value).strip()
    if not text.isdigit() or int(text) not in SUPPORTED_DIGIT_BITS:
        raise DigitConfigError(
            name="BIGDIGIT_DIGIT_BITS",
            value=value,
            allowed=tuple(str(b) for b in SUPPORTED_DIGIT_BITS),
        )
    return int(text)


@dataclass(frozen=True, slots=True)
class DigitConfig:
    """Process-level configuration (control-plane).

    Read once at import; the native layout is derived from ``digit_bits`` and
    never changes afterwards.
    """

    digit_bits: int = SUPPORTED_DIGIT_BITS[0]
    validate_mode: ValidateMode = ValidateMode.STRICT

    def __post_init__(self):
        object.__setattr__(self, "digit_bits", _coerce_digit_bits(self.digit_bits))
        object.__setattr__(
            self, "validate_mode", coerce_validate_mode(self.validate_mode)
        )

    @staticmethod
    def from_env() -> "DigitConfig":
        digit_bits = _coerce_digit_bits(os.environ.get("BIGDIGIT_DIGIT_BITS"))
        validate_mode = coerce_validate_mode(
            os.environ.get("BIGDIGIT_VALIDATE_MODE", "")
        )
        return DigitConfig(digit_bits=digit_bits, validate_mode=validate_mode)


DEFAULT_DIGIT_CONFIG = DigitConfig.from_env()


__all__ = [
    "SUPPORTED_DIGIT_BITS",
    "DigitConfig",
    "DEFAULT_DIGIT_CONFIG",
]
