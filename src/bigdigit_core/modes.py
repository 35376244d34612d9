from __future__ import annotations

from enum import Enum

from bigdigit_core.errors import DigitConfigError


class ValidateMode(str, Enum):
    STRICT = "strict"
    TRUSTED = "trusted"


def coerce_validate_mode(
    mode: ValidateMode | str | None, *, default: ValidateMode = ValidateMode.STRICT
) -> ValidateMode:
    """Normalize a validate mode, raising on unknown values.

    STRICT checks every digit against the layout base before a value is
    built. TRUSTED skips the check; digits are stored unchecked, so an
    out-of-range digit gives an unspecified value whose canonical form and
    equality are not guaranteed.
    """
    if mode is None or mode == "":
        return default
    if isinstance(mode, ValidateMode):
        return mode
    if isinstance(mode, str):
        value = mode.strip().lower()
        if value == ValidateMode.STRICT.value:
            return ValidateMode.STRICT
        if value == ValidateMode.TRUSTED.value:
            return ValidateMode.TRUSTED
    raise DigitConfigError(
        name="validate_mode",
        value=mode,
        allowed=(ValidateMode.STRICT.value, ValidateMode.TRUSTED.value),
    )


__all__ = [
    "ValidateMode",
    "coerce_validate_mode",
]
