from __future__ import annotations

from dataclasses import dataclass, field
import operator

import numpy as np

from bigdigit_core.errors import DigitInvalidArgumentError, DigitTypeMismatchError
from bigdigit_core.layout import NATIVE_LAYOUT
from bigdigit_core.refs import RefCount
from bigdigit_value.compact import (
    WORD_BITS,
    Normalized,
    digits_from_magnitude,
    fits_word,
    magnitude_from_digits,
)

_EMPTY_DIGITS = np.zeros(0, dtype=NATIVE_LAYOUT.dtype)
_EMPTY_DIGITS.flags.writeable = False


@dataclass(frozen=True, slots=True, eq=False, weakref_slot=True)
class IntegerValue:
    """Immutable arbitrary-precision integer in the native digit layout.

    Tagged variant: ``compact`` holds the signed value when it fits a signed
    64-bit word and ``digits`` is None; otherwise ``compact`` is None and
    ``digits`` is a read-only, trimmed array of native digits. Equal values
    always share the same variant and digits.
    """

    negative: bool
    compact: int | None = None
    digits: np.ndarray | None = field(default=None, repr=False)
    _exports: RefCount = field(default_factory=RefCount, repr=False)

    def __post_init__(self):
        if self.compact is not None:
            if self.digits is not None:
                raise DigitInvalidArgumentError(
                    "compact value cannot carry digits", context="IntegerValue"
                )
            if not fits_word(self.compact):
                raise DigitInvalidArgumentError(
                    "compact value does not fit a machine word",
                    context="IntegerValue",
                )
            if self.negative != (self.compact < 0):
                raise DigitInvalidArgumentError(
                    "sign does not match compact value", context="IntegerValue"
                )
            return
        digits = self.digits
        if digits is None or digits.ndim != 1 or digits.shape[0] == 0:
            raise DigitInvalidArgumentError(
                "array value needs a non-empty digit array", context="IntegerValue"
            )
        if digits.dtype != NATIVE_LAYOUT.dtype:
            raise DigitInvalidArgumentError(
                f"digits must be {NATIVE_LAYOUT.dtype}, got {digits.dtype}",
                context="IntegerValue",
            )
        if digits[-1] == 0:
            raise DigitInvalidArgumentError(
                "most significant digit must be nonzero", context="IntegerValue"
            )
        if (digits.shape[0] - 1) * NATIVE_LAYOUT.bits_per_digit < WORD_BITS:
            magnitude = magnitude_from_digits(digits, NATIVE_LAYOUT)
            if fits_word(-magnitude if self.negative else magnitude):
                raise DigitInvalidArgumentError(
                    "value fits a machine word and must be compact",
                    context="IntegerValue",
                )
        if digits.flags.writeable:
            digits.flags.writeable = False

    @classmethod
    def _from_normalized(cls, norm: Normalized) -> "IntegerValue":
        if norm.compact is not None:
            return cls(negative=norm.compact < 0, compact=norm.compact)
        return cls(negative=norm.negative, digits=norm.digits)

    @classmethod
    def from_int64(cls, value: int) -> "IntegerValue":
        """Fast path for values known to fit a signed 64-bit word."""
        value = operator.index(value)
        if not fits_word(value):
            raise OverflowError(f"{value} does not fit in int64")
        return cls(negative=value < 0, compact=value)

    @classmethod
    def from_int(cls, value) -> "IntegerValue":
        if isinstance(value, IntegerValue):
            return value
        try:
            value = operator.index(value)
        except TypeError as exc:
            raise DigitTypeMismatchError(
                obj_type=type(value).__name__, context="from_int"
            ) from exc
        if fits_word(value):
            return cls(negative=value < 0, compact=value)
        digits = digits_from_magnitude(abs(value), NATIVE_LAYOUT)
        return cls(negative=value < 0, digits=digits)

    @property
    def is_compact(self) -> bool:
        return self.compact is not None

    @property
    def ndigits(self) -> int:
        if self.compact is not None:
            bits = NATIVE_LAYOUT.bits_per_digit
            return (abs(self.compact).bit_length() + bits - 1) // bits
        return int(self.digits.shape[0])

    @property
    def export_count(self) -> int:
        return self._exports.count

    def _digit_storage(self) -> tuple[np.ndarray, bool]:
        """Return (digits, materialized) without copying array storage."""
        if self.compact is None:
            return self.digits, False
        if self.compact == 0:
            return _EMPTY_DIGITS, False
        digits = digits_from_magnitude(abs(self.compact), NATIVE_LAYOUT)
        digits.flags.writeable = False
        return digits, True

    def as_int64(self) -> int:
        if self.compact is None:
            raise OverflowError("value does not fit in int64")
        return self.compact

    def bit_length(self) -> int:
        if self.compact is not None:
            return self.compact.bit_length()
        bits = NATIVE_LAYOUT.bits_per_digit
        return (self.digits.shape[0] - 1) * bits + int(self.digits[-1]).bit_length()

    def __int__(self) -> int:
        if self.compact is not None:
            return self.compact
        magnitude = magnitude_from_digits(self.digits, NATIVE_LAYOUT)
        return -magnitude if self.negative else magnitude

    __index__ = __int__

    def __bool__(self) -> bool:
        return self.compact != 0

    def __eq__(self, other):
        if isinstance(other, IntegerValue):
            if self.negative != other.negative or self.compact != other.compact:
                return False
            if self.compact is not None:
                return True
            return np.array_equal(self.digits, other.digits)
        if isinstance(other, int):
            return int(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(int(self))

    def __repr__(self) -> str:
        if self.compact is not None:
            return f"IntegerValue({self.compact})"
        sign = "-" if self.negative else ""
        return f"IntegerValue({sign}{hex(abs(int(self)))}, ndigits={self.ndigits})"


__all__ = ["IntegerValue"]
