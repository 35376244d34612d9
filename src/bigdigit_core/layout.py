"""Native digit layout (process-wide, read-only).

A single layout is supported. It is fixed at import from
``DEFAULT_DIGIT_CONFIG.digit_bits`` and shared by every import/export call.
"""

from __future__ import annotations

from dataclasses import dataclass
import sys

import numpy as np

from bigdigit_core.config import DEFAULT_DIGIT_CONFIG, SUPPORTED_DIGIT_BITS
from bigdigit_core.errors import DigitConfigError

DIGITS_MOST_SIGNIFICANT_FIRST = 1
DIGITS_LEAST_SIGNIFICANT_FIRST = -1
ENDIAN_BIG = 1
ENDIAN_LITTLE = -1


@dataclass(frozen=True, slots=True)
class LayoutDescriptor:
    bits_per_digit: int
    digit_size: int
    digits_order: int
    digit_endianness: int

    def __post_init__(self):
        if self.bits_per_digit <= 0 or self.bits_per_digit > 8 * self.digit_size:
            raise DigitConfigError(name="bits_per_digit", value=self.bits_per_digit)
        if self.digits_order not in (1, -1):
            raise DigitConfigError(name="digits_order", value=self.digits_order)
        if self.digit_endianness not in (1, -1):
            raise DigitConfigError(
                name="digit_endianness", value=self.digit_endianness
            )

    @property
    def base(self) -> int:
        return 1 << self.bits_per_digit

    @property
    def mask(self) -> int:
        return (1 << self.bits_per_digit) - 1

    @property
    def dtype(self) -> np.dtype:
        order = ">" if self.digit_endianness == ENDIAN_BIG else "<"
        return np.dtype(f"{order}u{self.digit_size}")

    @property
    def max_digits(self) -> int:
        # bit_length() of the largest value must fit a signed machine word.
        return sys.maxsize // self.bits_per_digit


def _layout_for_bits(bits: int) -> LayoutDescriptor:
    if bits not in SUPPORTED_DIGIT_BITS:
        raise DigitConfigError(
            name="bits_per_digit",
            value=bits,
            allowed=tuple(str(b) for b in SUPPORTED_DIGIT_BITS),
        )
    return LayoutDescriptor(
        bits_per_digit=bits,
        digit_size=4 if bits == 30 else 2,
        digits_order=DIGITS_LEAST_SIGNIFICANT_FIRST,
        digit_endianness=ENDIAN_LITTLE if sys.byteorder == "little" else ENDIAN_BIG,
    )


NATIVE_LAYOUT = _layout_for_bits(DEFAULT_DIGIT_CONFIG.digit_bits)


def get_native_layout() -> LayoutDescriptor:
    return NATIVE_LAYOUT


__all__ = [
    "DIGITS_MOST_SIGNIFICANT_FIRST",
    "DIGITS_LEAST_SIGNIFICANT_FIRST",
    "ENDIAN_BIG",
    "ENDIAN_LITTLE",
    "LayoutDescriptor",
    "NATIVE_LAYOUT",
    "get_native_layout",
    "_layout_for_bits",
]
