"""Digit normalization and compact/array selection.

Pure host-side helpers: no I/O, no global state. Trimming returns a slice of
the input, never a copy. The only allocation happens when a magnitude is
materialized into a fresh digit array.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from bigdigit_core.errors import DigitRangeError
from bigdigit_core.layout import (
    DIGITS_MOST_SIGNIFICANT_FIRST,
    NATIVE_LAYOUT,
    LayoutDescriptor,
)

WORD_BITS = 64
INT64_MIN = -(1 << (WORD_BITS - 1))
INT64_MAX = (1 << (WORD_BITS - 1)) - 1


class Normalized(NamedTuple):
    negative: bool
    digits: np.ndarray
    compact: int | None


def fits_word(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


def trimmed_length(digits, layout: LayoutDescriptor = NATIVE_LAYOUT) -> int:
    """Number of digits left after dropping redundant most-significant zeros."""
    nz = np.flatnonzero(digits)
    if nz.size == 0:
        return 0
    if layout.digits_order == DIGITS_MOST_SIGNIFICANT_FIRST:
        return int(digits.shape[0] - nz[0])
    return int(nz[-1]) + 1


def _trim(digits, n: int, layout: LayoutDescriptor):
    if layout.digits_order == DIGITS_MOST_SIGNIFICANT_FIRST:
        return digits[digits.shape[0] - n:]
    return digits[:n]


def _least_first(digits, layout: LayoutDescriptor):
    if layout.digits_order == DIGITS_MOST_SIGNIFICANT_FIRST:
        return digits[::-1]
    return digits


def check_digit_range(
    digits, layout: LayoutDescriptor = NATIVE_LAYOUT, *, row: int | None = None
) -> None:
    """Raise DigitRangeError for the first digit outside [0, base)."""
    if digits.size == 0:
        return
    bad = digits > layout.mask
    if digits.dtype.kind == "i":
        bad |= digits < 0
    if not bad.any():
        return
    index = int(np.flatnonzero(bad)[0])
    raise DigitRangeError(
        message="digit out of range",
        context="check_digit_range",
        index=index,
        digit=int(digits[index]),
        base=layout.base,
        row=row,
    )


def magnitude_from_digits(digits, layout: LayoutDescriptor = NATIVE_LAYOUT) -> int:
    """Magnitude of native digits, repacked as one little-endian bit stream."""
    bits = layout.bits_per_digit
    words = np.ascontiguousarray(_least_first(digits, layout), dtype="<u8")
    if words.size == 0:
        return 0
    # Each digit contributes exactly its low bits_per_digit bits.
    stream = np.unpackbits(
        words.view(np.uint8).reshape(-1, 8), axis=1, bitorder="little"
    )[:, :bits]
    packed = np.packbits(stream.ravel(), bitorder="little")
    return int.from_bytes(packed.tobytes(), "little")


def digits_from_magnitude(
    magnitude: int, layout: LayoutDescriptor = NATIVE_LAYOUT
) -> np.ndarray:
    """Materialize a non-negative magnitude as a minimal digit array."""
    if magnitude < 0:
        raise ValueError("magnitude must be non-negative")
    bits = layout.bits_per_digit
    n = (magnitude.bit_length() + bits - 1) // bits
    if n == 0:
        return np.empty(0, dtype=layout.dtype)
    raw = np.frombuffer(
        magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "little"),
        dtype=np.uint8,
    )
    stream = np.zeros(n * bits, dtype=np.uint8)
    unpacked = np.unpackbits(raw, bitorder="little")[: n * bits]
    stream[: unpacked.size] = unpacked
    cols = np.zeros((n, 64), dtype=np.uint8)
    cols[:, :bits] = stream.reshape(n, bits)
    words = np.packbits(cols, axis=1, bitorder="little").view("<u8").ravel()
    out = words.astype(layout.dtype)
    if layout.digits_order == DIGITS_MOST_SIGNIFICANT_FIRST:
        out = out[::-1].copy()
    return out


def canonicalize(
    negative: bool, trimmed, layout: LayoutDescriptor = NATIVE_LAYOUT
) -> Normalized:
    """Pick the representation for digits that are already trimmed."""
    n = int(trimmed.shape[0])
    if n == 0:
        return Normalized(negative=False, digits=trimmed, compact=0)
    # A nonzero top digit means magnitude >= base**(n-1).
    if (n - 1) * layout.bits_per_digit >= WORD_BITS:
        return Normalized(negative=bool(negative), digits=trimmed, compact=None)
    magnitude = magnitude_from_digits(trimmed, layout)
    if magnitude == 0:
        # Only bits above the digit width were set.
        return Normalized(negative=False, digits=trimmed[:0], compact=0)
    word = -magnitude if negative else magnitude
    if fits_word(word):
        return Normalized(negative=bool(negative), digits=trimmed, compact=word)
    return Normalized(negative=bool(negative), digits=trimmed, compact=None)


def normalize(
    negative: bool, digits, layout: LayoutDescriptor = NATIVE_LAYOUT
) -> Normalized:
    """Trim, canonicalize the sign of zero, and choose compact vs array.

    Returns:
      Normalized: (negative, digits, compact). ``digits`` is a sub-view of the
      input; ``compact`` is the signed word when it fits int64, else None.
    """
    n = trimmed_length(digits, layout)
    return canonicalize(negative, _trim(digits, n, layout), layout)


__all__ = [
    "WORD_BITS",
    "INT64_MIN",
    "INT64_MAX",
    "Normalized",
    "fits_word",
    "trimmed_length",
    "check_digit_range",
    "magnitude_from_digits",
    "digits_from_magnitude",
    "canonicalize",
    "normalize",
]
