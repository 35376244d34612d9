"""Batch digit codec: many integers <-> one rectangular digit matrix.

Rows are native digits (least significant first), zero-padded to a common
width. Per-row trimming, sign canonicalization and range checks run as one
jitted JAX pass; value construction then reuses the scalar canonicalization.
"""

from __future__ import annotations

from functools import partial
from typing import Iterable, NamedTuple

import jax
import jax.numpy as jnp
import numpy as np

from bigdigit_core.config import DEFAULT_DIGIT_CONFIG
from bigdigit_core.errors import (
    DigitInvalidArgumentError,
    DigitRangeError,
    DigitTypeMismatchError,
)
from bigdigit_core.layout import NATIVE_LAYOUT
from bigdigit_core.modes import ValidateMode, coerce_validate_mode
from bigdigit_interchange.export import as_digit_array
from bigdigit_value.compact import canonicalize, check_digit_range
from bigdigit_value.value import IntegerValue


class DigitMatrix(NamedTuple):
    negative: np.ndarray
    ndigits: np.ndarray
    digits: np.ndarray


class RowsNormalized(NamedTuple):
    negative: np.ndarray
    ndigits: np.ndarray
    bad: np.ndarray
    first_bad: np.ndarray


@partial(jax.jit, static_argnames=("bits_per_digit",))
def _normalize_rows_jax(negative, digits, bits_per_digit: int):
    width = digits.shape[1]
    pos = jnp.arange(1, width + 1, dtype=jnp.int32)
    ndigits = jnp.max(
        jnp.where(digits != 0, pos[None, :], jnp.int32(0)), axis=1, initial=0
    )
    over = (digits >> bits_per_digit) != 0
    bad = jnp.any(over, axis=1)
    first_bad = jnp.argmax(over, axis=1).astype(jnp.int32)
    negative = negative & (ndigits > 0)
    return negative, ndigits, bad, first_bad


def _coerce_rows(negative, digits, *, strict: bool):
    arr = np.asarray(digits)
    if arr.dtype.kind not in "ui":
        raise DigitTypeMismatchError(obj_type=str(arr.dtype), context="normalize_rows")
    if arr.ndim != 2:
        raise DigitInvalidArgumentError(
            f"digit matrix must be 2-D, got shape {arr.shape}", context="normalize_rows"
        )
    neg = np.asarray(negative, dtype=np.bool_)
    if neg.shape != (arr.shape[0],):
        raise DigitInvalidArgumentError(
            f"negative must have shape ({arr.shape[0]},), got {neg.shape}",
            context="normalize_rows",
        )
    native = NATIVE_LAYOUT.dtype
    if arr.dtype.kind == "u" and arr.dtype.itemsize <= native.itemsize:
        return neg, arr.astype(native, copy=False)
    # Signed or wider input cannot be narrowed without a host-side check.
    if strict:
        for row in range(arr.shape[0]):
            check_digit_range(arr[row], NATIVE_LAYOUT, row=row)
    return neg, arr.astype(native)


def _rows_normalized(neg, arr) -> RowsNormalized:
    if arr.shape[1] == 0:
        zeros = np.zeros(arr.shape[0], dtype=np.int32)
        return RowsNormalized(
            negative=np.zeros(arr.shape[0], dtype=np.bool_),
            ndigits=zeros,
            bad=np.zeros(arr.shape[0], dtype=np.bool_),
            first_bad=zeros,
        )
    out = _normalize_rows_jax(
        jnp.asarray(neg), jnp.asarray(arr), bits_per_digit=NATIVE_LAYOUT.bits_per_digit
    )
    return RowsNormalized(*(np.asarray(x) for x in out))


def normalize_rows(negative, digits) -> RowsNormalized:
    """Per-row trimmed lengths, canonical signs and out-of-range flags."""
    neg, arr = _coerce_rows(negative, digits, strict=True)
    return _rows_normalized(neg, arr)


def pack_values(values: Iterable) -> DigitMatrix:
    """Export integers into one zero-padded native digit matrix."""
    negative = []
    rows = []
    for value in values:
        with as_digit_array(value) as view:
            negative.append(view.negative)
            rows.append(np.array(view.digits))
    width = max((r.shape[0] for r in rows), default=0)
    digits = np.zeros((len(rows), width), dtype=NATIVE_LAYOUT.dtype)
    for i, row in enumerate(rows):
        digits[i, : row.shape[0]] = row
    return DigitMatrix(
        negative=np.asarray(negative, dtype=np.bool_),
        ndigits=np.asarray([r.shape[0] for r in rows], dtype=np.intp),
        digits=digits,
    )


def unpack_matrix(
    matrix, *, validate_mode: ValidateMode | str | None = None
) -> list[IntegerValue]:
    """Build one IntegerValue per row of a DigitMatrix or (negative, digits).

    Rows are copied once into a read-only matrix that the resulting values
    share; STRICT mode raises DigitRangeError naming the first bad row.
    """
    mode = coerce_validate_mode(
        validate_mode, default=DEFAULT_DIGIT_CONFIG.validate_mode
    )
    strict = mode == ValidateMode.STRICT
    if isinstance(matrix, DigitMatrix):
        negative, digits = matrix.negative, matrix.digits
    else:
        negative, digits = matrix
    neg, arr = _coerce_rows(negative, digits, strict=strict)
    owned = np.array(arr, dtype=NATIVE_LAYOUT.dtype, copy=True)
    owned.flags.writeable = False
    rows = _rows_normalized(neg, owned)
    if strict and rows.bad.any():
        row = int(np.flatnonzero(rows.bad)[0])
        index = int(rows.first_bad[row])
        raise DigitRangeError(
            message="digit out of range",
            context="unpack_matrix",
            index=index,
            digit=int(owned[row, index]),
            base=NATIVE_LAYOUT.base,
            row=row,
        )
    values = []
    for i in range(owned.shape[0]):
        n = int(rows.ndigits[i])
        norm = canonicalize(bool(rows.negative[i]), owned[i, :n], NATIVE_LAYOUT)
        values.append(IntegerValue._from_normalized(norm))
    return values


__all__ = [
    "DigitMatrix",
    "RowsNormalized",
    "normalize_rows",
    "pack_values",
    "unpack_matrix",
]
