"""Two-phase construction of an IntegerValue from caller-filled digits.

create() hands out a zeroed native digit buffer; the caller fills it and then
calls finish() (ownership of the buffer moves into the new value) or
discard(). A writer reaches exactly one terminal state and is confined to a
single owner until then.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import operator

import numpy as np

from bigdigit_core.config import DEFAULT_DIGIT_CONFIG
from bigdigit_core.errors import (
    DigitAllocationError,
    DigitInvalidArgumentError,
    DigitTypeMismatchError,
    WriterStateError,
)
from bigdigit_core.layout import NATIVE_LAYOUT
from bigdigit_core.modes import ValidateMode, coerce_validate_mode
from bigdigit_metrics.metrics import _writer_metrics_update
from bigdigit_value.compact import check_digit_range, normalize
from bigdigit_value.value import IntegerValue


class WriterState(str, Enum):
    CREATED = "created"
    FINISHED = "finished"
    DISCARDED = "discarded"


@dataclass(frozen=True, slots=True)
class WriterConfig:
    """Writer DI bundle; None defers to DEFAULT_DIGIT_CONFIG."""

    validate_mode: ValidateMode | str | None = None


DEFAULT_WRITER_CONFIG = WriterConfig()


class Writer:
    __slots__ = ("negative", "ndigits", "_digits", "_state")

    def __init__(self, negative: bool, ndigits: int, digits: np.ndarray):
        self.negative = negative
        self.ndigits = ndigits
        self._digits = digits
        self._state = WriterState.CREATED

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def digits(self) -> np.ndarray:
        _require_created(self, "access digits of")
        return self._digits

    def finish(self, *, validate_mode: ValidateMode | str | None = None) -> IntegerValue:
        return finish(self, validate_mode=validate_mode)

    def discard(self) -> None:
        discard(self)

    def __enter__(self) -> "Writer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._state == WriterState.CREATED:
            discard(self)

    def __repr__(self) -> str:
        return (
            f"Writer(state={self._state.value}, negative={self.negative}, "
            f"ndigits={self.ndigits})"
        )


def _require_writer(writer, operation: str) -> Writer:
    if not isinstance(writer, Writer):
        raise DigitTypeMismatchError(obj_type=type(writer).__name__, context=operation)
    return writer


def _require_created(writer: Writer, operation: str) -> None:
    if writer._state != WriterState.CREATED:
        raise WriterStateError(state=writer._state.value, operation=operation)


def _release(writer: Writer, state: WriterState) -> None:
    digits = writer._digits
    if digits is not None:
        digits.flags.writeable = False
    writer._digits = None
    writer._state = state


def create(negative: bool, ndigits: int) -> tuple[Writer, np.ndarray]:
    """Allocate a writer and its zero-initialized digit buffer.

    Digits are native layout (least significant first). Each digit written
    must lie in [0, 2**bits_per_digit); unused high slots must stay 0.
    """
    try:
        n = operator.index(ndigits)
    except TypeError as exc:
        raise DigitTypeMismatchError(
            obj_type=type(ndigits).__name__, context="create"
        ) from exc
    if n < 0:
        raise DigitInvalidArgumentError(
            f"ndigits must be non-negative, got {n}", context="create"
        )
    if n > NATIVE_LAYOUT.max_digits:
        raise DigitAllocationError(ndigits=n, context="create")
    try:
        digits = np.zeros(n, dtype=NATIVE_LAYOUT.dtype)
    except MemoryError as exc:
        raise DigitAllocationError(ndigits=n, context="create") from exc
    writer = Writer(negative=bool(negative), ndigits=n, digits=digits)
    _writer_metrics_update("create")
    return writer, digits


def finish(
    writer: Writer, *, validate_mode: ValidateMode | str | None = None
) -> IntegerValue:
    """Normalize the buffer and build the value; the writer becomes FINISHED.

    STRICT validation rejects out-of-range digits with DigitRangeError;
    TRUSTED skips the check and an out-of-range digit yields an unspecified
    value. Any failure discards the writer before the error propagates.
    """
    writer = _require_writer(writer, "finish")
    _require_created(writer, "finish")
    mode = coerce_validate_mode(
        validate_mode, default=DEFAULT_DIGIT_CONFIG.validate_mode
    )
    digits = writer._digits
    # Ownership moves to the value: the caller's buffer becomes read-only.
    digits.flags.writeable = False
    try:
        if mode == ValidateMode.STRICT:
            check_digit_range(digits, NATIVE_LAYOUT)
        norm = normalize(writer.negative, digits, NATIVE_LAYOUT)
        value = IntegerValue._from_normalized(norm)
    except MemoryError as exc:
        _release(writer, WriterState.DISCARDED)
        _writer_metrics_update("discard")
        raise DigitAllocationError(ndigits=writer.ndigits, context="finish") from exc
    except Exception:
        _release(writer, WriterState.DISCARDED)
        _writer_metrics_update("discard")
        raise
    _release(writer, WriterState.FINISHED)
    _writer_metrics_update("finish", compact=value.is_compact)
    return value


def finish_cfg(writer: Writer, *, cfg: WriterConfig = DEFAULT_WRITER_CONFIG) -> IntegerValue:
    """finish wrapper for a fixed WriterConfig."""
    return finish(writer, validate_mode=cfg.validate_mode)


def discard(writer: Writer | None) -> None:
    """Release the buffer without producing a value. No-op for None."""
    if writer is None:
        return
    writer = _require_writer(writer, "discard")
    if writer._state == WriterState.DISCARDED:
        return
    _require_created(writer, "discard")
    _release(writer, WriterState.DISCARDED)
    _writer_metrics_update("discard")


__all__ = [
    "WriterState",
    "WriterConfig",
    "DEFAULT_WRITER_CONFIG",
    "Writer",
    "create",
    "finish",
    "finish_cfg",
    "discard",
]
