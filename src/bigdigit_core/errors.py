from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass
from enum import Enum


class ErrorKind(str, Enum):
    TYPE_MISMATCH = "type_mismatch"
    INVALID_ARGUMENT = "invalid_argument"
    ALLOCATION_FAILURE = "allocation_failure"
    CONTRACT_VIOLATION = "contract_violation"


def _error_setattr(self, name, value):
    # Exception machinery (contextlib, traceback chaining) writes dunder slots.
    if name.startswith("__") and name.endswith("__"):
        BaseException.__setattr__(self, name, value)
        return
    raise FrozenInstanceError(f"cannot assign to field {name!r}")


def _error_delattr(self, name):
    if name.startswith("__") and name.endswith("__"):
        BaseException.__delattr__(self, name)
        return
    raise FrozenInstanceError(f"cannot delete field {name!r}")


def _error_dataclass(cls):
    """Frozen dataclass whose fields are read-only but stays raisable."""
    cls = dataclass(frozen=True)(cls)
    cls.__setattr__ = _error_setattr
    cls.__delattr__ = _error_delattr
    return cls


@_error_dataclass
class DigitTypeMismatchError(TypeError):
    obj_type: str
    context: str | None = None

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.TYPE_MISMATCH

    def __str__(self) -> str:
        return f"expected an integer, got {self.obj_type}"


@_error_dataclass
class DigitInvalidArgumentError(ValueError):
    message: str
    context: str | None = None

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.INVALID_ARGUMENT

    def __str__(self) -> str:
        return self.message


@_error_dataclass
class DigitRangeError(DigitInvalidArgumentError):
    index: int = -1
    digit: int = 0
    base: int = 0
    row: int | None = None

    def __str__(self) -> str:
        where = f"digit {self.index}"
        if self.row is not None:
            where = f"row {self.row}, {where}"
        return f"{where} out of range: {self.digit} not in [0, {self.base})"


@_error_dataclass
class DigitAllocationError(MemoryError):
    ndigits: int
    context: str | None = None

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.ALLOCATION_FAILURE

    def __str__(self) -> str:
        return f"cannot allocate {self.ndigits} digits"


@_error_dataclass
class WriterStateError(RuntimeError):
    state: str
    operation: str

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.CONTRACT_VIOLATION

    def __str__(self) -> str:
        return f"cannot {self.operation} a writer in state {self.state!r}"


@_error_dataclass
class ExportReleasedError(RuntimeError):
    operation: str = "use"

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.CONTRACT_VIOLATION

    def __str__(self) -> str:
        return f"cannot {self.operation} a released export view"


@_error_dataclass
class DigitConfigError(ValueError):
    name: str
    value: object
    allowed: tuple[str, ...] = ()

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.INVALID_ARGUMENT

    def __str__(self) -> str:
        if self.allowed:
            return f"invalid {self.name}={self.value!r} (allowed: {', '.join(self.allowed)})"
        return f"invalid {self.name}={self.value!r}"


__all__ = [
    "ErrorKind",
    "DigitTypeMismatchError",
    "DigitInvalidArgumentError",
    "DigitRangeError",
    "DigitAllocationError",
    "WriterStateError",
    "ExportReleasedError",
    "DigitConfigError",
]
