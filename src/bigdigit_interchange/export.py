"""Zero-copy export of an integer's sign and digits.

A view pins its source until ``free_digit_array`` is called exactly once.
Prefer the context-manager form so the release happens on every exit path::

    with as_digit_array(value) as view:
        consume(view.negative, view.digits)
"""

from __future__ import annotations

from bigdigit_core.errors import ExportReleasedError
from bigdigit_metrics.metrics import _export_metrics_update, _free_metrics_update
from bigdigit_value.value import IntegerValue


class ExportView:
    __slots__ = ("_source", "_digits", "negative", "ndigits")

    def __init__(self, source: IntegerValue, negative: bool, ndigits: int, digits):
        self._source = source
        self._digits = digits
        self.negative = negative
        self.ndigits = ndigits

    @property
    def released(self) -> bool:
        return self._source is None

    @property
    def source(self) -> IntegerValue:
        if self._source is None:
            raise ExportReleasedError(operation="read source of")
        return self._source

    @property
    def digits(self):
        if self._source is None:
            raise ExportReleasedError(operation="read digits of")
        return self._digits

    def release(self) -> None:
        free_digit_array(self)

    def __enter__(self) -> "ExportView":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._source is not None:
            free_digit_array(self)

    def __repr__(self) -> str:
        if self._source is None:
            return "ExportView(released)"
        return f"ExportView(negative={self.negative}, ndigits={self.ndigits})"


def as_digit_array(value) -> ExportView:
    """Export sign and native digits of an integer without copying.

    Compact values are materialized into a fresh minimal digit array; array
    values expose a read-only view of their own storage. Raises
    DigitTypeMismatchError for non-integers.
    """
    source = IntegerValue.from_int(value)
    storage, materialized = source._digit_storage()
    digits = storage.view()
    digits.flags.writeable = False
    source._exports.acquire()
    _export_metrics_update(materialized=materialized)
    return ExportView(
        source=source,
        negative=source.negative,
        ndigits=int(digits.shape[0]),
        digits=digits,
    )


def free_digit_array(view: ExportView) -> None:
    """Release a view obtained from as_digit_array.

    Must be called exactly once per view; a second call raises
    ExportReleasedError.
    """
    source = view._source
    if source is None:
        raise ExportReleasedError(operation="free")
    view._source = None
    view._digits = None
    source._exports.release()
    _free_metrics_update()


__all__ = [
    "ExportView",
    "as_digit_array",
    "free_digit_array",
]
