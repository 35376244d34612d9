"""Single control surface for digit interchange exports."""

from bigdigit_core import config as _config
from bigdigit_core import errors as _errors
from bigdigit_core import layout as _layout
from bigdigit_core import modes as _modes
from bigdigit_interchange import batch as _batch
from bigdigit_interchange import export as _export
from bigdigit_interchange import writer as _writer
from bigdigit_value import value as _value

_SOURCES = (_layout, _value, _export, _writer, _batch, _modes, _config, _errors)

__all__ = [
    "LayoutDescriptor",
    "NATIVE_LAYOUT",
    "get_native_layout",
    "IntegerValue",
    "ExportView",
    "as_digit_array",
    "free_digit_array",
    "Writer",
    "WriterState",
    "WriterConfig",
    "DEFAULT_WRITER_CONFIG",
    "create",
    "finish",
    "finish_cfg",
    "discard",
    "DigitMatrix",
    "RowsNormalized",
    "normalize_rows",
    "pack_values",
    "unpack_matrix",
    "ValidateMode",
    "DigitConfig",
    "DEFAULT_DIGIT_CONFIG",
    "ErrorKind",
    "DigitTypeMismatchError",
    "DigitInvalidArgumentError",
    "DigitRangeError",
    "DigitAllocationError",
    "WriterStateError",
    "ExportReleasedError",
    "DigitConfigError",
]

for _name in __all__:
    for _module in _SOURCES:
        if hasattr(_module, _name):
            globals()[_name] = getattr(_module, _name)
            break
    else:
        raise ImportError(f"bigdigit export missing: {_name}")
