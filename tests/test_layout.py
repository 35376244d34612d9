import sys

import numpy as np
import pytest

from bigdigit_core.config import DigitConfig
from bigdigit_core.errors import DigitConfigError
from bigdigit_core.layout import LayoutDescriptor, _layout_for_bits
from bigdigit_core.modes import ValidateMode, coerce_validate_mode
from bigdigit_interchange import exports as bd

pytestmark = pytest.mark.core


def test_native_layout_is_stable_and_consistent():
    first = bd.get_native_layout()
    second = bd.get_native_layout()
    assert first is second
    assert first == second
    assert first.bits_per_digit <= 8 * first.digit_size
    assert first.digits_order in (-1, 1)
    assert first.digit_endianness in (-1, 1)


def test_native_layout_matches_platform():
    layout = bd.get_native_layout()
    assert layout.digits_order == -1
    expected = -1 if sys.byteorder == "little" else 1
    assert layout.digit_endianness == expected
    assert layout.dtype.itemsize == layout.digit_size
    assert layout.dtype == np.dtype(f"u{layout.digit_size}")


def test_native_layout_is_read_only():
    layout = bd.get_native_layout()
    with pytest.raises(AttributeError):
        layout.bits_per_digit = 8


@pytest.mark.parametrize("bits,size", [(30, 4), (15, 2)])
def test_supported_layouts(bits, size):
    layout = _layout_for_bits(bits)
    assert layout.digit_size == size
    assert layout.base == 1 << bits
    assert layout.mask == (1 << bits) - 1


def test_unsupported_layout_rejected():
    with pytest.raises(DigitConfigError):
        _layout_for_bits(16)
    with pytest.raises(DigitConfigError):
        LayoutDescriptor(bits_per_digit=33, digit_size=4, digits_order=-1, digit_endianness=-1)
    with pytest.raises(DigitConfigError):
        LayoutDescriptor(bits_per_digit=30, digit_size=4, digits_order=0, digit_endianness=-1)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("BIGDIGIT_DIGIT_BITS", "15")
    monkeypatch.setenv("BIGDIGIT_VALIDATE_MODE", "Trusted")
    cfg = DigitConfig.from_env()
    assert cfg.digit_bits == 15
    assert cfg.validate_mode == ValidateMode.TRUSTED


def test_config_defaults(monkeypatch):
    monkeypatch.delenv("BIGDIGIT_DIGIT_BITS", raising=False)
    monkeypatch.delenv("BIGDIGIT_VALIDATE_MODE", raising=False)
    cfg = DigitConfig.from_env()
    assert cfg.digit_bits == 30
    assert cfg.validate_mode == ValidateMode.STRICT


def test_config_rejects_bad_env(monkeypatch):
    monkeypatch.setenv("BIGDIGIT_DIGIT_BITS", "64")
    with pytest.raises(DigitConfigError) as excinfo:
        DigitConfig.from_env()
    assert excinfo.value.kind == bd.ErrorKind.INVALID_ARGUMENT


def test_coerce_validate_mode():
    assert coerce_validate_mode(None) == ValidateMode.STRICT
    assert coerce_validate_mode("strict") == ValidateMode.STRICT
    assert coerce_validate_mode(ValidateMode.TRUSTED) == ValidateMode.TRUSTED
    assert coerce_validate_mode("", default=ValidateMode.TRUSTED) == ValidateMode.TRUSTED
    with pytest.raises(DigitConfigError):
        coerce_validate_mode("fast")
