import gc
import threading
import weakref

import numpy as np
import pytest

from bigdigit_core.errors import DigitTypeMismatchError, ExportReleasedError
from bigdigit_interchange import exports as bd
from tests import harness

pytestmark = pytest.mark.core


def test_export_zero():
    with bd.as_digit_array(0) as view:
        assert view.negative is False
        assert view.ndigits == 0
        assert view.digits.shape == (0,)


def test_export_negative_power_round_trip():
    value = -(1 << 100)
    view = bd.as_digit_array(bd.IntegerValue.from_int(value))
    try:
        assert view.negative is True
        assert view.ndigits == len(harness.digits_of(value))
        assert view.digits.tolist() == harness.digits_of(value)
        writer, buf = bd.create(view.negative, view.ndigits)
        buf[:] = view.digits
        rebuilt = bd.finish(writer)
    finally:
        bd.free_digit_array(view)
    assert rebuilt == value


@pytest.mark.parametrize(
    "value", [0, 1, -1, 12345, -(1 << 62), 1 << 64, -(1 << 100), (1 << 3000) - 1]
)
def test_round_trip(value):
    original = bd.IntegerValue.from_int(value)
    rebuilt = harness.reimport(original)
    assert rebuilt == original
    assert int(rebuilt) == value
    assert rebuilt.is_compact == original.is_compact


def test_large_magnitude_exact():
    original = bd.IntegerValue.from_int(1 << 3000)
    rebuilt = harness.reimport(original)
    assert not rebuilt.is_compact
    assert rebuilt.negative is False
    assert np.array_equal(rebuilt.digits, original.digits)
    assert rebuilt.digits.dtype == original.digits.dtype


def test_array_export_is_zero_copy_and_read_only():
    value = bd.IntegerValue.from_int(1 << 500)
    with bd.as_digit_array(value) as view:
        assert np.shares_memory(view.digits, value.digits)
        assert not view.digits.flags.writeable
        with pytest.raises(ValueError):
            view.digits[0] = 1


def test_export_is_deterministic():
    for raw in (99, -(1 << 400)):
        value = bd.IntegerValue.from_int(raw)
        with bd.as_digit_array(value) as a, bd.as_digit_array(value) as b:
            assert a.negative == b.negative
            assert a.ndigits == b.ndigits
            assert np.array_equal(a.digits, b.digits)


def test_compact_and_array_exports_are_consistent():
    small = bd.IntegerValue.from_int(-((1 << 40) + 5))
    large = bd.IntegerValue.from_int(-((1 << 400) + 5))
    assert small.is_compact and not large.is_compact
    with bd.as_digit_array(small) as s, bd.as_digit_array(large) as g:
        for view, raw in ((s, -((1 << 40) + 5)), (g, -((1 << 400) + 5))):
            assert view.negative is True
            assert view.ndigits == view.digits.shape[0]
            assert view.digits.dtype == bd.get_native_layout().dtype
            assert view.digits[-1] != 0
            assert view.digits.tolist() == harness.digits_of(raw)
            assert not view.digits.flags.writeable


def test_view_keeps_source_alive():
    value = bd.IntegerValue.from_int(1 << 1000)
    ref = weakref.ref(value)
    view = bd.as_digit_array(value)
    del value
    gc.collect()
    assert ref() is not None
    assert view.source is ref()
    bd.free_digit_array(view)
    gc.collect()
    assert ref() is None


def test_free_invalidates_view_and_double_free_raises():
    value = bd.IntegerValue.from_int(1 << 100)
    view = bd.as_digit_array(value)
    assert value.export_count == 1
    bd.free_digit_array(view)
    assert value.export_count == 0
    assert view.released
    with pytest.raises(ExportReleasedError):
        view.digits
    with pytest.raises(ExportReleasedError) as excinfo:
        bd.free_digit_array(view)
    assert excinfo.value.kind == bd.ErrorKind.CONTRACT_VIOLATION


def test_context_manager_releases_on_error():
    value = bd.IntegerValue.from_int(1 << 100)
    with pytest.raises(KeyError):
        with bd.as_digit_array(value):
            assert value.export_count == 1
            raise KeyError("boom")
    assert value.export_count == 0


def test_context_manager_tolerates_explicit_release():
    value = bd.IntegerValue.from_int(3)
    with bd.as_digit_array(value) as view:
        view.release()
    assert value.export_count == 0


def test_export_accepts_subclass_and_int_protocol():
    class Tagged(bd.IntegerValue):
        pass

    tagged = Tagged.from_int(1 << 70)
    assert isinstance(tagged, Tagged)
    with bd.as_digit_array(tagged) as view:
        assert view.source is tagged
    with bd.as_digit_array(np.int32(-4)) as view:
        assert view.negative is True
        assert view.digits.tolist() == [4]


@pytest.mark.parametrize("bad", [2.0, "7", None, object()])
def test_export_rejects_non_integers(bad):
    with pytest.raises(DigitTypeMismatchError):
        bd.as_digit_array(bad)


def test_concurrent_exports_balance_refcount():
    value = bd.IntegerValue.from_int(1 << 2000)
    expected = value.digits.tolist()
    errors = []

    def _worker():
        for _ in range(200):
            with bd.as_digit_array(value) as view:
                if view.digits.tolist() != expected:
                    errors.append("mismatch")

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    assert value.export_count == 0
