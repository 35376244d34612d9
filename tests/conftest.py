import os
import sys

import pytest

# Count exports and writer outcomes in tests unless explicitly overridden.
os.environ.setdefault("BIGDIGIT_METRICS", "1")

import jax

# Ensure repo root and src/ are importable when pytest uses importlib mode.
ROOT = os.path.dirname(os.path.dirname(__file__))
for _path in (ROOT, os.path.join(ROOT, "src")):
    if _path not in sys.path:
        sys.path.insert(0, _path)

_MARKER_DESCRIPTIONS = {
    "core": "scalar layout/value/export/writer behavior",
    "batch": "jitted batch codec (runs on the JAX cpu device)",
}


def pytest_configure(config):
    for name, desc in _MARKER_DESCRIPTIONS.items():
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _set_default_device():
    with jax.default_device(jax.devices("cpu")[0]):
        yield


@pytest.fixture
def metrics():
    from bigdigit_metrics import metrics as _metrics

    _metrics.interchange_metrics_reset()
    yield _metrics
    _metrics.interchange_metrics_reset()
