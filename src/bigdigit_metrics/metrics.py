import os

_exports = 0
_frees = 0
_materialized = 0
_writers_created = 0
_writers_finished = 0
_writers_discarded = 0
_finish_compact = 0
_finish_array = 0


def _interchange_metrics_enabled():
    value = os.environ.get("BIGDIGIT_METRICS", "").strip().lower()
    return value in ("1", "true", "yes", "on")


def interchange_metrics_reset():
    global _exports
    global _frees
    global _materialized
    global _writers_created
    global _writers_finished
    global _writers_discarded
    global _finish_compact
    global _finish_array
    _exports = 0
    _frees = 0
    _materialized = 0
    _writers_created = 0
    _writers_finished = 0
    _writers_discarded = 0
    _finish_compact = 0
    _finish_array = 0


def interchange_metrics_get():
    if not _interchange_metrics_enabled():
        return {
            "exports": 0,
            "frees": 0,
            "live_exports": 0,
            "materialized": 0,
            "writers_created": 0,
            "writers_finished": 0,
            "writers_discarded": 0,
            "finish_compact": 0,
            "finish_array": 0,
        }
    return {
        "exports": int(_exports),
        "frees": int(_frees),
        "live_exports": int(_exports - _frees),
        "materialized": int(_materialized),
        "writers_created": int(_writers_created),
        "writers_finished": int(_writers_finished),
        "writers_discarded": int(_writers_discarded),
        "finish_compact": int(_finish_compact),
        "finish_array": int(_finish_array),
    }


def _export_metrics_update(*, materialized: bool):
    global _exports
    global _materialized
    if not _interchange_metrics_enabled():
        return
    _exports += 1
    _materialized += int(materialized)


def _free_metrics_update():
    global _frees
    if not _interchange_metrics_enabled():
        return
    _frees += 1


def _writer_metrics_update(event: str, *, compact: bool = False):
    global _writers_created
    global _writers_finished
    global _writers_discarded
    global _finish_compact
    global _finish_array
    if not _interchange_metrics_enabled():
        return
    if event == "create":
        _writers_created += 1
    elif event == "finish":
        _writers_finished += 1
        if compact:
            _finish_compact += 1
        else:
            _finish_array += 1
    elif event == "discard":
        _writers_discarded += 1
    else:
        raise ValueError(f"unknown writer metrics event: {event!r}")


__all__ = [
    "interchange_metrics_reset",
    "interchange_metrics_get",
    "_interchange_metrics_enabled",
    "_export_metrics_update",
    "_free_metrics_update",
    "_writer_metrics_update",
]
