from __future__ import annotations

import threading

from bigdigit_core.errors import ExportReleasedError


class RefCount:
    """Explicit pin count, safe under concurrent acquire/release.

    Python references keep the object alive; this count records how many
    export views currently pin it so release discipline can be checked.
    """

    __slots__ = ("_count", "_lock")

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    def acquire(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    def release(self) -> int:
        with self._lock:
            if self._count <= 0:
                raise ExportReleasedError(operation="release")
            self._count -= 1
            return self._count

    @property
    def count(self) -> int:
        return self._count


__all__ = ["RefCount"]
