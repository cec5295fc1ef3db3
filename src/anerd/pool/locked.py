"""Mutex wrapper for pools whose resource is not safe for concurrent use.

``LockedPool`` wraps any other pool and serializes ``write()`` and
``read()`` with a lock. Device handles do not need it; the kernel already
serializes access to the random device.
"""

from __future__ import annotations

import threading
from typing import Any

from anerd.pool.base import EntropyPool


class LockedPool(EntropyPool):
    """Composition wrapper: forwards every call to *inner* under a lock.

    Args:
        inner: The pool to guard.
        lock: Lock to use. Handles that must exclude each other share one.
    """

    def __init__(self, inner: EntropyPool, lock: threading.Lock | None = None) -> None:
        self._inner = inner
        self._lock = lock if lock is not None else threading.Lock()

    @property
    def name(self) -> str:
        """Return ``'locked:<inner>'``."""
        return f"locked:{self._inner.name}"

    @property
    def inner(self) -> EntropyPool:
        return self._inner

    @property
    def is_available(self) -> bool:
        return self._inner.is_available

    def write(self, data: bytes) -> None:
        with self._lock:
            self._inner.write(data)

    def read(self, n: int) -> bytes:
        with self._lock:
            return self._inner.read(n)

    def close(self) -> None:
        with self._lock:
            self._inner.close()

    def health_check(self) -> dict[str, Any]:
        return {
            "pool": self.name,
            "healthy": self.is_available,
            "inner": self._inner.health_check(),
        }
