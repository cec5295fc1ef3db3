"""Device-backed entropy pool, e.g. ``/dev/urandom``.

Writes to the kernel random device mix the bytes into the kernel pool;
reads return fresh pool output. The handle is opened unbuffered so every
call is forwarded to the device as it happens.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from anerd.exceptions import PoolOpenError, PoolUnavailableError
from anerd.pool.base import EntropyPool
from anerd.pool.registry import register_pool

if TYPE_CHECKING:
    from anerd.config import AnerdConfig

logger = logging.getLogger("anerd")


@register_pool("device")
class DevicePool(EntropyPool):
    """Unbuffered handle on a randomness device.

    No locking is done here. Two handles on the same device rely on the
    kernel to serialize access.

    Args:
        path: Device path to open.
        writable: Open for reading and writing (server) instead of
            read-only (donor).

    Raises:
        PoolOpenError: If *path* cannot be opened with the requested mode.
    """

    def __init__(self, path: str = "/dev/urandom", writable: bool = True) -> None:
        self._path = path
        self._writable = writable
        mode = "r+b" if writable else "rb"
        try:
            self._fh = open(path, mode, buffering=0)  # noqa: SIM115
        except OSError as exc:
            raise PoolOpenError(f"Cannot open entropy device {path!r}: {exc}") from exc
        logger.debug("Opened entropy device %s (mode=%s)", path, mode)

    @classmethod
    def from_config(cls, config: AnerdConfig, writable: bool = True) -> DevicePool:
        return cls(config.device, writable=writable)

    @property
    def name(self) -> str:
        """Return ``'device'``."""
        return "device"

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_available(self) -> bool:
        return not self._fh.closed

    def write(self, data: bytes) -> None:
        """Write all of *data* to the device.

        Raises:
            PoolUnavailableError: If the handle is read-only, closed, or the
                write fails.
        """
        if not self._writable:
            raise PoolUnavailableError(f"Entropy device {self._path!r} was opened read-only")
        view = memoryview(data)
        try:
            while view:
                written = self._fh.write(view)
                if not written:
                    raise PoolUnavailableError(f"Entropy device {self._path!r} accepted no bytes")
                view = view[written:]
        except (OSError, ValueError) as exc:
            raise PoolUnavailableError(f"Write to {self._path!r} failed: {exc}") from exc

    def read(self, n: int) -> bytes:
        """Read up to *n* bytes from the device in a single call."""
        if n <= 0:
            return b""
        try:
            data = self._fh.read(n)
        except (OSError, ValueError) as exc:
            raise PoolUnavailableError(f"Read from {self._path!r} failed: {exc}") from exc
        return data or b""

    def close(self) -> None:
        self._fh.close()

    def health_check(self) -> dict[str, Any]:
        return {
            "pool": self.name,
            "healthy": self.is_available,
            "path": self._path,
            "writable": self._writable,
        }
