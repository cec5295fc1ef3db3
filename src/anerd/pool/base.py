"""Abstract base class for all entropy pools.

An entropy pool is a thin handle on a randomness resource that can be
stirred (``write``) and drawn from (``read``). The server and the donor
each hold their own handle; no buffering happens at this layer, so every
call reaches the underlying resource. Subclasses must implement the five
abstract members: ``name``, ``is_available``, ``write()``, ``read()``, and
``close()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from anerd.config import AnerdConfig


class EntropyPool(ABC):
    """Abstract base for all entropy pools.

    Writes always influence subsequent reads. How bytes are mixed is up to
    the resource behind the pool, not to this interface.
    """

    @classmethod
    def from_config(cls, config: AnerdConfig, writable: bool = True) -> EntropyPool:
        """Build a pool from configuration.

        The default ignores *config* and calls the no-argument constructor.
        Pools that need a device path or other settings override this.

        Args:
            config: Daemon configuration.
            writable: Whether the caller will write to the pool.

        Returns:
            An open pool.
        """
        return cls()

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable pool identifier (e.g., ``'device'``, ``'memory'``)."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the pool handle is open and usable."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Mix *data* into the pool state.

        Args:
            data: Raw bytes to mix in. May be empty.

        Raises:
            PoolUnavailableError: If the resource cannot be written.
        """

    @abstractmethod
    def read(self, n: int) -> bytes:
        """Return up to *n* bytes of pool output.

        Callers must tolerate short reads, including an empty result.

        Args:
            n: Maximum number of bytes to return.

        Returns:
            Between 0 and *n* bytes.

        Raises:
            PoolUnavailableError: If the resource cannot be read.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the handle. Safe to call more than once."""

    def health_check(self) -> dict[str, Any]:
        """Return a status dictionary for this pool.

        Returns:
            Dictionary with at least ``'pool'`` and ``'healthy'`` keys.
        """
        return {"pool": self.name, "healthy": self.is_available}

    def __enter__(self) -> EntropyPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
