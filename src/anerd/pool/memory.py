"""In-process entropy pool for tests and dry runs.

The pool state is a SHA-256 digest chained over everything written to it,
so any write changes every later read. It carries no real entropy.

Handles opened through :meth:`MemoryPool.from_config` behave like handles
on one device: every handle for the same ``config.device`` key shares a
single state seeded from ``os.urandom``, so the exchange server's writes
reach what the donor client reads next. A ``MemoryPool`` built directly
owns a private state and is deterministic for a given seed.
"""

from __future__ import annotations

import hashlib
import os
import threading
from typing import TYPE_CHECKING

from anerd.exceptions import PoolUnavailableError
from anerd.pool.base import EntropyPool
from anerd.pool.registry import register_pool

if TYPE_CHECKING:
    from anerd.config import AnerdConfig


class _ChainState:
    """Digest chain plus the lock guarding its read-modify-write steps."""

    def __init__(self, seed: bytes) -> None:
        self.digest = hashlib.sha256(b"anerd-memory-pool" + seed).digest()
        self.lock = threading.Lock()

    def mix(self, data: bytes) -> None:
        with self.lock:
            self.digest = hashlib.sha256(self.digest + b"w" + data).digest()

    def draw(self, n: int) -> bytes:
        with self.lock:
            out = bytearray()
            counter = 0
            while len(out) < n:
                out += hashlib.sha256(self.digest + counter.to_bytes(8, "little")).digest()
                counter += 1
            # Reads also advance the state so two reads never repeat.
            self.digest = hashlib.sha256(self.digest + b"r").digest()
        return bytes(out[:n])


_shared_states: dict[str, _ChainState] = {}
_shared_states_lock = threading.Lock()


def _shared_state(key: str) -> _ChainState:
    with _shared_states_lock:
        state = _shared_states.get(key)
        if state is None:
            state = _shared_states[key] = _ChainState(os.urandom(32))
        return state


@register_pool("memory")
class MemoryPool(EntropyPool):
    """Hash-chained pool living entirely in memory.

    Args:
        seed: Initial material for a private state. Pools with the same
            seed produce the same output for the same sequence of writes.
        state: Existing state to share with other handles. Overrides *seed*.
    """

    def __init__(self, seed: bytes = b"", state: _ChainState | None = None) -> None:
        self._state = state or _ChainState(seed)
        self._closed = False
        self.bytes_written = 0
        self.bytes_read = 0

    @classmethod
    def from_config(cls, config: AnerdConfig, writable: bool = True) -> MemoryPool:
        return cls(state=_shared_state(config.device))

    @property
    def name(self) -> str:
        """Return ``'memory'``."""
        return "memory"

    @property
    def is_available(self) -> bool:
        return not self._closed

    def write(self, data: bytes) -> None:
        self._check_open()
        self._state.mix(bytes(data))
        self.bytes_written += len(data)

    def read(self, n: int) -> bytes:
        self._check_open()
        if n <= 0:
            return b""
        out = self._state.draw(n)
        self.bytes_read += n
        return out

    def close(self) -> None:
        """Close this handle. The shared state stays available to others."""
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise PoolUnavailableError("MemoryPool is closed")
