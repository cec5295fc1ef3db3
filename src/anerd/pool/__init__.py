"""Entropy pool subsystem for anerd.

Re-exports the ABC, the pool-type lookup, and the built-in pools
for convenient access::

    from anerd.pool import EntropyPool, open_pool, pool_class
    from anerd.pool import DevicePool, MemoryPool, LockedPool
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from anerd.pool.base import EntropyPool
from anerd.pool.device import DevicePool
from anerd.pool.locked import LockedPool
from anerd.pool.memory import MemoryPool
from anerd.pool.registry import pool_class, register_pool

if TYPE_CHECKING:
    import threading

    from anerd.config import AnerdConfig

logger = logging.getLogger("anerd")


def open_pool(
    config: AnerdConfig,
    writable: bool = True,
    lock: threading.Lock | None = None,
) -> EntropyPool:
    """Open the pool named by ``config.pool_type``.

    Args:
        config: Daemon configuration.
        writable: Open for mixing writes as well as reads.
        lock: Shared lock used when ``config.serialize_pool_access`` is set.

    Returns:
        An open pool, wrapped in :class:`LockedPool` when access must be
        serialized.

    Raises:
        PoolOpenError: If the underlying resource cannot be opened.
        ConfigValidationError: If ``config.pool_type`` is not registered.
    """
    pool = pool_class(config.pool_type).from_config(config, writable=writable)
    if config.serialize_pool_access:
        logger.debug("Serializing access to %s pool", pool.name)
        return LockedPool(pool, lock)
    return pool


__all__ = [
    "DevicePool",
    "EntropyPool",
    "LockedPool",
    "MemoryPool",
    "open_pool",
    "pool_class",
    "register_pool",
]
