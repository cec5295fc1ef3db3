"""anerd: Asynchronous Network Exchange Randomness Daemon.

Hosts on a local network stir each other's entropy pools: each host
periodically broadcasts some pool output, and every host that receives
it mixes the bytes (plus a private time-derived salt) into its own pool
and answers with fresh pool output.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("anerd")
except PackageNotFoundError:
    __version__ = "0.0.0"

from anerd.config import AnerdConfig, load_config
from anerd.exceptions import (
    AnerdError,
    ConfigValidationError,
    PoolOpenError,
    PoolUnavailableError,
    SocketSetupError,
)

__all__ = [
    "AnerdConfig",
    "AnerdError",
    "ConfigValidationError",
    "PoolOpenError",
    "PoolUnavailableError",
    "SocketSetupError",
    "__version__",
    "load_config",
]
