"""Process-wide log handler setup for the daemon.

Log records go to the system logger under the ``anerd`` ident with the
daemon facility, and are mirrored to stderr.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anerd.config import AnerdConfig

logger = logging.getLogger("anerd")

_STDERR_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: AnerdConfig, verbose: bool = False) -> None:
    """Attach stderr and syslog handlers to the ``anerd`` logger.

    Calling this again replaces the handlers installed by the previous call.
    A missing syslog socket is not fatal; the daemon then logs to stderr only.

    Args:
        config: Provides ``syslog`` and ``syslog_address``.
        verbose: Log at DEBUG instead of INFO.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter(_STDERR_FORMAT))
    logger.addHandler(stream)

    if not config.syslog:
        return

    if not os.path.exists(config.syslog_address):
        logger.warning("Syslog unavailable at %s, logging to stderr only", config.syslog_address)
        return
    try:
        syslog = logging.handlers.SysLogHandler(
            address=config.syslog_address,
            facility=logging.handlers.SysLogHandler.LOG_DAEMON,
        )
    except OSError as exc:
        logger.warning("Syslog unavailable at %s (%s), logging to stderr only", config.syslog_address, exc)
        return
    syslog.ident = f"anerd[{os.getpid()}]: "
    syslog.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(syslog)
