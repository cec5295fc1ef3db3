"""Logging subsystem for anerd.

Provides immutable per-datagram exchange records, a configurable event
logger with none/summary/full verbosity, and the syslog/stderr handler
setup used by the daemon.
"""

from anerd.logging.logger import ExchangeLogger, build_record
from anerd.logging.setup import setup_logging
from anerd.logging.types import ExchangeRecord

__all__ = [
    "ExchangeLogger",
    "ExchangeRecord",
    "build_record",
    "setup_logging",
]
