"""Exchange event logger.

Uses the standard ``logging`` module with the ``"anerd"`` logger. Summary
lines keep the daemon's traditional wording so existing syslog filters
keep matching. Supports three verbosity levels and an in-memory
diagnostic mode for post-hoc analysis.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

import numpy as np

from anerd.logging.types import DONATED, RECEIVED, TRANSMIT, ExchangeRecord

if TYPE_CHECKING:
    from anerd.config import AnerdConfig

logger = logging.getLogger("anerd")

_SUMMARY_FORMATS: dict[str, str] = {
    RECEIVED: "Received [%d] bytes from [%s:%d]",
    TRANSMIT: "Transmit [%d] bytes to [%s:%d]",
    DONATED: "Donated  [%d] bytes to [%s:%d]",
}


def build_record(
    event: str,
    payload: bytes,
    peer: tuple[str, int],
    with_mean: bool = True,
) -> ExchangeRecord:
    """Create an ExchangeRecord for *payload* exchanged with *peer*.

    Args:
        event: Event kind (``'received'``, ``'transmit'``, ``'donated'``).
        payload: The bytes received or sent.
        peer: ``(host, port)`` of the remote endpoint.
        with_mean: Compute the byte mean. When False the record carries
            ``byte_mean=0.0``.

    Returns:
        A new record stamped with the current time.
    """
    if payload and with_mean:
        byte_mean = float(np.frombuffer(payload, dtype=np.uint8).mean())
    else:
        byte_mean = 0.0
    return ExchangeRecord(
        timestamp_ns=time.time_ns(),
        event=event,
        nbytes=len(payload),
        host=peer[0],
        port=peer[1],
        byte_mean=byte_mean,
    )


class ExchangeLogger:
    """Per-datagram event logger.

    Log levels:
        ``"none"``: No logging output. Records are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per event with byte count and peer.

        ``"full"``: Full JSON dump of all record fields.
    """

    def __init__(self, config: AnerdConfig) -> None:
        self._log_level = config.log_level
        self._diagnostic_mode = config.diagnostic_mode
        self._records: list[ExchangeRecord] = []

    @property
    def keeps_detail(self) -> bool:
        """True if records are stored or dumped in full."""
        return self._diagnostic_mode or self._log_level == "full"

    def log_exchange(self, event: str, payload: bytes, peer: tuple[str, int]) -> None:
        """Build a record for *payload* and log it.

        The byte mean is only computed when :attr:`keeps_detail` is set.
        """
        self.log_event(build_record(event, payload, peer, with_mean=self.keeps_detail))

    def log_event(self, record: ExchangeRecord) -> None:
        """Log a single exchange event.

        Args:
            record: Immutable record of the event.
        """
        if self._diagnostic_mode:
            self._records.append(record)

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.info(
                _SUMMARY_FORMATS.get(record.event, record.event + " [%d] bytes [%s:%d]"),
                record.nbytes,
                record.host,
                record.port,
            )
        elif self._log_level == "full":
            logger.info("exchange_record: %s", json.dumps(asdict(record)))

    def get_diagnostic_data(self) -> list[ExchangeRecord]:
        """Return all stored records (requires ``diagnostic_mode=True``)."""
        return list(self._records)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute summary statistics over all stored records.

        Returns:
            Dictionary with per-event counts and byte totals, or an empty
            dict if no records were stored.
        """
        if not self._records:
            return {}

        stats: dict[str, Any] = {"total_events": len(self._records)}
        for event in (RECEIVED, TRANSMIT, DONATED):
            matching = [r for r in self._records if r.event == event]
            stats[f"{event}_count"] = len(matching)
            stats[f"{event}_bytes"] = sum(r.nbytes for r in matching)

        non_empty = [r for r in self._records if r.nbytes]
        if non_empty:
            weights = np.array([r.nbytes for r in non_empty], dtype=np.float64)
            means = np.array([r.byte_mean for r in non_empty], dtype=np.float64)
            stats["mean_byte_value"] = float(np.average(means, weights=weights))
        else:
            stats["mean_byte_value"] = 0.0
        stats["distinct_peers"] = len({(r.host, r.port) for r in self._records})
        return stats
