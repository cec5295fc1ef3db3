"""Data types for the exchange logging subsystem."""

from __future__ import annotations

from dataclasses import dataclass

RECEIVED = "received"
TRANSMIT = "transmit"
DONATED = "donated"


@dataclass(frozen=True, slots=True)
class ExchangeRecord:
    """Immutable record of a single datagram event.

    Attributes:
        timestamp_ns: Wall-clock time of the event (nanoseconds since epoch).
        event: One of ``'received'``, ``'transmit'``, ``'donated'``.
        nbytes: Payload byte count actually received or sent.
        host: Peer IP address (sender or destination).
        port: Peer UDP port.
        byte_mean: Mean byte value of the payload (~127.5 for random data).
    """

    timestamp_ns: int
    event: str
    nbytes: int
    host: str
    port: int
    byte_mean: float
