"""Donor client: periodically broadcasts pool output to the local network.

Each round draws ``size`` bytes from the pool and sends them to the
broadcast address on the exchange port, which prompts every listening
exchange server to mix them in and answer. Answers are not read.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from anerd.exceptions import PoolUnavailableError
from anerd.logging.logger import ExchangeLogger
from anerd.logging.types import DONATED
from anerd.pool import open_pool
from anerd.transport import broadcast_socket

if TYPE_CHECKING:
    import socket

    from anerd.config import AnerdConfig
    from anerd.pool.base import EntropyPool

logger = logging.getLogger("anerd")


class DonorClient:
    """Broadcasts a donation every ``interval`` seconds.

    Pool and socket may be injected; anything not injected is created by
    :meth:`open` and released by :meth:`close`.

    Args:
        config: Daemon configuration (port, size, interval, broadcast address).
        pool: Entropy pool to draw donations from.
        sock: UDP socket with broadcast enabled.
        exchange_logger: Receives one record per donation.
    """

    def __init__(
        self,
        config: AnerdConfig,
        pool: EntropyPool | None = None,
        sock: socket.socket | None = None,
        exchange_logger: ExchangeLogger | None = None,
    ) -> None:
        self._config = config
        self._pool = pool
        self._sock = sock
        self._owns_pool = pool is None
        self._owns_sock = sock is None
        self._log = exchange_logger or ExchangeLogger(config)
        self._destination = (config.broadcast_address, config.port)
        self._opened = False
        self.rounds = 0

    @property
    def destination(self) -> tuple[str, int]:
        return self._destination

    def open(self, lock: threading.Lock | None = None) -> DonorClient:
        """Create the broadcast socket and open the pool for reading.

        Raises:
            PoolOpenError: If the pool device cannot be opened.
            SocketSetupError: If the socket cannot be created or configured.
        """
        if self._opened:
            return self
        try:
            if self._sock is None:
                self._sock = broadcast_socket()
            if self._pool is None:
                self._pool = open_pool(self._config, writable=False, lock=lock)
        except BaseException:
            self.close()
            raise
        self._opened = True
        return self

    def run_round(self) -> int:
        """Draw one donation from the pool and broadcast it.

        A pool read that yields nothing skips the round.

        Returns:
            Number of bytes handed to the transport (0 if skipped or failed).
        """
        self.rounds += 1
        try:
            data = self._pool.read(self._config.size)
        except PoolUnavailableError as exc:
            logger.warning("Skipping donation round: %s", exc)
            return 0
        if not data:
            logger.warning("Skipping donation round: entropy pool returned no data")
            return 0

        host, port = self._destination
        try:
            sent = self._sock.sendto(data, self._destination)
        except OSError as exc:
            logger.warning("Donation of %d bytes to %s:%d failed: %s", len(data), host, port, exc)
            return 0
        if sent != len(data):
            logger.warning("Partial donation to %s:%d: sent %d of %d bytes", host, port, sent, len(data))
        self._log.log_exchange(DONATED, data[:sent], self._destination)
        return sent

    def run(self, stop_event: threading.Event | None = None) -> None:
        """Run donation rounds until *stop_event* is set.

        A non-positive interval means no round is ever run.

        Args:
            stop_event: Set to request shutdown. Its ``wait()`` is the
                inter-round sleep, so setting it also cuts a sleep short.
        """
        if not self._opened:
            self.open()
        interval = self._config.interval
        if interval <= 0:
            logger.warning("Donation interval is %d; donor client will not donate", interval)
            return
        stop = stop_event or threading.Event()
        while not stop.is_set():
            self.run_round()
            if stop.wait(interval):
                break

    def close(self) -> None:
        """Release the socket and pool if this client created them."""
        if self._sock is not None and self._owns_sock:
            self._sock.close()
            self._sock = None
        if self._pool is not None and self._owns_pool:
            self._pool.close()
            self._pool = None
        self._opened = False

    def __enter__(self) -> DonorClient:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()
