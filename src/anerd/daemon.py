"""Runs the exchange server and the donor client side by side.

Both tasks are set up in the calling thread, so a fatal setup error is
raised before either loop starts. Each loop then runs in its own thread
with its own pool handle and socket. The only thing they share is the
config and the stop event.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from anerd.client import DonorClient
from anerd.server import ExchangeServer

if TYPE_CHECKING:
    from collections.abc import Callable

    from anerd.config import AnerdConfig

logger = logging.getLogger("anerd")

_JOIN_POLL_S = 0.5


class AnerdDaemon:
    """Owns the two exchange tasks and their lifecycle.

    Args:
        config: Shared configuration.
        server: Exchange server to run. Built from *config* if omitted.
        client: Donor client to run. Built from *config* if omitted.
    """

    def __init__(
        self,
        config: AnerdConfig,
        server: ExchangeServer | None = None,
        client: DonorClient | None = None,
    ) -> None:
        self._config = config
        self._stop = threading.Event()
        self._lock = threading.Lock() if config.serialize_pool_access else None
        self.server = server or ExchangeServer(config)
        self.client = client or DonorClient(config)
        self._threads: list[threading.Thread] = []
        self.errors: list[BaseException] = []

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    def start(self) -> None:
        """Open both tasks, then start their loops in background threads.

        Raises:
            PoolOpenError: If a pool device cannot be opened.
            SocketSetupError: If a socket cannot be created or bound.
        """
        try:
            self.server.open(lock=self._lock)
            self.client.open(lock=self._lock)
        except BaseException:
            self.close()
            raise

        if not self._config.donation_enabled:
            logger.warning("Donations disabled (interval=%d); only answering peers", self._config.interval)

        tasks: list[tuple[str, Callable[[threading.Event], None]]] = [
            ("anerd-server", self.server.serve_forever),
            ("anerd-client", self.client.run),
        ]
        for name, target in tasks:
            thread = threading.Thread(target=self._run_task, args=(name, target), name=name, daemon=True)
            self._threads.append(thread)
            thread.start()
        logger.info(
            "anerd started: device=%s port=%d size=%d interval=%d",
            self._config.device,
            self._config.port,
            self._config.size,
            self._config.interval,
        )

    def _run_task(self, name: str, target: Callable[[threading.Event], None]) -> None:
        try:
            target(self._stop)
        except Exception as exc:
            logger.exception("Task %s failed", name)
            self.errors.append(exc)
            self._stop.set()

    def stop(self) -> None:
        """Ask both loops to finish their current step and exit."""
        self._stop.set()

    def wait(self) -> int:
        """Block until every task thread has exited, then release resources.

        Joins in short slices so signal handlers keep running in the main
        thread.

        Returns:
            0 after a clean stop, 1 if a task died with an error.
        """
        while any(thread.is_alive() for thread in self._threads):
            for thread in self._threads:
                thread.join(timeout=_JOIN_POLL_S)
        self.close()
        return 1 if self.errors else 0

    def close(self) -> None:
        self.server.close()
        self.client.close()

    def __enter__(self) -> AnerdDaemon:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
        self.wait()
