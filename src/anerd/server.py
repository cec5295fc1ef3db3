"""Exchange server: mixes donated bytes into the pool and replies in kind.

For every inbound datagram the server:
    receive -> salt -> write(payload) -> write(salt) -> read(len(payload)) -> reply.

Datagrams are handled strictly one at a time in the order the socket
queue delivers them. Replies are framed by the explicit byte count the
pool returned, never by content, since pool output may contain zero bytes.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import TYPE_CHECKING

from anerd.exceptions import PoolUnavailableError
from anerd.logging.logger import ExchangeLogger
from anerd.logging.types import RECEIVED, TRANSMIT
from anerd.pool import open_pool
from anerd.salt import SaltGenerator, encode_salt
from anerd.transport import bind_socket

if TYPE_CHECKING:
    from anerd.config import AnerdConfig
    from anerd.pool.base import EntropyPool

logger = logging.getLogger("anerd")

INIT = "init"
BOUND = "bound"
LISTENING = "listening"
CLOSED = "closed"


class ExchangeServer:
    """Always-listening UDP responder that stirs the local entropy pool.

    Pool, socket, and salt generator may be injected; anything not injected
    is created by :meth:`open` and released by :meth:`close`.

    Args:
        config: Daemon configuration (port, size, bind address, ...).
        pool: Writable entropy pool.
        sock: UDP socket, already bound.
        salt: Salt generator. A fresh one seeds itself at :meth:`open`.
        exchange_logger: Receives one record per receive and reply event.
    """

    def __init__(
        self,
        config: AnerdConfig,
        pool: EntropyPool | None = None,
        sock: socket.socket | None = None,
        salt: SaltGenerator | None = None,
        exchange_logger: ExchangeLogger | None = None,
    ) -> None:
        self._config = config
        self._pool = pool
        self._sock = sock
        self._salt = salt
        self._owns_pool = pool is None
        self._owns_sock = sock is None
        self._log = exchange_logger or ExchangeLogger(config)
        self._buffer = bytearray()
        self.state = INIT

    @property
    def address(self) -> tuple[str, int]:
        """Local ``(host, port)`` the server socket is bound to."""
        if self._sock is None:
            raise RuntimeError("ExchangeServer is not open")
        host, port = self._sock.getsockname()[:2]
        return host, port

    def open(self, lock: threading.Lock | None = None) -> ExchangeServer:
        """Allocate the receive buffer, open the pool, and bind the socket.

        Everything acquired here is released again if a later step fails.

        Args:
            lock: Shared pool lock, used when pool access is serialized.

        Returns:
            ``self``, now in the ``bound`` state.

        Raises:
            PoolOpenError: If the pool device cannot be opened.
            SocketSetupError: If the socket cannot be created or bound.
        """
        if self.state != INIT:
            return self
        try:
            self._buffer = bytearray(self._config.size)
            if self._pool is None:
                self._pool = open_pool(self._config, writable=True, lock=lock)
            if self._sock is None:
                self._sock = bind_socket(self._config.bind_address, self._config.port)
            self._sock.settimeout(self._config.poll_interval)
            if self._salt is None:
                self._salt = SaltGenerator()
        except BaseException:
            self.close()
            raise
        self.state = BOUND
        logger.debug("Exchange server bound to %s:%d", *self.address)
        return self

    def receive(self) -> tuple[bytes, tuple[str, int]] | None:
        """Wait up to ``poll_interval`` for the next datagram.

        Returns:
            ``(payload, peer)`` where *payload* holds exactly the bytes
            received, or ``None`` if nothing arrived in time.

        Raises:
            OSError: On any socket error other than a timeout or an
                ICMP-reported one, such as a closed socket.
        """
        try:
            nbytes, peer = self._sock.recvfrom_into(self._buffer)
        except socket.timeout:
            return None
        except (ConnectionRefusedError, ConnectionResetError) as exc:
            # ICMP errors for earlier replies surface on the next receive.
            logger.warning("Receive failed: %s", exc)
            return None
        return bytes(memoryview(self._buffer)[:nbytes]), (peer[0], peer[1])

    def handle_datagram(self, payload: bytes, peer: tuple[str, int]) -> bytes | None:
        """Mix *payload* into the pool and send fresh pool output to *peer*.

        Args:
            payload: Bytes received from the peer.
            peer: ``(host, port)`` of the sender.

        Returns:
            The reply drawn from the pool, or ``None`` if mixing failed.
        """
        self._log.log_exchange(RECEIVED, payload, peer)
        salt = self._salt.next()
        try:
            self._pool.write(payload)
            self._pool.write(encode_salt(salt))
            reply = self._pool.read(len(payload))
        except PoolUnavailableError as exc:
            logger.error("Dropping datagram from %s:%d, pool unavailable: %s", peer[0], peer[1], exc)
            return None
        self._send_reply(reply, peer)
        return reply

    def _send_reply(self, reply: bytes, peer: tuple[str, int]) -> None:
        try:
            sent = self._sock.sendto(reply, peer)
        except OSError as exc:
            logger.warning("Reply of %d bytes to %s:%d failed: %s", len(reply), peer[0], peer[1], exc)
            return
        if sent != len(reply):
            logger.warning("Partial reply to %s:%d: sent %d of %d bytes", peer[0], peer[1], sent, len(reply))
        self._log.log_exchange(TRANSMIT, reply[:sent], peer)

    def serve_forever(self, stop_event: threading.Event | None = None) -> None:
        """Receive, mix, and reply until *stop_event* is set.

        The stop event is checked between datagrams and at least every
        ``poll_interval`` seconds while idle. An in-flight exchange always
        completes.

        Args:
            stop_event: Set to request shutdown. Without one the loop never ends.
        """
        if self.state == INIT:
            self.open()
        stop = stop_event or threading.Event()
        self.state = LISTENING
        logger.info("Exchange server listening on %s:%d", *self.address)
        while not stop.is_set():
            datagram = self.receive()
            if datagram is None:
                continue
            self.handle_datagram(*datagram)
        self.state = BOUND

    def close(self) -> None:
        """Release the socket and pool if this server created them."""
        if self._sock is not None and self._owns_sock:
            self._sock.close()
            self._sock = None
        if self._pool is not None and self._owns_pool:
            self._pool.close()
            self._pool = None
        self.state = CLOSED

    def __enter__(self) -> ExchangeServer:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()
