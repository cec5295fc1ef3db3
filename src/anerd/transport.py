"""UDP socket construction for the exchange server and the donor client.

Both helpers translate ``OSError`` into :class:`SocketSetupError` so the
caller can treat every socket setup problem as one fatal startup error.
"""

from __future__ import annotations

import socket

from anerd.exceptions import SocketSetupError


def bind_socket(address: str, port: int) -> socket.socket:
    """Create a UDP socket bound to ``(address, port)``.

    Raises:
        SocketSetupError: If the socket cannot be created or bound.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as exc:
        raise SocketSetupError(f"Cannot create UDP socket: {exc}") from exc
    try:
        sock.bind((address, port))
    except OSError as exc:
        sock.close()
        raise SocketSetupError(f"Cannot bind UDP socket to {address}:{port}: {exc}") from exc
    return sock


def broadcast_socket() -> socket.socket:
    """Create an unbound UDP socket allowed to send to broadcast addresses.

    Raises:
        SocketSetupError: If the socket cannot be created or configured.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as exc:
        raise SocketSetupError(f"Cannot create UDP socket: {exc}") from exc
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
    except OSError as exc:
        sock.close()
        raise SocketSetupError(f"Cannot enable broadcast on UDP socket: {exc}") from exc
    return sock
