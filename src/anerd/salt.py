"""Time-derived salt mixed into the pool alongside received bytes.

The salt is the product of the microsecond timestamps of two consecutive
receive events. Peers never see it, so even a peer replaying the same
payload cannot predict the exact bytes written into the pool. It is not
meant to be cryptographically strong.
"""

from __future__ import annotations

import struct
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

SALT_SIZE = 8
_SALT_MASK = (1 << 64) - 1
_SALT_FORMAT = "<Q"


def _now_usec() -> int:
    return time.time_ns() // 1000


class SaltGenerator:
    """Produces one salt value per call from the elapsed-time product.

    The seed timestamp is captured at construction, which is task startup.

    Args:
        clock: Returns the current time in microseconds. Defaults to the
            wall clock.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _now_usec
        self._last_usec = self._clock()

    def next(self) -> int:
        """Return the salt for the current event and remember its timestamp.

        Returns:
            The low 64 bits of ``previous_usec * current_usec``.
        """
        this_usec = self._clock()
        salt = (self._last_usec * this_usec) & _SALT_MASK
        self._last_usec = this_usec
        return salt


def encode_salt(salt: int) -> bytes:
    """Encode a salt as 8 little-endian bytes."""
    return struct.pack(_SALT_FORMAT, salt & _SALT_MASK)
