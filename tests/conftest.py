"""Shared pytest fixtures for anerd tests.

Provides a quiet default configuration, a scripted entropy pool double
that records every write and read, and a fake UDP socket that records
sends and replays queued datagrams.
"""

from __future__ import annotations

import logging
import socket
from collections import deque
from collections.abc import Callable, Iterator

import pytest

from anerd.config import AnerdConfig
from anerd.exceptions import PoolUnavailableError
from anerd.pool.base import EntropyPool


class ScriptedPool(EntropyPool):
    """Test double: records writes, returns scripted reads.

    Reads pop the next scripted chunk (truncated to the requested size).
    Once the script is exhausted, reads return *fill* repeated to size.
    """

    def __init__(self, reads: list[bytes] | None = None, fill: bytes = b"\x00") -> None:
        self._reads = deque(reads or [])
        self._fill = fill
        self.writes: list[bytes] = []
        self.read_sizes: list[int] = []
        self.fail = False
        self.closed = False

    @property
    def name(self) -> str:
        return "scripted"

    @property
    def is_available(self) -> bool:
        return not self.closed

    def write(self, data: bytes) -> None:
        if self.fail:
            raise PoolUnavailableError("scripted failure")
        self.writes.append(bytes(data))

    def read(self, n: int) -> bytes:
        if self.fail:
            raise PoolUnavailableError("scripted failure")
        self.read_sizes.append(n)
        if self._reads:
            return self._reads.popleft()[:n]
        return (self._fill * n)[:n]

    def close(self) -> None:
        self.closed = True


class FakeSocket:
    """Test double for a UDP socket.

    ``recvfrom_into`` replays queued ``(payload, peer)`` pairs; when the
    queue is empty it calls *on_empty* (if any) and raises ``socket.timeout``.
    Setting *recv_error* makes every receive raise that error instead.
    """

    def __init__(self, sockname: tuple[str, int] = ("0.0.0.0", 26373)) -> None:
        self.inbox: deque[tuple[bytes, tuple[str, int]]] = deque()
        self.sent: list[tuple[bytes, tuple[str, int]]] = []
        self.sockname = sockname
        self.timeout: float | None = None
        self.short_by = 0
        self.send_error: OSError | None = None
        self.on_empty: Callable[[], None] | None = None
        self.recv_error: OSError | None = None
        self.recv_calls = 0
        self.closed = False

    def settimeout(self, value: float | None) -> None:
        self.timeout = value

    def getsockname(self) -> tuple[str, int]:
        return self.sockname

    def recvfrom_into(self, buffer: bytearray) -> tuple[int, tuple[str, int]]:
        self.recv_calls += 1
        if self.recv_error is not None:
            raise self.recv_error
        if not self.inbox:
            if self.on_empty is not None:
                self.on_empty()
            raise socket.timeout("timed out")
        payload, peer = self.inbox.popleft()
        nbytes = min(len(payload), len(buffer))
        buffer[:nbytes] = payload[:nbytes]
        return nbytes, peer

    def sendto(self, data: bytes, address: tuple[str, int]) -> int:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((bytes(data), address))
        return max(len(data) - self.short_by, 0)

    def close(self) -> None:
        self.closed = True


class FakeStopEvent:
    """Stop event whose ``wait()`` records the timeout instead of sleeping.

    ``wait()`` returns True (stop requested) after *rounds* calls.
    """

    def __init__(self, rounds: int = 1) -> None:
        self._rounds = rounds
        self.waits: list[float] = []

    def is_set(self) -> bool:
        return len(self.waits) >= self._rounds

    def set(self) -> None:
        self._rounds = 0

    def wait(self, timeout: float | None = None) -> bool:
        self.waits.append(timeout)
        return self.is_set()


@pytest.fixture(autouse=True)
def _restore_anerd_logger() -> Iterator[None]:
    """Undo handler changes made by setup_logging() so caplog keeps working."""
    log = logging.getLogger("anerd")
    handlers = list(log.handlers)
    level = log.level
    propagate = log.propagate
    yield
    for handler in list(log.handlers):
        if handler not in handlers:
            log.removeHandler(handler)
            handler.close()
    log.setLevel(level)
    log.propagate = propagate


@pytest.fixture
def config() -> AnerdConfig:
    """Return a config with an 8-byte payload, in-memory pool, and no syslog."""
    return AnerdConfig(
        _env_file=None,
        size=8,
        pool_type="memory",
        syslog=False,
        poll_interval=0.05,
    )  # type: ignore[call-arg]


@pytest.fixture
def scripted_pool() -> ScriptedPool:
    return ScriptedPool()


@pytest.fixture
def fake_socket() -> FakeSocket:
    return FakeSocket()


@pytest.fixture
def counter_clock() -> Callable[[], int]:
    """Return a microsecond clock that advances by 1000us per call from 1_000_000."""
    state = {"now": 1_000_000}

    def clock() -> int:
        state["now"] += 1000
        return state["now"]

    return clock


@pytest.fixture
def make_pool() -> Callable[..., ScriptedPool]:
    """Return a factory for ScriptedPool with scripted reads."""
    return ScriptedPool


@pytest.fixture
def make_stop_event() -> Callable[..., FakeStopEvent]:
    """Return a factory for FakeStopEvent stopping after N waits."""
    return FakeStopEvent
