"""Tests for DevicePool."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from anerd.config import AnerdConfig
from anerd.exceptions import PoolOpenError, PoolUnavailableError
from anerd.pool.device import DevicePool


class TestDevicePoolOpen:
    """Opening the underlying resource."""

    def test_missing_path_raises_pool_open_error(self, tmp_path: Path) -> None:
        with pytest.raises(PoolOpenError, match="missing"):
            DevicePool(str(tmp_path / "missing"))

    def test_missing_path_read_only_raises(self, tmp_path: Path) -> None:
        with pytest.raises(PoolOpenError):
            DevicePool(str(tmp_path / "missing"), writable=False)

    def test_directory_raises_pool_open_error(self, tmp_path: Path) -> None:
        with pytest.raises(PoolOpenError):
            DevicePool(str(tmp_path))

    def test_pool_open_error_is_pool_unavailable(self, tmp_path: Path) -> None:
        with pytest.raises(PoolUnavailableError):
            DevicePool(str(tmp_path / "missing"))

    def test_from_config_uses_device_path(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"abc")
        cfg = AnerdConfig(_env_file=None, device=str(dev))  # type: ignore[call-arg]
        pool = DevicePool.from_config(cfg, writable=False)
        try:
            assert pool.path == str(dev)
            assert pool.read(3) == b"abc"
        finally:
            pool.close()


class TestDevicePoolIO:
    """Reads and writes are forwarded unbuffered to the file."""

    def test_read_returns_up_to_n(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"0123456789")
        with DevicePool(str(dev), writable=False) as pool:
            assert pool.read(4) == b"0123"
            assert pool.read(100) == b"456789"

    def test_short_read_at_end_is_empty(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"")
        with DevicePool(str(dev), writable=False) as pool:
            assert pool.read(8) == b""

    def test_read_zero(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"xyz")
        with DevicePool(str(dev), writable=False) as pool:
            assert pool.read(0) == b""

    def test_write_reaches_file_immediately(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"")
        with DevicePool(str(dev)) as pool:
            pool.write(b"\x00\x01\x02")
            # No buffering: visible to another reader before close.
            assert dev.read_bytes() == b"\x00\x01\x02"

    def test_write_on_read_only_handle_raises(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"")
        with DevicePool(str(dev), writable=False) as pool, pytest.raises(PoolUnavailableError):
            pool.write(b"abc")

    def test_read_after_close_raises(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"abc")
        pool = DevicePool(str(dev), writable=False)
        pool.close()
        with pytest.raises(PoolUnavailableError):
            pool.read(1)

    def test_close_is_idempotent(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"")
        pool = DevicePool(str(dev))
        pool.close()
        pool.close()
        assert pool.is_available is False

    @pytest.mark.skipif(not os.path.exists("/dev/urandom"), reason="no /dev/urandom")
    def test_urandom_read(self) -> None:
        with DevicePool("/dev/urandom", writable=False) as pool:
            data = pool.read(32)
        assert len(data) == 32


class TestDevicePoolHealth:
    def test_health_check(self, tmp_path: Path) -> None:
        dev = tmp_path / "dev"
        dev.write_bytes(b"")
        pool = DevicePool(str(dev))
        health = pool.health_check()
        assert health == {"pool": "device", "healthy": True, "path": str(dev), "writable": True}
        pool.close()
        assert pool.health_check()["healthy"] is False
