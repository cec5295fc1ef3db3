"""Configuration system for anerd.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (ANERD_*) -> .env file -> field defaults.

The resulting config is frozen. Both the exchange server and the donor
client receive the same instance at construction and never mutate it.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from anerd.exceptions import ConfigValidationError

# Largest UDP payload an IPv4 datagram can carry: 65535 - 8 (UDP) - 20 (IP).
MAX_DATAGRAM_SIZE = 65507

_LOG_LEVELS: frozenset[str] = frozenset({"none", "summary", "full"})


class AnerdConfig(BaseSettings):
    """Configuration for the anerd daemon.

    Resolution order: init kwargs -> env vars (ANERD_*) -> .env file -> defaults.

    Fields are divided into three groups:
    - **Exchange**: device path, port, payload size, donation interval.
    - **Transport**: bind and broadcast addresses, cancellation polling.
    - **Logging**: verbosity, diagnostic mode, syslog target.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANERD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # --- Exchange ---

    device: str = Field(
        default="/dev/urandom",
        description="Path of the randomness device backing the entropy pool",
    )
    port: int = Field(
        default=26373,
        description="UDP port used for both listening and broadcasting",
    )
    size: int = Field(
        default=64,
        description="Payload size in bytes for donations and the receive buffer",
    )
    interval: int = Field(
        default=60,
        description="Seconds between donation rounds (<=0 disables donating)",
    )
    pool_type: str = Field(
        default="device",
        description="Entropy pool implementation: 'device' or 'memory'",
    )
    serialize_pool_access: bool = Field(
        default=False,
        description="Guard pool reads/writes with a mutex",
    )

    # --- Transport ---

    bind_address: str = Field(
        default="0.0.0.0",
        description="Local address the exchange server binds to",
    )
    broadcast_address: str = Field(
        default="255.255.255.255",
        description="Destination address for donations",
    )
    poll_interval: float = Field(
        default=1.0,
        description="Seconds between stop checks while blocked on receive",
    )

    # --- Logging ---

    log_level: str = Field(
        default="summary",
        description="Exchange logging verbosity: 'none', 'summary', 'full'",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Keep all exchange records in memory for analysis",
    )
    syslog: bool = Field(
        default=True,
        description="Send log records to the system logger",
    )
    syslog_address: str = Field(
        default="/dev/log",
        description="Unix socket path of the system logger",
    )

    @field_validator("size")
    @classmethod
    def _check_size(cls, value: int) -> int:
        if not 1 <= value <= MAX_DATAGRAM_SIZE:
            raise ValueError(f"size must be between 1 and {MAX_DATAGRAM_SIZE}, got {value}")
        return value

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 <= value <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {value}")
        return value

    @field_validator("poll_interval")
    @classmethod
    def _check_poll_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"poll_interval must be positive, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if value not in _LOG_LEVELS:
            allowed = ", ".join(sorted(_LOG_LEVELS))
            raise ValueError(f"log_level must be one of {allowed}, got {value!r}")
        return value

    @field_validator("pool_type")
    @classmethod
    def _check_pool_type(cls, value: str) -> str:
        if not value:
            raise ValueError("pool_type must not be empty")
        return value

    @property
    def donation_enabled(self) -> bool:
        """Whether the donor loop will run any rounds at all."""
        return self.interval > 0


def load_config(**overrides: Any) -> AnerdConfig:
    """Build a config from overrides, environment, and defaults.

    Overrides whose value is ``None`` are dropped so that unset CLI options
    fall through to the environment and defaults.

    Args:
        **overrides: Field values taking precedence over all other layers.

    Returns:
        A frozen AnerdConfig.

    Raises:
        ConfigValidationError: If any field fails validation.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return AnerdConfig(**values)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc
