"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``PRICERELAY_``, nested via ``__``)
2. A ``.env`` file in the working directory, if present
3. YAML config file (``PRICERELAY_CONFIG_PATH`` env var)
4. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class DatabaseEngine(enum.StrEnum):
    """Supported database engines."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ServerConfig(BaseSettings):
    """Inbound HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="PRICERELAY_SERVER__",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 4000
    shutdown_timeout: float = 15.0


class DatabaseConfig(BaseSettings):
    """Subscriber store settings."""

    model_config = SettingsConfigDict(
        env_prefix="PRICERELAY_DB__",
        case_sensitive=False,
    )

    engine: DatabaseEngine = Field(
        default=DatabaseEngine.SQLITE,
        description="Database backend: sqlite or postgresql",
    )
    dsn: str = Field(
        default="sqlite+aiosqlite:///./price_relay.db",
        description="Async database connection string",
    )
    max_idle_connections: int = 5
    max_open_connections: int = 10
    ping_timeout: float = 5.0
    debug_sql: bool = False


class QuoteConfig(BaseSettings):
    """CoinMarketCap quote source settings."""

    model_config = SettingsConfigDict(
        env_prefix="PRICERELAY_QUOTE__",
        case_sensitive=False,
    )

    url: str = "https://pro-api.coinmarketcap.com"
    api_key: str = ""
    symbol: str = "BTC"
    convert: str = "USD"
    coin_id: int = 1
    timeout: float = 30.0


class SchedulerConfig(BaseSettings):
    """Relay loop settings (seconds)."""

    model_config = SettingsConfigDict(
        env_prefix="PRICERELAY_SCHEDULER__",
        case_sensitive=False,
    )

    enabled: bool = True
    interval: float = 600.0
    cycle_timeout: float = 10.0
    delivery_timeout: float = 10.0

    @field_validator("interval", "cycle_timeout", "delivery_timeout")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            msg = "must be greater than zero"
            raise ValueError(msg)
        return value


class WebhookConfig(BaseSettings):
    """Outbound webhook settings."""

    model_config = SettingsConfigDict(
        env_prefix="PRICERELAY_WEBHOOK__",
        case_sensitive=False,
    )

    timeout: float = 10.0
    test_message: str = "testing"
    validation_timeout: float = 5.0


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(
        env_prefix="PRICERELAY_METRICS__",
        case_sensitive=False,
    )

    enabled: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``PRICERELAY_`` prefix),
    an optional ``.env`` file, an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRICERELAY_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    debug: bool = False
    version: str = "0.1.0"
    log_level: str = "info"
    config_path: str = ""

    server: ServerConfig = Field(default_factory=ServerConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
    quote: QuoteConfig = Field(default_factory=QuoteConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
