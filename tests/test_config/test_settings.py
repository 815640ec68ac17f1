"""Tests for the configuration system."""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from price_relay.config.settings import (
    AppConfig,
    DatabaseConfig,
    DatabaseEngine,
    MetricsConfig,
    QuoteConfig,
    SchedulerConfig,
    ServerConfig,
    WebhookConfig,
    _load_yaml,
)

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    """Verify all default values are correct."""

    def test_server_defaults(self) -> None:
        cfg = ServerConfig()
        assert cfg.host == "0.0.0.0"  # noqa: S104
        assert cfg.port == 4000
        assert cfg.shutdown_timeout == 15.0

    def test_database_defaults(self) -> None:
        cfg = DatabaseConfig()
        assert cfg.engine == DatabaseEngine.SQLITE
        assert cfg.dsn == "sqlite+aiosqlite:///./price_relay.db"
        assert cfg.ping_timeout == 5.0

    def test_quote_defaults(self) -> None:
        cfg = QuoteConfig()
        assert cfg.url == "https://pro-api.coinmarketcap.com"
        assert cfg.symbol == "BTC"
        assert cfg.convert == "USD"
        assert cfg.coin_id == 1

    def test_scheduler_defaults(self) -> None:
        cfg = SchedulerConfig()
        assert cfg.enabled is True
        assert cfg.interval == 600.0
        assert cfg.cycle_timeout == 10.0
        assert cfg.delivery_timeout == 10.0

    def test_webhook_defaults(self) -> None:
        cfg = WebhookConfig()
        assert cfg.test_message == "testing"
        assert cfg.validation_timeout == 5.0

    def test_metrics_defaults(self) -> None:
        assert MetricsConfig().enabled is True

    def test_app_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.debug is False
        assert cfg.log_level == "info"
        assert isinstance(cfg.scheduler, SchedulerConfig)


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------


class TestEnvOverrides:
    def test_flat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRICERELAY_DEBUG", "true")
        assert AppConfig().debug is True

    def test_nested_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRICERELAY_SCHEDULER__INTERVAL", "30")
        monkeypatch.setenv("PRICERELAY_QUOTE__API_KEY", "abc")
        cfg = AppConfig()
        assert cfg.scheduler.interval == 30.0
        assert cfg.quote.api_key == "abc"

    def test_sub_config_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRICERELAY_SERVER__PORT", "8080")
        assert ServerConfig().port == 8080

    def test_scheduler_can_be_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRICERELAY_SCHEDULER__ENABLED", "false")
        assert AppConfig().scheduler.enabled is False


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    @pytest.mark.parametrize("field", ["interval", "cycle_timeout", "delivery_timeout"])
    def test_non_positive_durations_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            SchedulerConfig(**{field: 0})

    def test_unknown_db_engine_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DatabaseConfig(engine="oracle")


# ---------------------------------------------------------------------------
# YAML
# ---------------------------------------------------------------------------


class TestYaml:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nope.yaml") == {}

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert _load_yaml(path) == {}

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.yaml"
        path.write_text(
            textwrap.dedent(
                """\
                log_level: debug
                scheduler:
                  interval: 60
                quote:
                  symbol: ETH
                  coin_id: 1027
                """
            ),
            encoding="utf-8",
        )
        cfg = AppConfig.from_yaml(path)
        assert cfg.log_level == "debug"
        assert cfg.scheduler.interval == 60.0
        assert cfg.quote.symbol == "ETH"
        assert cfg.quote.coin_id == 1027

    def test_env_wins_over_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "relay.yaml"
        path.write_text("scheduler:\n  interval: 60\n  cycle_timeout: 3\n", encoding="utf-8")
        monkeypatch.setenv("PRICERELAY_SCHEDULER__INTERVAL", "5")

        cfg = AppConfig.from_yaml(path)

        assert cfg.scheduler.interval == 5.0
        assert cfg.scheduler.cycle_timeout == 3.0
