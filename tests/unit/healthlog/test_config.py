"""
Tests for configuration management in `healthlog/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level coercion to the expected Literal
- Display settings and the fixed UTC offset
- Notes analysis opt-in and API key validation
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import timedelta
from pathlib import Path

import pytest

from healthlog.config import (
    AnalysisConfig,
    AppConfig,
    DisplayConfig,
    LoggingConfig,
    get_config,
    load_config_from_env,
)

ENV_VARS = (
    "ENVIRONMENT",
    "LOG_LEVEL",
    "HEALTHLOG_DATA_DIR",
    "HEALTHLOG_STORAGE_KEY",
    "HEALTHLOG_TABLE_LIMIT",
    "HEALTHLOG_CHART_DAYS",
    "HEALTHLOG_UTC_OFFSET_HOURS",
    "HEALTHLOG_EXPORT_DIR",
    "NOTES_ANALYSIS_ENABLED",
    "NOTES_ANALYSIS_MODEL",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def clear_config_cache(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from a clean environment and an empty get_config cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.logging.level == "INFO"
    assert config.storage.key == "healthTrackerData"
    assert config.display.table_limit == 10
    assert config.display.chart_days == 10
    assert config.analysis.enabled is False


def test_production_logs_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    assert load_config_from_env().logging.level == "INFO"

    monkeypatch.setenv("LOG_LEVEL", "error")
    assert load_config_from_env().logging.level == "ERROR"


def test_storage_and_display_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HEALTHLOG_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HEALTHLOG_STORAGE_KEY", "testLog")
    monkeypatch.setenv("HEALTHLOG_TABLE_LIMIT", "25")
    monkeypatch.setenv("HEALTHLOG_CHART_DAYS", "30")
    monkeypatch.setenv("HEALTHLOG_EXPORT_DIR", str(tmp_path / "out"))

    config = load_config_from_env()

    assert config.storage.data_dir == tmp_path
    assert config.storage.key == "testLog"
    assert config.display.table_limit == 25
    assert config.display.chart_days == 30
    assert config.display.export_dir == tmp_path / "out"


def test_utc_offset(monkeypatch: pytest.MonkeyPatch) -> None:
    assert load_config_from_env().display.resolve_timezone() is None

    monkeypatch.setenv("HEALTHLOG_UTC_OFFSET_HOURS", "3")
    tz = load_config_from_env().display.resolve_timezone()

    assert tz is not None
    assert tz.utcoffset(None) == timedelta(hours=3)


@pytest.mark.parametrize("field,value", [("table_limit", 0), ("chart_days", -1)])
def test_display_limits_must_be_positive(field: str, value: int) -> None:
    with pytest.raises(ValueError):
        DisplayConfig(**{field: value})


class TestAnalysisConfig:
    def test_enabled_without_key_fails(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOTES_ANALYSIS_ENABLED", "true")
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            load_config_from_env()

    def test_key_format_is_checked(self) -> None:
        with pytest.raises(ValueError, match="must start with 'sk-'"):
            AnalysisConfig(enabled=True, openai_api_key="not-a-key")

    def test_enabled_with_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOTES_ANALYSIS_ENABLED", "yes")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test-openai")

        analysis = load_config_from_env().analysis

        assert analysis.enabled is True
        assert analysis.openai_api_key == "sk-test-openai"

    def test_disabled_needs_no_key(self) -> None:
        assert AnalysisConfig(enabled=False).openai_api_key is None


def test_get_config_cache() -> None:
    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(environment="production", debug=True, logging=LoggingConfig())
