"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- No API keys in code; the notes analysis agent is off unless enabled
"""

import logging
import os
import sys
from datetime import timedelta, timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Literal, cast

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class StorageConfig(BaseModel):
    """Where the log is persisted."""

    data_dir: Path = Field(
        default=Path("~/.healthlog"), description="Directory holding the storage files"
    )
    key: str = Field(
        default="healthTrackerData", min_length=1, description="Storage key of the log"
    )


class DisplayConfig(BaseModel):
    """Table, chart and timestamp settings."""

    table_limit: int = Field(default=10, gt=0, description="Entries shown in the table")
    chart_days: int = Field(default=10, gt=0, description="Days of history in the charts")
    utc_offset_hours: float | None = Field(
        default=None,
        ge=-14.0,
        le=14.0,
        description="Fixed UTC offset for timestamps; None uses local time",
    )
    export_dir: Path = Field(default=Path("."), description="Directory for exported files")

    def resolve_timezone(self) -> tzinfo | None:
        if self.utc_offset_hours is None:
            return None
        return timezone(timedelta(hours=self.utc_offset_hours))


class AnalysisConfig(BaseModel):
    """Notes analysis. Keyword rules are always available; the AI agent is opt-in."""

    enabled: bool = Field(default=False, description="Use the AI agent for notes analysis")
    model_name: str = Field(default="openai:gpt-4o-mini", description="pydantic-ai model name")
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    timeout_seconds: float = Field(default=30.0, gt=0.0)

    @model_validator(mode="after")
    def api_key_for_openai(self) -> "AnalysisConfig":
        if self.enabled and self.model_name.startswith("openai:"):
            key = self.openai_api_key or ""
            if not key or key == "your-openai-api-key-here":
                raise ValueError("OPENAI_API_KEY must be set when notes analysis is enabled")
            if not key.startswith("sk-"):
                raise ValueError("AI provider API key must start with 'sk-'")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Logging level")
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
    v = val.strip().lower()
    if v in {"dev", "development"}:
        return "development"
    if v in {"stage", "staging"}:
        return "staging"
    return "production"


def _level_to_literal(val: str) -> LogLevel:
    v = val.strip().upper()
    return cast(LogLevel, v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO")


def _parse_bool(val: str | None, default: bool) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _parse_optional_float(val: str | None) -> float | None:
    if val is None or not val.strip():
        return None
    return float(val)


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    storage_config = StorageConfig(
        data_dir=Path(os.getenv("HEALTHLOG_DATA_DIR", "~/.healthlog")),
        key=os.getenv("HEALTHLOG_STORAGE_KEY", "healthTrackerData"),
    )

    display_config = DisplayConfig(
        table_limit=int(os.getenv("HEALTHLOG_TABLE_LIMIT", "10")),
        chart_days=int(os.getenv("HEALTHLOG_CHART_DAYS", "10")),
        utc_offset_hours=_parse_optional_float(os.getenv("HEALTHLOG_UTC_OFFSET_HOURS")),
        export_dir=Path(os.getenv("HEALTHLOG_EXPORT_DIR", ".")),
    )

    analysis_config = AnalysisConfig(
        enabled=_parse_bool(os.getenv("NOTES_ANALYSIS_ENABLED"), False),
        model_name=os.getenv("NOTES_ANALYSIS_MODEL", "openai:gpt-4o-mini"),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        timeout_seconds=float(os.getenv("NOTES_ANALYSIS_TIMEOUT_SECONDS", "30.0")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        storage=storage_config,
        display=display_config,
        analysis=analysis_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def configure_logging(config: LoggingConfig) -> None:
    """Route structlog through stdlib logging on stderr with the configured renderer."""
    logging.basicConfig(
        format="%(message)s", stream=sys.stderr, level=config.level, force=True
    )

    renderer: structlog.typing.Processor = (
        structlog.dev.ConsoleRenderer()
        if config.format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def print_config_summary(config: AppConfig | None = None) -> None:
    """Print configuration summary for debugging."""
    config = config or get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\nSTORAGE")
    print(f"Data Directory: {config.storage.data_dir}")
    print(f"Storage Key: {config.storage.key}")

    print("\nDISPLAY")
    print(f"Table Limit: {config.display.table_limit}")
    print(f"Chart Window: {config.display.chart_days} days")
    offset = config.display.utc_offset_hours
    print(f"Timezone: {'local' if offset is None else f'UTC{offset:+g}'}")

    print("\nNOTES ANALYSIS")
    print(f"AI Agent: {'enabled' if config.analysis.enabled else 'disabled (keyword rules)'}")
    print(f"Model: {config.analysis.model_name}")


if __name__ == "__main__":
    print_config_summary()
