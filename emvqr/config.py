"""Library configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class Settings(BaseSettings):
    """Central codec settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_format_indicator: str = Field(
        default="01",
        min_length=2,
        max_length=2,
        validation_alias=AliasChoices("EMVQR_FORMAT_INDICATOR", "DEFAULT_FORMAT_INDICATOR"),
    )
    metrics_enabled: bool = Field(default=True, validation_alias=AliasChoices("EMVQR_METRICS", "METRICS_ENABLED"))
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized codec settings."""

    return Settings()


settings = get_settings()
