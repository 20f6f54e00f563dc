"""
Configuration for envarchive.

Settings come from ENV_ARCHIVE_* environment variables; command-line
flags override them. There are no config files.

Invariants:
    - Every setting has a default that works for a single local user
    - The archive database defaults to ~/.env_archive
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def default_database_path() -> Path:
    return Path.home() / ".env_archive"


class Settings(BaseSettings):
    """envarchive configuration."""

    # Archive database file
    database: Path = Field(default_factory=default_database_path)
    busy_timeout_ms: int = Field(default=5000, ge=0)

    # Display timezone for list/search/history output
    timezone: str = Field(default="UTC")

    # Logging
    log_level: str = Field(default="WARNING")
    log_format: Literal["text", "json"] = Field(default="text")

    model_config = {"env_prefix": "ENV_ARCHIVE_"}

    @field_validator("database")
    @classmethod
    def _expand_database(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
