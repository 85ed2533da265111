"""
Application configuration.

Values come from environment variables prefixed with ``STOCKBOARD_`` (or a
``.env`` file in the working directory).
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Dashboard settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="STOCKBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(default=Path("data"))
    reports_dir: Path = Field(default=Path("reports"))

    # reporting timezone used by the period filter ("today", "this month")
    timezone: str = Field(default="America/Sao_Paulo")
    currency: str = Field(default="BRL")
    locale: str = Field(default="pt_BR")

    log_level: str = Field(default="INFO")

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def records_file(self) -> Path:
        return self.data_dir / "records.json"

    @property
    def accounts_file(self) -> Path:
        return self.data_dir / "accounts.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    logger.debug("Loaded settings: data_dir=%s timezone=%s currency=%s locale=%s",
                 settings.data_dir, settings.timezone, settings.currency, settings.locale)
    return settings
