"""
Ledger settings loaded from the environment.

Each group reads its own prefix (``STORAGE_``, ``API_``, ``LEDGER_``); the
top-level values also come from ``.env``.
"""

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """SQLite file location and connection pool."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "cafe_ledger.db"
    pool_size: int = Field(default=5, ge=1, le=64)
    # ms a writer waits for the SQLite write lock before failing
    busy_timeout: int = Field(default=30000, ge=0)

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False
    cors_origins: list[str] = ["*"]


class LedgerSettings(BaseSettings):
    """Stock ledger policy."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    # When False, an Outgoing movement that would take stock below zero is rejected
    allow_negative_stock: bool = True
    # Business-day timezone for outlets registered without one
    default_timezone: str = "UTC"

    history_page_size: int = Field(default=100, ge=1)
    history_max_page_size: int = Field(default=1000, ge=1)

    forecast_window_days: int = Field(default=7, ge=1, le=365)

    @field_validator("default_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def check_page_sizes(self) -> "LedgerSettings":
        if self.history_page_size > self.history_max_page_size:
            raise ValueError("history_page_size must not exceed history_max_page_size")
        return self


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Cafe Stock Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, read once."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
