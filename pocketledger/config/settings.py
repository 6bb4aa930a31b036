"""
Configuration Management for PocketLedger

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here, one settings class per concern,
each with its own environment prefix.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Snapshot persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_STORAGE_",
        extra="ignore"
    )

    backend: Literal["memory", "file"] = Field(
        default="file",
        description="Where the ledger snapshot is persisted"
    )
    path: Path = Field(
        default=Path.home() / ".pocketledger" / "ledger.json",
        description="Snapshot file used by the file backend"
    )
    shadow_path: Path = Field(
        default=Path.home() / ".pocketledger" / "cloud_shadow.json",
        description="Shadow copy written by the cloud sync placeholder"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed snapshot file replace is attempted"
    )

    @field_validator("path", "shadow_path")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class LedgerSettings(BaseSettings):
    """Ledger behaviour and presentation settings."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_",
        extra="ignore"
    )

    budget_warning_percent: int = Field(
        default=80,
        ge=1,
        le=99,
        description="Budget usage percent at which status becomes 'warning'"
    )
    recent_limit: int = Field(
        default=30,
        ge=1,
        le=10000,
        description="Default number of transactions in the recent list"
    )
    currency_symbol: str = Field(
        default="৳",
        max_length=5,
        description="Currency symbol used in printable reports"
    )
    seed_default_wallets: bool = Field(
        default=True,
        description="Create 'Hand Cash' and 'Main Bank' wallets on an empty ledger"
    )


class LoggingSettings(BaseSettings):
    """structlog output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_LOG_",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_logs: bool = Field(
        default=True,
        description="Render JSON lines (console renderer otherwise)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are built on access so a broken section only
    # fails the code that needs it.

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an extra
    `<name>_error` entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
