"""
Configuration Management for the Shared Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here: the participant group, the deposit
constant, where the ledger snapshot is stored and how logging behaves.
Everything has a working default so the ledger runs without a .env file.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from splitledger.models.entry import Participant


class LedgerSettings(BaseSettings):
    """Ledger behaviour: who shares costs and the deposit constant."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    participant_names: str = Field(
        default="Anna,Ben,Carla,David",
        description="Comma-separated participant names; ids follow this order"
    )
    deposit_amount: Decimal = Field(
        default=Decimal("0.25"),
        description="Fixed price of a deposit (Pfand) entry"
    )
    storage_key: str = Field(
        default="entries",
        min_length=1,
        description="Key under which the entry list is stored"
    )

    @field_validator('participant_names')
    @classmethod
    def validate_participant_names(cls, v: str) -> str:
        """At least one participant is required."""
        if not [name for name in v.split(",") if name.strip()]:
            raise ValueError("At least one participant name is required")
        return v

    @field_validator('deposit_amount')
    @classmethod
    def validate_deposit_amount(cls, v: Decimal) -> Decimal:
        """A zero deposit would produce an entry that can never be committed."""
        if v == 0:
            raise ValueError("Deposit amount must not be zero")
        return v.quantize(Decimal("0.01"))

    @property
    def participant_names_list(self) -> list[str]:
        """Get participant names as a list."""
        return [name.strip() for name in self.participant_names.split(",") if name.strip()]

    @property
    def participants(self) -> list[Participant]:
        """Build the fixed participant set, ids assigned by position."""
        return [
            Participant(id=index, name=name)
            for index, name in enumerate(self.participant_names_list)
        ]


class StorageSettings(BaseSettings):
    """Key/value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["memory", "file"] = Field(
        default="file",
        description="Which key/value store to use"
    )
    data_dir: Path = Field(
        default=Path.home() / ".splitledger",
        description="Directory for the file store (one file per key)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_logs: bool = Field(
        default=True,
        description="Render log lines as JSON (console renderer otherwise)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


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

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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

    Returns a dict of {setting_name: is_valid}, with a
    `<name>_error` entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "storage", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
