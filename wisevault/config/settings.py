"""
Configuration Management for WiseVault

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Nothing in the ledger itself reads the environment; flows and the UI
pull what they need from get_settings().
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wisevault.models.ledger import MAX_AMOUNT, Currency


class BudgetDefaults(BaseSettings):
    """Starting budget targets and display currency for a new session."""

    model_config = SettingsConfigDict(
        env_prefix="WISEVAULT_BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    monthly_limit: Decimal = Field(
        default=Decimal("2000"),
        ge=0,
        lt=MAX_AMOUNT,
        description="Default monthly spending limit"
    )
    savings_goal: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        lt=MAX_AMOUNT,
        description="Default savings goal"
    )
    currency: Currency = Field(
        default=Currency.USD,
        description="Default display currency (cosmetic only)"
    )


class StorageSettings(BaseSettings):
    """
    Optional persistence configuration.

    With no storage_path the ledger is session-only, which is the
    default behaviour.
    """

    model_config = SettingsConfigDict(
        env_prefix="WISEVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_path: Optional[str] = Field(
        default=None,
        description="Path to a JSON snapshot file. Unset = no persistence."
    )
    export_dir: str = Field(
        default="exports",
        description="Directory CSV exports are written to"
    )

    @field_validator('storage_path')
    @classmethod
    def validate_storage_path(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty string as 'not configured'."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def persistence_enabled(self) -> bool:
        return self.storage_path is not None

    @property
    def export_path(self) -> Path:
        return Path(self.export_dir)


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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for structlog's stdlib backend"
    )

    # Splash screen
    splash_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=10.0,
        description="How long the intro splash stays on screen"
    )

    # Activity list on the settings page
    recent_activity_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="How many audit events the settings page shows"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unknown log level: {v}. Allowed: {sorted(allowed)}")
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

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def budget(self) -> BudgetDefaults:
        return BudgetDefaults()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    "<name>_error" entries for the ones that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("app", "budget", "storage"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
