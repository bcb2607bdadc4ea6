"""Configuration package."""

from wisevault.config.settings import (
    AppSettings,
    BudgetDefaults,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BudgetDefaults",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
