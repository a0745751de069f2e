"""Configuration package."""

from simple_budget.config.preferences import PreferencesStore, UserPreferences
from simple_budget.config.settings import (
    AppSettings,
    BudgetSettings,
    Settings,
    StoreSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BudgetSettings",
    "PreferencesStore",
    "Settings",
    "StoreSettings",
    "UserPreferences",
    "get_settings",
    "validate_all_settings",
]
