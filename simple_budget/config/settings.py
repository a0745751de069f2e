"""
Configuration Management for SimpleBudget

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Thresholds that shape the dashboard (progress tiers, net-worth history
guards) live next to storage paths so every tunable is visible in one place.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Local store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SIMPLE_BUDGET_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database_path: str = Field(
        default="data/simple_budget.sqlite",
        description="Path to the SQLite database (':memory:' for a throwaway store)"
    )
    backup_dir: str = Field(
        default="data/backups",
        description="Directory where store backups are written"
    )
    preferences_path: str = Field(
        default="data/preferences.json",
        description="Path to the persisted user preferences file"
    )

    @property
    def is_in_memory(self) -> bool:
        return self.database_path == ":memory:"

    @property
    def backup_path(self) -> Path:
        return Path(self.backup_dir)


class BudgetSettings(BaseSettings):
    """Thresholds used by the aggregation engine."""

    model_config = SettingsConfigDict(
        env_prefix="SIMPLE_BUDGET_BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Progress tiers (spent / budget)
    warning_threshold: float = Field(
        default=0.75,
        gt=0.0,
        description="Spend ratio at which a budget turns to warning"
    )
    over_limit_threshold: float = Field(
        default=1.0,
        gt=0.0,
        description="Spend ratio at which a budget is over the limit"
    )

    # Prior-period net worth guards
    net_worth_min_transactions: int = Field(
        default=3,
        ge=0,
        description="Minimum number of transactions before estimating past net worth"
    )
    net_worth_min_history_days: int = Field(
        default=30,
        ge=0,
        description="Oldest transaction must be at least this many days old"
    )
    net_worth_min_volume: float = Field(
        default=10.0,
        ge=0.0,
        description="Minimum total transaction volume before estimating past net worth"
    )

    # Trend windows
    weekly_window_days: int = Field(default=7, ge=1, le=31)
    monthly_window_months: int = Field(default=6, ge=1, le=24)
    recent_transactions_limit: int = Field(default=10, ge=1, le=100)

    @model_validator(mode='after')
    def validate_thresholds(self) -> 'BudgetSettings':
        """Warning must kick in before over-limit."""
        if self.warning_threshold > self.over_limit_threshold:
            raise ValueError("warning_threshold cannot exceed over_limit_threshold")
        return self


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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    currency_code: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Default ISO currency code for display"
    )

    @field_validator('currency_code')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

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

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries describing any failure. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("store", "budget", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
