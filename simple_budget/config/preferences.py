"""
Persisted user preferences.

App-wide flags (first launch, selected tab, privacy toggle, ...) are kept in a
small JSON file with an explicit load / save / reset lifecycle instead of
living as ambient global state.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import BaseModel, Field, ValidationError

logger = structlog.get_logger(__name__)


class UserPreferences(BaseModel):
    """Everything the UI remembers between sessions."""

    has_initialized_accounts: bool = False
    selected_tab: int = Field(default=0, ge=0)
    privacy_mode: bool = Field(
        default=False,
        description="Mask balances and amounts on screen"
    )
    currency_code: str = Field(default="USD", min_length=3, max_length=3)
    start_day_of_month: int = Field(default=1, ge=1, le=28)
    selected_transaction_filter: Optional[str] = None
    last_budget_update: Optional[datetime] = None


class PreferencesStore:
    """
    Loads and saves UserPreferences as JSON.

    A missing or unreadable file is not an error: defaults are returned.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> UserPreferences:
        if not self._path.exists():
            return UserPreferences()
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            return UserPreferences.model_validate(data)
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            logger.warning(
                "preferences_unreadable",
                path=str(self._path),
                error=str(e),
            )
            return UserPreferences()

    def save(self, preferences: UserPreferences) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            handle.write(preferences.model_dump_json(indent=2))

    def update(self, **changes) -> UserPreferences:
        """Load, apply changes, save and return the result."""
        current = self.load()
        updated = UserPreferences.model_validate(
            {**current.model_dump(), **changes}
        )
        self.save(updated)
        return updated

    def reset(self) -> UserPreferences:
        """
        Clear the flags a store reset invalidates.

        Display preferences (currency, theme, privacy) survive a reset.
        """
        current = self.load()
        cleared = current.model_copy(update={
            "has_initialized_accounts": False,
            "selected_transaction_filter": None,
            "last_budget_update": None,
            "selected_tab": 0,
        })
        self.save(cleared)
        return cleared
