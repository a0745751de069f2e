"""
Shared fixtures.

Every test runs against a throwaway in-memory SQLite store and a fixed
"now" (Friday 2025-06-20, noon) so date windows are deterministic.
"""

from datetime import datetime

import pytest

from simple_budget.config import BudgetSettings, PreferencesStore
from simple_budget.orchestrator import create_app_components
from simple_budget.services.storage import (
    SQLiteAuditStorage,
    SQLiteClient,
    SQLiteFinanceStorage,
)


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 20, 12, 0)


@pytest.fixture
def today(now):
    return now.date()


@pytest.fixture
def budget_settings() -> BudgetSettings:
    return BudgetSettings(
        warning_threshold=0.75,
        over_limit_threshold=1.0,
        net_worth_min_transactions=3,
        net_worth_min_history_days=30,
        net_worth_min_volume=10.0,
    )


@pytest.fixture
def client():
    client = SQLiteClient(":memory:")
    yield client
    client.close()


@pytest.fixture
def storage(client) -> SQLiteFinanceStorage:
    return SQLiteFinanceStorage(client)


@pytest.fixture
def audit_storage(client) -> SQLiteAuditStorage:
    return SQLiteAuditStorage(client)


@pytest.fixture
def preferences(tmp_path) -> PreferencesStore:
    return PreferencesStore(tmp_path / "preferences.json")


@pytest.fixture
def components(tmp_path):
    components = create_app_components(
        database_path=":memory:",
        backup_dir=tmp_path / "backups",
        preferences_path=tmp_path / "preferences.json",
    )
    yield components
    components.client.close()
