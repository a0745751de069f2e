"""Tests for persisted user preferences."""

from datetime import datetime

from simple_budget.config import PreferencesStore, UserPreferences


class TestPreferencesStore:
    """Tests for the load / save / reset lifecycle."""

    def test_missing_file_gives_defaults(self, preferences):
        loaded = preferences.load()
        assert loaded == UserPreferences()
        assert not loaded.has_initialized_accounts

    def test_save_and_load(self, preferences):
        preferences.save(UserPreferences(privacy_mode=True, selected_tab=2))
        loaded = preferences.load()
        assert loaded.privacy_mode
        assert loaded.selected_tab == 2

    def test_unreadable_file_gives_defaults(self, tmp_path):
        path = tmp_path / "preferences.json"
        path.write_text("{broken", encoding="utf-8")
        assert PreferencesStore(path).load() == UserPreferences()

    def test_invalid_values_give_defaults(self, tmp_path):
        path = tmp_path / "preferences.json"
        path.write_text('{"start_day_of_month": 99}', encoding="utf-8")
        assert PreferencesStore(path).load() == UserPreferences()

    def test_unknown_keys_are_ignored(self, tmp_path):
        path = tmp_path / "preferences.json"
        path.write_text('{"privacy_mode": true, "dark_mode": true}', encoding="utf-8")
        assert PreferencesStore(path).load().privacy_mode

    def test_update(self, preferences):
        stamp = datetime(2025, 6, 20, 12, 0)
        preferences.update(has_initialized_accounts=True)
        updated = preferences.update(last_budget_update=stamp)

        assert updated.has_initialized_accounts
        assert preferences.load().last_budget_update == stamp

    def test_reset_keeps_display_preferences(self, preferences):
        preferences.save(UserPreferences(
            has_initialized_accounts=True,
            privacy_mode=True,
            currency_code="EUR",
            selected_tab=4,
            selected_transaction_filter="Food",
        ))

        cleared = preferences.reset()

        assert not cleared.has_initialized_accounts
        assert cleared.selected_tab == 0
        assert cleared.selected_transaction_filter is None
        assert cleared.privacy_mode
        assert cleared.currency_code == "EUR"
        assert preferences.load() == cleared
