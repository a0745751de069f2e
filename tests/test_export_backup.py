"""Tests for CSV export and backup file handling."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from simple_budget.models.finance import Account, Transaction, TransactionType
from simple_budget.services.backup import BackupService, backup_filename, backup_timestamp
from simple_budget.services.export import (
    CSV_HEADER,
    export_filename,
    transactions_to_csv,
    write_transactions_csv,
)
from simple_budget.services.storage import DuplicateError, NotFoundError


class TestCsvExport:
    """Tests for the transaction CSV format."""

    def test_quotes_text_and_formats_amounts(self):
        account = Account(name='Joint "Main"')
        transaction = Transaction(
            title='Dinner at "Luigi\'s"',
            amount=Decimal("45.6"),
            category="Food",
            date=datetime(2025, 6, 3, 19, 30),
            notes="with friends, split later",
            account_id=account.id,
        )

        lines = transactions_to_csv([transaction], [account]).splitlines()

        assert lines[0] == CSV_HEADER
        assert lines[1] == (
            '2025-06-03,"Dinner at ""Luigi\'s""",45.60,"Food",'
            '"Joint ""Main""","with friends, split later"'
        )

    def test_income_and_unknown_account(self):
        transaction = Transaction(
            title="Salary",
            amount=Decimal("3000"),
            category="",
            date=datetime(2025, 6, 1),
            transaction_type=TransactionType.INCOME,
            account_id=Account(name="Gone").id,
        )
        line = transactions_to_csv([transaction]).splitlines()[1]
        assert line == '2025-06-01,"Salary",3000.00,"Uncategorized","",""'

    def test_header_only_when_empty(self):
        assert transactions_to_csv([]) == CSV_HEADER + "\n"

    def test_export_filename(self):
        assert export_filename(date(2025, 6, 20)) == "transactions_2025-06-20.csv"

    def test_write_csv(self, tmp_path):
        path = write_transactions_csv([], tmp_path / "exports", today=date(2025, 6, 20))
        assert path.name == "transactions_2025-06-20.csv"
        assert path.read_text(encoding="utf-8") == CSV_HEADER + "\n"


class TestBackupService:
    """Tests for backup naming, listing and restore."""

    def test_filename_round_trip(self):
        now = datetime(2025, 6, 20, 12, 0)
        name = backup_filename(now)
        assert name == f"SimpleBudgetBackup-{int(now.timestamp())}.sqlite"
        assert backup_timestamp(name) == now

    def test_foreign_names_are_ignored(self, client, tmp_path):
        (tmp_path / "notes.txt").write_text("hello")
        (tmp_path / "SimpleBudgetBackup-abc.sqlite").write_text("")
        service = BackupService(client, tmp_path)

        backup = service.create_backup(datetime(2025, 6, 20, 12, 0))

        assert service.list_backups() == [backup]
        assert backup_timestamp("notes.txt") is None

    def test_same_second_backup_is_refused(self, client, storage, tmp_path):
        service = BackupService(client, tmp_path)
        now = datetime(2025, 6, 20, 12, 0)
        storage.save_account(Account(name="Kept"))
        backup = service.create_backup(now)
        storage.save_account(Account(name="Later"))

        with pytest.raises(DuplicateError):
            service.create_backup(now)

        service.restore(backup)
        assert [a.name for a in storage.list_accounts()] == ["Kept"]

    def test_missing_directory_lists_nothing(self, client, tmp_path):
        assert BackupService(client, tmp_path / "missing").list_backups() == []

    def test_restore_by_name(self, client, storage, tmp_path):
        service = BackupService(client, tmp_path)
        storage.save_account(Account(name="Before"))
        backup = service.create_backup(datetime(2025, 6, 20, 12, 0))
        storage.save_account(Account(name="After"))

        service.restore(backup.name)

        assert [a.name for a in storage.list_accounts()] == ["Before"]

    def test_restore_missing(self, client, tmp_path):
        with pytest.raises(NotFoundError):
            BackupService(client, tmp_path).restore("SimpleBudgetBackup-1.sqlite")
