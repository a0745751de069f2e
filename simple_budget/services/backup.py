"""
Store backup and restore.

Backups are full copies of the SQLite store written to the backup
directory as SimpleBudgetBackup-<unix-timestamp>.sqlite. Restoring one
replaces every record in the active store.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import structlog

from simple_budget.config import get_settings
from simple_budget.services.storage.interface import DuplicateError, NotFoundError
from simple_budget.services.storage.sqlite import SQLiteClient

logger = structlog.get_logger(__name__)

BACKUP_PREFIX = "SimpleBudgetBackup-"
BACKUP_SUFFIX = ".sqlite"
_BACKUP_NAME = re.compile(rf"^{BACKUP_PREFIX}(\d+){re.escape(BACKUP_SUFFIX)}$")


def backup_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"{BACKUP_PREFIX}{int(now.timestamp())}{BACKUP_SUFFIX}"


def backup_timestamp(path: Union[str, Path]) -> Optional[datetime]:
    """When a backup was taken, read from its file name."""
    match = _BACKUP_NAME.match(Path(path).name)
    if match is None:
        return None
    return datetime.fromtimestamp(int(match.group(1)))


class BackupService:
    """Creates, lists and restores backups of one store."""

    def __init__(
        self,
        client: SQLiteClient,
        backup_dir: Optional[Union[str, Path]] = None,
    ):
        self._client = client
        self._backup_dir = Path(backup_dir) if backup_dir else get_settings().store.backup_path

    @property
    def backup_dir(self) -> Path:
        return self._backup_dir

    def create_backup(self, now: Optional[datetime] = None) -> Path:
        """
        Write a backup named after `now`.

        Raises:
            DuplicateError: If a backup with the same timestamp already exists
        """
        target = self._backup_dir / backup_filename(now)
        if target.exists():
            logger.warning("backup_exists", path=str(target))
            raise DuplicateError(f"Backup already exists: {target.name}")
        self._client.backup_to(target)
        logger.info("backup_created", path=str(target))
        return target

    def list_backups(self) -> list[Path]:
        """Backups in the backup directory, newest first."""
        if not self._backup_dir.is_dir():
            return []
        backups = [
            path for path in self._backup_dir.iterdir()
            if path.is_file() and backup_timestamp(path) is not None
        ]
        return sorted(backups, key=backup_timestamp, reverse=True)

    def restore(self, path: Union[str, Path]) -> None:
        """
        Replace the active store with a backup.

        A bare file name is looked up in the backup directory.

        Raises:
            NotFoundError: If the backup does not exist
        """
        path = Path(path)
        if not path.is_absolute() and not path.exists():
            path = self._backup_dir / path
        if not path.is_file():
            raise NotFoundError(f"Backup not found: {path}")

        self._client.restore_from(path)
        logger.warning("backup_restored", path=str(path))
