"""Restore a config file from one of its backups"""

import logging
from pathlib import Path
from typing import Optional

from aliasforge.backup import BackupManager
from aliasforge.errors import NoBackupError
from aliasforge.models import BackupSnapshot

logger = logging.getLogger(__name__)

LATEST = "latest"


def find_backup(manager: BackupManager, path: Path, backup_id: Optional[str] = LATEST) -> BackupSnapshot:
    """Pick a snapshot by id, file name or path; 'latest' picks the newest"""
    backups = manager.list_backups(path)
    if not backups:
        raise NoBackupError(f"No backup exists for {path}", path=path)

    if backup_id in (None, "", LATEST):
        return backups[-1]

    wanted = Path(str(backup_id)).name
    for snapshot in backups:
        if wanted in (snapshot.backup_id, snapshot.backup_path.name):
            return snapshot
    raise NoBackupError(f"Backup '{backup_id}' not found for {path}", path=path)


def restore(manager: BackupManager, path: Path, backup_id: Optional[str] = LATEST) -> BackupSnapshot:
    """Copy the chosen backup's bytes back over ``path``"""
    snapshot = find_backup(manager, path, backup_id)
    manager.fs.copy(snapshot.backup_path, path)
    logger.info("Restored %s from %s", path, snapshot.backup_path.name)
    return snapshot
