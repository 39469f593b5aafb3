"""Timestamped backups of shell config files"""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from aliasforge.errors import BackupError, ErrorKind, FileAccessError
from aliasforge.fs import FileSystem
from aliasforge.models import BackupSnapshot

logger = logging.getLogger(__name__)

BACKUP_INFIX = ".backup-"
DEFAULT_BACKUP_COUNT = 5

# 2026-01-26T10-00-00-000Z, optionally followed by -N for same-millisecond copies
STAMP_PATTERN = re.compile(
    r"(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z)(?:-(?P<sequence>\d+))?"
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with milliseconds, e.g. 2026-01-26T10:00:00.000Z"""
    iso = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def format_stamp(moment: datetime) -> str:
    """iso_timestamp with ':' and '.' made file-name safe"""
    return iso_timestamp(moment).replace(":", "-").replace(".", "-")


def parse_stamp(stamp: str) -> datetime:
    return datetime.strptime(stamp, "%Y-%m-%dT%H-%M-%S-%fZ").replace(tzinfo=timezone.utc)


class BackupManager:
    """Create, list and prune backups that sit next to the file they copy"""

    def __init__(self, fs: Optional[FileSystem] = None, backup_count: int = DEFAULT_BACKUP_COUNT):
        self.fs = fs or FileSystem()
        # Never prune the snapshot that was just taken
        self.backup_count = max(1, int(backup_count))

    def backup_prefix(self, path: Path) -> str:
        return f"{path.name}{BACKUP_INFIX}"

    def list_backups(self, path: Path) -> List[BackupSnapshot]:
        """All backups of ``path``, oldest first"""
        prefix = self.backup_prefix(path)
        snapshots = []
        for candidate in self.fs.siblings(path, prefix):
            match = STAMP_PATTERN.fullmatch(candidate.name[len(prefix):])
            if not match:
                continue
            snapshots.append(
                BackupSnapshot(
                    original_path=path,
                    backup_path=candidate,
                    created_at=parse_stamp(match.group("stamp")),
                    sequence=int(match.group("sequence") or 0),
                )
            )
        return sorted(snapshots, key=lambda s: (s.created_at, s.sequence))

    def snapshot(self, path: Path, required: bool = False) -> Optional[BackupSnapshot]:
        """Copy ``path`` verbatim to a new timestamped sibling.

        When ``required`` is False a missing or empty file has nothing worth
        preserving and no backup is made. When True a missing file is an
        error. Any copy failure raises BackupError.
        """
        if not self.fs.exists(path):
            if not required:
                logger.debug("No existing %s to back up", path)
                return None
            raise BackupError(
                f"Cannot back up {path}: File not found",
                path=path,
                kind=ErrorKind.FILE_NOT_FOUND,
            )
        if not required and self.fs.size(path) == 0:
            logger.debug("Skipping backup of empty %s", path)
            return None

        stamp = format_stamp(utc_now())
        prefix = self.backup_prefix(path)
        backup_path = path.with_name(f"{prefix}{stamp}")
        sequence = 0
        while self.fs.exists(backup_path):
            sequence += 1
            backup_path = path.with_name(f"{prefix}{stamp}-{sequence}")

        try:
            self.fs.copy(path, backup_path)
        except FileAccessError as exc:
            raise BackupError(f"Backup failed: {exc.message}", path=path, kind=exc.kind) from exc

        logger.info("Backed up %s to %s", path, backup_path.name)
        self.prune(path, keep=backup_path)
        return BackupSnapshot(
            original_path=path,
            backup_path=backup_path,
            created_at=parse_stamp(stamp),
            sequence=sequence,
        )

    def prune(self, path: Path, keep: Optional[Path] = None) -> List[Path]:
        """Remove the oldest backups beyond backup_count, never ``keep``"""
        backups = self.list_backups(path)
        excess = len(backups) - self.backup_count
        if excess <= 0:
            return []
        candidates = [s for s in backups if s.backup_path != keep]
        removed = []
        for snapshot in candidates[:excess]:
            try:
                self.fs.unlink(snapshot.backup_path)
            except FileAccessError as exc:
                logger.warning("Could not prune old backup: %s", exc.message)
                continue
            logger.debug("Pruned old backup %s", snapshot.backup_path.name)
            removed.append(snapshot.backup_path)
        return removed
