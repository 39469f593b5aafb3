"""Data models for aliases, backups and engine results"""

import re
import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from aliasforge.errors import ErrorKind

# Shell-identifier-safe alias names
NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")

IMPORTED_TAG = "imported"


def is_valid_name(name: Any) -> bool:
    """Check an alias name against NAME_PATTERN"""
    return isinstance(name, str) and NAME_PATTERN.fullmatch(name) is not None


def new_alias_id(prefix: str = "alias") -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


class AliasSource(Enum):
    """Where an alias came from"""

    USER = "user"
    SYSTEM = "system"
    IMPORTED = "imported"


@dataclass
class AliasRecord:
    """Represents one alias, independent of any shell's syntax"""
    name: str
    command: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    enabled: bool = True
    source: AliasSource = AliasSource.USER
    profile: Optional[str] = None
    id: str = field(default_factory=new_alias_id)

    def __post_init__(self):
        if isinstance(self.source, str):
            self.source = AliasSource(self.source)
        if self.description is None:
            self.description = ""
        # Ordered set: keep the first occurrence of each tag
        self.tags = list(dict.fromkeys(self.tags or []))

    @property
    def has_valid_name(self) -> bool:
        return is_valid_name(self.name)

    @property
    def exportable(self) -> bool:
        """Enabled and safe to write as a shell statement"""
        return self.enabled and self.has_valid_name

    def to_dict(self) -> dict:
        """Convert alias to dictionary for storage"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "enabled": self.enabled,
            "command": self.command,
            "profile": self.profile,
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AliasRecord":
        """Create alias from dictionary, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def __str__(self) -> str:
        """String representation for display"""
        return f"{self.name}='{self.command}'"


@dataclass(frozen=True)
class ShellTarget:
    """A shell and the config file its managed block lives in"""
    shell_id: str
    config_path: Path


@dataclass(frozen=True)
class BackupSnapshot:
    """A verbatim copy of a target file taken before a write"""
    original_path: Path
    backup_path: Path
    created_at: datetime
    sequence: int = 0

    @property
    def backup_id(self) -> str:
        """The part of the backup file name after '.backup-'"""
        return self.backup_path.name[len(self.original_path.name) + len(".backup-"):]


@dataclass
class ImportIssue:
    """A live-shell output line that was skipped"""
    line_number: int
    kind: ErrorKind
    message: str
    line: str = ""


@dataclass
class ShellImportResult:
    success: bool
    aliases: List[AliasRecord] = field(default_factory=list)
    error: Optional[str] = None
    issues: List[ImportIssue] = field(default_factory=list)


@dataclass
class InvalidRecord:
    """A document entry that failed structural validation"""
    index: int
    kind: ErrorKind
    message: str
    data: Any = None


@dataclass
class FileImportResult:
    valid: List[AliasRecord] = field(default_factory=list)
    invalid: List[InvalidRecord] = field(default_factory=list)
    duplicates: List[AliasRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class ExportResult:
    success: bool
    path: Optional[Path] = None
    backup_path: Optional[Path] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    count: int = 0


@dataclass
class BackupResult:
    success: bool
    backup_path: Optional[Path] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


@dataclass
class RestoreResult:
    success: bool
    path: Optional[Path] = None
    backup_path: Optional[Path] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
