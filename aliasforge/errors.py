"""Error kinds and exceptions raised by the export/import engine"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union


class ErrorKind(Enum):
    """Why a line, record or operation failed"""

    INVALID_NAME = "invalid_name"
    MALFORMED_STRUCTURE = "malformed_structure"
    PARSE_FAILURE = "parse_failure"
    FILE_NOT_FOUND = "file_not_found"
    PERMISSION_DENIED = "permission_denied"
    IO_FAILURE = "io_failure"
    PROCESS_FAILURE = "process_failure"
    NO_BACKUP = "no_backup"
    UNKNOWN_SHELL = "unknown_shell"


class AliasForgeError(Exception):
    """Base class for operation-level failures"""

    kind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        kind: Optional[ErrorKind] = None,
    ):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None
        if kind is not None:
            self.kind = kind


class FileAccessError(AliasForgeError):
    """A file could not be read, written or copied"""

    @classmethod
    def from_os_error(
        cls, exc: OSError, path: Union[str, Path], action: str
    ) -> "FileAccessError":
        if isinstance(exc, FileNotFoundError):
            kind = ErrorKind.FILE_NOT_FOUND
        elif isinstance(exc, PermissionError):
            kind = ErrorKind.PERMISSION_DENIED
        else:
            kind = ErrorKind.IO_FAILURE
        reason = exc.strerror or str(exc)
        return cls(f"Cannot {action} {path}: {reason}", path=path, kind=kind)


class BackupError(FileAccessError):
    """The pre-write snapshot could not be created"""


class NoBackupError(AliasForgeError):
    """No snapshot exists for the requested target"""

    kind = ErrorKind.NO_BACKUP


class UnknownShellError(AliasForgeError, ValueError):
    """The shell id has no registered grammar"""

    kind = ErrorKind.UNKNOWN_SHELL
