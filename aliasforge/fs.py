"""File system and process access injected into the engine.

The engine never touches the disk or spawns processes directly; it goes
through a ``FileSystem`` and a ``ProcessRunner`` so tests can substitute
either one.
"""

import glob
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Sequence

from aliasforge.errors import FileAccessError

logger = logging.getLogger(__name__)

# Undecodable bytes survive a read/write cycle unchanged
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


class FileSystem:
    """Local file system operations used by the engine"""

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def size(self, path: Path) -> int:
        try:
            return path.stat().st_size
        except OSError as exc:
            raise FileAccessError.from_os_error(exc, path, "stat") from exc

    def read_text(self, path: Path) -> str:
        """Read a file without translating line endings"""
        try:
            with open(path, "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as f:
                return f.read()
        except OSError as exc:
            raise FileAccessError.from_os_error(exc, path, "read") from exc

    def read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileAccessError.from_os_error(exc, path, "read") from exc

    def write_text(self, path: Path, text: str) -> None:
        """Replace a file's content in one step.

        The text goes to a temporary sibling first and is renamed over the
        target, so readers see either the old or the new content, never a
        partial write. A symlinked path is written through to the file it
        points at and the link stays in place.
        """
        target = path.resolve() if path.is_symlink() else path
        if target.exists() and not os.access(target, os.W_OK):
            raise FileAccessError.from_os_error(
                PermissionError(13, "Permission denied"), path, "write"
            )

        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            with os.fdopen(fd, "w", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as f:
                f.write(text)
            if target.exists():
                shutil.copymode(target, tmp_name)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FileAccessError.from_os_error(exc, path, "write") from exc

    def copy(self, source: Path, destination: Path) -> None:
        """Copy bytes and metadata verbatim"""
        try:
            shutil.copy2(source, destination)
        except OSError as exc:
            raise FileAccessError.from_os_error(exc, source, "copy") from exc

    def siblings(self, path: Path, prefix: str) -> List[Path]:
        """Files next to ``path`` whose names start with ``prefix``"""
        pattern = glob.escape(prefix) + "*"
        return [p for p in path.parent.glob(pattern) if p.is_file()]

    def unlink(self, path: Path) -> None:
        try:
            path.unlink()
        except OSError as exc:
            raise FileAccessError.from_os_error(exc, path, "delete") from exc


class ProcessRunner:
    """Runs a command and captures its output"""

    def run(self, argv: Sequence[str], timeout: float) -> subprocess.CompletedProcess:
        logger.debug("Running %s", " ".join(argv))
        return subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
