"""Operations a front end calls to move aliases between AliasForge and shells.

Every method returns a result object instead of raising for expected
failures (bad input, missing files, permission problems, a shell that will
not run). Calls block while they read, write or run a shell, so an
interactive front end should issue them off its UI thread. Only one
operation may target a given config file at a time; serializing them is
the caller's job.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from aliasforge.backup import BackupManager
from aliasforge.config import Config, validate_file_path
from aliasforge.errors import AliasForgeError
from aliasforge.fs import FileSystem, ProcessRunner
from aliasforge.grammars import ShellType, get_grammar
from aliasforge.models import (
    AliasRecord,
    BackupResult,
    BackupSnapshot,
    ExportResult,
    FileImportResult,
    RestoreResult,
    ShellImportResult,
    ShellTarget,
)
from aliasforge import rollback
from aliasforge.porter import AliasPorter
from aliasforge.scanner import AliasScanner
from aliasforge.shell_detector import ShellDetector, ShellInfo
from aliasforge.shell_integrator import ShellIntegrator

Shell = Union[str, ShellType]


class AliasForge:
    """Detect, import, export, back up and restore"""

    def __init__(
        self,
        config: Optional[Config] = None,
        fs: Optional[FileSystem] = None,
        runner: Optional[ProcessRunner] = None,
        detector: Optional[ShellDetector] = None,
        home_dir: Optional[Path] = None,
    ):
        self.config = config or Config()
        self.fs = fs or FileSystem()
        self.home_dir = home_dir
        self.detector = detector or ShellDetector(home_dir)
        self.backups = BackupManager(self.fs, self.config.backup_count)
        self.integrator = ShellIntegrator(self.fs, self.backups)
        self.scanner = AliasScanner(runner, self.fs, timeout=self.config.import_timeout)
        self.porter = AliasPorter()

    def detect_shell(self) -> ShellInfo:
        shell_type = self.detector.detect_current_shell()
        return self.detector.detect(self.config.config_path_for(shell_type, self.home_dir))

    def target_for(self, shell: Shell, config_path: Optional[Union[str, Path]] = None) -> ShellTarget:
        """Resolve the file a shell's aliases are written to"""
        grammar = get_grammar(shell)
        if config_path:
            path = validate_file_path(config_path)
        else:
            path = self.config.config_path_for(grammar.shell_type, self.home_dir)
        return ShellTarget(shell_id=grammar.shell_id, config_path=path)

    def import_from_shell(self, shell: Shell, shell_path: Optional[str] = None) -> ShellImportResult:
        if shell_path is None:
            try:
                if get_grammar(shell).shell_type == self.detector.detect_current_shell():
                    shell_path = self.detector.shell_path()
            except AliasForgeError as exc:
                return ShellImportResult(success=False, error=exc.message)
        return self.scanner.import_from_shell(shell, shell_path)

    def scan_config(self, shell: Shell, config_path: Optional[Union[str, Path]] = None) -> ShellImportResult:
        """Read alias statements straight out of a shell config file"""
        try:
            target = self.target_for(shell, config_path)
        except AliasForgeError as exc:
            return ShellImportResult(success=False, error=exc.message)
        return self.scanner.scan_file(target.config_path, target.shell_id)

    def import_from_file(
        self, text: str, existing_names: Iterable[str] = (), format: str = "json"
    ) -> FileImportResult:
        return self.porter.import_from_text(text, existing_names, format=format)

    def export_to_shell(
        self,
        aliases: List[AliasRecord],
        shell: Shell,
        config_path: Optional[Union[str, Path]] = None,
    ) -> ExportResult:
        try:
            target = self.target_for(shell, config_path)
        except AliasForgeError as exc:
            return ExportResult(success=False, error=exc.message, error_kind=exc.kind)
        return self.integrator.export_to_shell(aliases, target)

    def preview_export(
        self,
        aliases: List[AliasRecord],
        shell: Shell,
        config_path: Optional[Union[str, Path]] = None,
    ) -> Tuple[ShellTarget, str, str]:
        """(target, previous block, new file text); raises AliasForgeError"""
        target = self.target_for(shell, config_path)
        previous, new_text = self.integrator.preview(aliases, target)
        return target, previous, new_text

    def export_to_file(self, aliases: List[AliasRecord], format: str = "json") -> str:
        return self.porter.export_to_text(aliases, format=format)

    def backup_file(self, path: Union[str, Path]) -> BackupResult:
        try:
            snapshot = self.backups.snapshot(validate_file_path(path), required=True)
        except AliasForgeError as exc:
            return BackupResult(success=False, error=exc.message, error_kind=exc.kind)
        return BackupResult(success=True, backup_path=snapshot.backup_path)

    def list_backups(self, path: Union[str, Path]) -> List[BackupSnapshot]:
        return self.backups.list_backups(validate_file_path(path))

    def restore_file(self, path: Union[str, Path], backup_id: Optional[str] = rollback.LATEST) -> RestoreResult:
        try:
            target = validate_file_path(path)
            snapshot = rollback.restore(self.backups, target, backup_id)
        except AliasForgeError as exc:
            return RestoreResult(success=False, path=exc.path, error=exc.message, error_kind=exc.kind)
        return RestoreResult(success=True, path=target, backup_path=snapshot.backup_path)
