"""Scanner for aliases defined in a live shell or in its config file"""

import logging
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from aliasforge.errors import ErrorKind, FileAccessError, UnknownShellError
from aliasforge.fs import FileSystem, ProcessRunner
from aliasforge.grammars import ShellGrammar, ShellType, get_grammar
from aliasforge.models import (
    IMPORTED_TAG,
    AliasRecord,
    AliasSource,
    ImportIssue,
    ShellImportResult,
    is_valid_name,
    new_alias_id,
)
from aliasforge.sanitize import strip_control_sequences

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
ALIAS_PREFIX = "alias "


class AliasScanner:
    """Scan and import existing aliases from a shell"""

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        fs: Optional[FileSystem] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.runner = runner or ProcessRunner()
        self.fs = fs or FileSystem()
        self.timeout = timeout

    def parse_output(
        self, output: str, shell: Union[str, ShellType]
    ) -> Tuple[List[AliasRecord], List[ImportIssue]]:
        """Parse the text a shell prints when asked to list its aliases"""
        grammar = get_grammar(shell)
        lines = strip_control_sequences(output).split("\n")
        return self._parse_lines(lines, grammar)

    def scan_text(
        self, text: str, shell: Union[str, ShellType]
    ) -> Tuple[List[AliasRecord], List[ImportIssue]]:
        """Parse only the alias statements of a config file's text"""
        grammar = get_grammar(shell)
        lines = strip_control_sequences(text).split("\n")
        return self._parse_lines(lines, grammar, statements_only=True)

    def _parse_lines(
        self, lines: Iterable[str], grammar: ShellGrammar, statements_only: bool = False
    ) -> Tuple[List[AliasRecord], List[ImportIssue]]:
        aliases: List[AliasRecord] = []
        issues: List[ImportIssue] = []

        for number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line:
                continue
            if statements_only and not grammar.is_statement(line):
                continue

            # bash prints "alias name='...'", zsh prints "name='...'"
            if line.startswith(ALIAS_PREFIX):
                line = line[len(ALIAS_PREFIX):].strip()

            parsed = grammar.parse_line(line)
            if parsed is None or not parsed[1]:
                logger.debug("Line %d is not an alias definition: %r", number, line)
                issues.append(
                    ImportIssue(
                        line_number=number,
                        kind=ErrorKind.PARSE_FAILURE,
                        message=f"line {number}: not an alias definition",
                        line=line,
                    )
                )
                continue

            name, command = parsed
            if not is_valid_name(name):
                logger.info("Skipping invalid alias name when importing: %r", name)
                issues.append(
                    ImportIssue(
                        line_number=number,
                        kind=ErrorKind.INVALID_NAME,
                        message=f"line {number}: invalid alias name '{name}'",
                        line=line,
                    )
                )
                continue

            aliases.append(
                AliasRecord(
                    name=name,
                    command=command,
                    tags=[IMPORTED_TAG],
                    enabled=True,
                    source=AliasSource.IMPORTED,
                    id=new_alias_id("imported"),
                )
            )

        return aliases, issues

    def import_from_shell(
        self, shell: Union[str, ShellType], shell_path: Optional[str] = None
    ) -> ShellImportResult:
        """Ask the shell for its aliases; failures come back as an empty result"""
        try:
            grammar = get_grammar(shell)
        except UnknownShellError as exc:
            return ShellImportResult(success=False, error=exc.message)

        argv = grammar.list_command(shell_path)
        try:
            result = self.runner.run(argv, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            return self._process_failure(f"{argv[0]} did not finish within {self.timeout} seconds")
        except (OSError, subprocess.SubprocessError) as exc:
            return self._process_failure(f"Could not run {argv[0]}: {exc}")

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            message = f"{argv[0]} exited with status {result.returncode}"
            if stderr:
                message += f": {strip_control_sequences(stderr)}"
            return self._process_failure(message)

        aliases, issues = self.parse_output(result.stdout or "", grammar.shell_type)
        logger.info(
            "Imported %d aliases from %s (%d lines skipped)",
            len(aliases),
            grammar.shell_id,
            len(issues),
        )
        return ShellImportResult(success=True, aliases=aliases, issues=issues)

    def scan_file(self, filepath: Path, shell: Union[str, ShellType]) -> ShellImportResult:
        """Scan a single config file for alias statements"""
        try:
            text = self.fs.read_text(filepath)
            aliases, issues = self.scan_text(text, shell)
        except (FileAccessError, UnknownShellError) as exc:
            return ShellImportResult(success=False, error=exc.message)
        return ShellImportResult(success=True, aliases=aliases, issues=issues)

    def _process_failure(self, message: str) -> ShellImportResult:
        logger.warning("Shell import failed: %s", message)
        return ShellImportResult(success=False, error=message)
