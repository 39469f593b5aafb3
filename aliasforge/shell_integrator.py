"""Write aliases into the managed block of a shell config file"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from aliasforge.backup import BackupManager, iso_timestamp, utc_now
from aliasforge.block import block_text, locate_block, remove_block
from aliasforge.errors import AliasForgeError
from aliasforge.fs import FileSystem
from aliasforge.grammars import ShellGrammar, get_grammar
from aliasforge.models import AliasRecord, ExportResult, ShellTarget

logger = logging.getLogger(__name__)

MANAGED_NOTICE = "Managed by AliasForge - do not edit manually"


class ShellIntegrator:
    """Render aliases per shell grammar and splice them into config files"""

    def __init__(self, fs: Optional[FileSystem] = None, backups: Optional[BackupManager] = None):
        self.fs = fs or FileSystem()
        self.backups = backups or BackupManager(self.fs)

    def render_statements(self, aliases: List[AliasRecord], grammar: ShellGrammar) -> List[str]:
        """One statement per enabled alias with a valid name, each after its description"""
        lines = []
        for alias in aliases:
            if not alias.exportable:
                continue
            description = " ".join(alias.description.split())
            if description:
                lines.append(grammar.comment(description))
            lines.append(grammar.render(alias.name, alias.command))
        return lines

    def render_block(
        self, aliases: List[AliasRecord], grammar: ShellGrammar, moment: Optional[datetime] = None
    ) -> str:
        """Managed block text, markers included, without a trailing newline"""
        lines = [
            grammar.start_marker,
            grammar.comment(MANAGED_NOTICE),
            grammar.comment(f"Last updated: {iso_timestamp(moment or utc_now())}"),
            "",
        ]
        lines.extend(self.render_statements(aliases, grammar))
        lines.extend(["", grammar.end_marker])
        return "\n".join(lines)

    def splice(self, text: str, block: str, grammar: ShellGrammar) -> Tuple[str, str]:
        """Replace any previous block; returns (previous block, new file text)"""
        span = locate_block(text, grammar.start_marker, grammar.end_marker)
        previous = block_text(text, span)
        remainder = remove_block(text, span).rstrip()
        if remainder:
            return previous, f"{remainder}\n\n{block}\n"
        return previous, f"{block}\n"

    def read_current(self, path: Path) -> str:
        """Current file text; a missing file reads as empty"""
        if not self.fs.exists(path):
            return ""
        return self.fs.read_text(path)

    def preview(self, aliases: List[AliasRecord], target: ShellTarget) -> Tuple[str, str]:
        """What export_to_shell would write, without touching the disk"""
        grammar = get_grammar(target.shell_id)
        current = self.read_current(Path(target.config_path))
        return self.splice(current, self.render_block(aliases, grammar), grammar)

    def export_to_shell(self, aliases: List[AliasRecord], target: ShellTarget) -> ExportResult:
        """Back up the target file, then rewrite it with a fresh managed block"""
        path = Path(target.config_path)
        try:
            grammar = get_grammar(target.shell_id)
            current = self.read_current(path)
            _, new_text = self.splice(current, self.render_block(aliases, grammar), grammar)
            # Nothing is written unless the old content was preserved first
            snapshot = self.backups.snapshot(path)
            self.fs.write_text(path, new_text)
        except AliasForgeError as exc:
            logger.error("Export to %s failed: %s", path, exc.message)
            return ExportResult(success=False, path=path, error=exc.message, error_kind=exc.kind)

        count = sum(1 for alias in aliases if alias.exportable)
        logger.info("Exported %d aliases to %s", count, path)
        return ExportResult(
            success=True,
            path=path,
            backup_path=snapshot.backup_path if snapshot else None,
            count=count,
        )
