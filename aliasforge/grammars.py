"""Shell grammar table.

Each supported shell has one grammar object that knows how to write an alias
statement, read one back from the shell's own alias listing, mark comments,
and where the shell keeps its config file. Grammars are looked up by
``ShellType``; adding a shell means adding a class and registering it.
"""

import re
import shlex
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type, Union

from aliasforge.errors import UnknownShellError

MARKER_TITLE = "AliasForge managed aliases"

# Close the quote, emit an escaped quote, reopen
QUOTE_ESCAPE = "'\\''"


class ShellType(Enum):
    """Supported shell types"""

    ZSH = "zsh"
    BASH = "bash"
    FISH = "fish"
    POWERSHELL = "powershell"
    CMD = "cmd"


class ShellGrammar:
    """Syntax rules for one shell"""

    shell_type: ShellType
    comment_prefix = "#"
    statement_prefix = "alias "
    config_file = ".profile"

    @property
    def shell_id(self) -> str:
        return self.shell_type.value

    @property
    def start_marker(self) -> str:
        return f"{self.comment_prefix} >>> {MARKER_TITLE} >>>"

    @property
    def end_marker(self) -> str:
        return f"{self.comment_prefix} <<< {MARKER_TITLE} <<<"

    def comment(self, text: str = "") -> str:
        return f"{self.comment_prefix} {text}" if text else self.comment_prefix

    def default_config_path(self, home: Optional[Path] = None) -> Path:
        return (home or Path.home()) / self.config_file

    def list_command(self, shell_path: Optional[str] = None) -> List[str]:
        """argv that makes the shell print its aliases"""
        return [shell_path or self.shell_id, "-i", "-c", "alias"]

    def is_statement(self, line: str) -> bool:
        """True if a config file line is one of our alias statements"""
        return line.lstrip().startswith(self.statement_prefix)

    def render(self, name: str, command: str) -> str:
        raise NotImplementedError

    def parse_line(self, line: str) -> Optional[Tuple[str, str]]:
        """Split one cleaned output line into (name, command), or None"""
        raise NotImplementedError


class PosixGrammar(ShellGrammar):
    """bash/zsh: alias name='command' with '\\'' escaping"""

    ASSIGNMENT = re.compile(r"^([^=]+)=(.+)$", re.DOTALL)

    def render(self, name: str, command: str) -> str:
        escaped = command.replace("'", QUOTE_ESCAPE)
        return f"alias {name}='{escaped}'"

    def parse_line(self, line: str) -> Optional[Tuple[str, str]]:
        match = self.ASSIGNMENT.match(line.strip())
        if not match:
            return None
        return match.group(1).strip(), unquote_posix(match.group(2).strip())


def _strip_matching_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text


def unquote_posix(text: str) -> str:
    """Decode one POSIX shell word such as 'it'\\''s' back to it's.

    Unquoted text is returned as is. Quoted text that is not a single
    well-formed word only loses its outer pair of matching quotes.
    """
    if not text or text[0] not in "'\"":
        return text
    try:
        words = shlex.split(text)
    except ValueError:
        words = []
    if len(words) == 1:
        return words[0]
    return _strip_matching_quotes(text)


class FishGrammar(ShellGrammar):
    """fish: alias name='command' with backslash escapes inside quotes"""

    shell_type = ShellType.FISH
    config_file = ".config/fish/config.fish"

    # fish lists aliases as "alias name 'command'"; files may use name=command
    ASSIGNMENT = re.compile(r"^([^\s=]+)(?:=|\s+)(.+)$", re.DOTALL)

    def render(self, name: str, command: str) -> str:
        escaped = command.replace("\\", "\\\\").replace("'", "\\'")
        return f"alias {name}='{escaped}'"

    def parse_line(self, line: str) -> Optional[Tuple[str, str]]:
        match = self.ASSIGNMENT.match(line.strip())
        if not match:
            return None
        return match.group(1).strip(), unquote_fish(match.group(2).strip())


def _decode_fish_word(text: str) -> Optional[str]:
    out = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch in "'\"":
            escapable = "'\\" if ch == "'" else "\"\\$"
            i += 1
            while True:
                if i >= n:
                    return None
                c = text[i]
                if c == "\\" and i + 1 < n and text[i + 1] in escapable:
                    out.append(text[i + 1])
                    i += 2
                elif c == ch:
                    i += 1
                    break
                else:
                    out.append(c)
                    i += 1
        elif ch == "\\" and i + 1 < n:
            out.append(text[i + 1])
            i += 2
        elif ch.isspace():
            return None
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def unquote_fish(text: str) -> str:
    """Decode one fish word; fall back to stripping a matching quote pair"""
    decoded = _decode_fish_word(text)
    if decoded is None:
        return _strip_matching_quotes(text)
    return decoded


class PowerShellGrammar(ShellGrammar):
    """PowerShell: one function per alias"""

    shell_type = ShellType.POWERSHELL
    statement_prefix = "function "
    config_file = "Documents/PowerShell/Microsoft.PowerShell_profile.ps1"

    FUNCTION = re.compile(r"^function\s+([^\s{]+)\s*\{\s?(.*?)\s?\}\s*$", re.DOTALL)
    COLUMNS = re.compile(r"\s{2,}")

    def render(self, name: str, command: str) -> str:
        return f"function {name} {{ {command} }}"

    def parse_line(self, line: str) -> Optional[Tuple[str, str]]:
        line = line.strip()
        match = self.FUNCTION.match(line)
        if match:
            return match.group(1), match.group(2)
        # Get-Alias table output: "Name    Definition"
        parts = self.COLUMNS.split(line, maxsplit=1)
        if len(parts) == 2 and parts[1].strip():
            return parts[0].strip(), parts[1].strip()
        return None

    def list_command(self, shell_path: Optional[str] = None) -> List[str]:
        return [
            shell_path or "powershell",
            "-Command",
            "Get-Alias | Format-Table -HideTableHeaders Name, Definition",
        ]


class CmdGrammar(ShellGrammar):
    """cmd.exe: doskey macro lines, name=command"""

    shell_type = ShellType.CMD
    comment_prefix = "REM"
    statement_prefix = ""
    config_file = "aliases.cmd"

    ASSIGNMENT = re.compile(r"^([^=]+)=(.+)$", re.DOTALL)

    def render(self, name: str, command: str) -> str:
        return f"{name}={command}"

    def parse_line(self, line: str) -> Optional[Tuple[str, str]]:
        match = self.ASSIGNMENT.match(line.strip())
        if not match or not match.group(2).strip():
            return None
        return match.group(1).strip(), match.group(2).strip()

    def is_statement(self, line: str) -> bool:
        stripped = line.strip()
        return "=" in stripped and not stripped.upper().startswith(self.comment_prefix)

    def list_command(self, shell_path: Optional[str] = None) -> List[str]:
        return [shell_path or "cmd", "/c", "doskey /macros"]


class ZshGrammar(PosixGrammar):
    shell_type = ShellType.ZSH
    config_file = ".zshrc"


class BashGrammar(PosixGrammar):
    shell_type = ShellType.BASH
    config_file = ".bashrc"


GRAMMARS: Dict[ShellType, ShellGrammar] = {}


def register(grammar_cls: Type[ShellGrammar]) -> Type[ShellGrammar]:
    GRAMMARS[grammar_cls.shell_type] = grammar_cls()
    return grammar_cls


for _grammar_cls in (ZshGrammar, BashGrammar, FishGrammar, PowerShellGrammar, CmdGrammar):
    register(_grammar_cls)


def get_grammar(shell: Union[str, ShellType]) -> ShellGrammar:
    """Look up the grammar for a shell id such as 'zsh'"""
    try:
        shell_type = shell if isinstance(shell, ShellType) else ShellType(str(shell).lower())
        return GRAMMARS[shell_type]
    except (ValueError, KeyError):
        raise UnknownShellError(f"Unsupported shell: {shell}") from None


def supported_shells() -> List[str]:
    return [shell_type.value for shell_type in GRAMMARS]
