from pathlib import Path

import pytest

from aliasforge.errors import ErrorKind, UnknownShellError
from aliasforge.grammars import (
    ShellType,
    get_grammar,
    supported_shells,
    unquote_fish,
    unquote_posix,
)


def test_supported_shells():
    assert set(supported_shells()) == {"zsh", "bash", "fish", "powershell", "cmd"}


def test_get_grammar__by_id_and_type():
    assert get_grammar("zsh").shell_type == ShellType.ZSH
    assert get_grammar("BASH").shell_type == ShellType.BASH
    assert get_grammar(ShellType.FISH).shell_id == "fish"


def test_get_grammar__unknown_shell():
    with pytest.raises(UnknownShellError) as exc_info:
        get_grammar("tcsh")

    assert exc_info.value.message == "Unsupported shell: tcsh"
    assert exc_info.value.kind == ErrorKind.UNKNOWN_SHELL
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.parametrize("shell", ["zsh", "bash", "fish", "powershell"])
def test_markers__hash_comment(shell):
    grammar = get_grammar(shell)
    assert grammar.start_marker == "# >>> AliasForge managed aliases >>>"
    assert grammar.end_marker == "# <<< AliasForge managed aliases <<<"


def test_markers__cmd_uses_rem():
    grammar = get_grammar("cmd")
    assert grammar.start_marker == "REM >>> AliasForge managed aliases >>>"
    assert grammar.end_marker == "REM <<< AliasForge managed aliases <<<"
    assert grammar.comment("hello") == "REM hello"


def test_default_config_paths():
    home = Path("/home/user")
    assert get_grammar("zsh").default_config_path(home) == home / ".zshrc"
    assert get_grammar("bash").default_config_path(home) == home / ".bashrc"
    assert get_grammar("fish").default_config_path(home) == home / ".config/fish/config.fish"
    assert get_grammar("powershell").default_config_path(home) == (
        home / "Documents/PowerShell/Microsoft.PowerShell_profile.ps1"
    )
    assert get_grammar("cmd").default_config_path(home) == home / "aliases.cmd"


def test_list_command():
    assert get_grammar("zsh").list_command() == ["zsh", "-i", "-c", "alias"]
    assert get_grammar("bash").list_command("/usr/local/bin/bash") == [
        "/usr/local/bin/bash", "-i", "-c", "alias"
    ]
    assert get_grammar("cmd").list_command() == ["cmd", "/c", "doskey /macros"]
    assert get_grammar("powershell").list_command()[:2] == ["powershell", "-Command"]


@pytest.mark.parametrize("shell", ["zsh", "bash"])
def test_posix_render(shell):
    grammar = get_grammar(shell)
    assert grammar.render("ll", "ls -la") == "alias ll='ls -la'"
    assert grammar.render("greet", "echo 'hi'") == "alias greet='echo '\\''hi'\\'''"


def test_posix_parse__quoted_with_escapes():
    grammar = get_grammar("bash")
    assert grammar.parse_line("greet='echo '\\''hi'\\'''") == ("greet", "echo 'hi'")
    assert grammar.parse_line("ll='ls -la'") == ("ll", "ls -la")
    assert grammar.parse_line("la=ls") == ("la", "ls")
    assert grammar.parse_line('dq="echo $HOME"') == ("dq", "echo $HOME")


def test_posix_parse__no_assignment():
    assert get_grammar("zsh").parse_line("not an alias") is None


def test_posix_render_then_parse_preserves_quotes():
    grammar = get_grammar("zsh")
    command = "git log --format='%h %s' | grep 'fix'"
    line = grammar.render("gl", command)[len("alias "):]
    assert grammar.parse_line(line) == ("gl", command)


def test_unquote_posix():
    assert unquote_posix("plain") == "plain"
    assert unquote_posix("'it'\\''s'") == "it's"
    assert unquote_posix("'unterminated") == "'unterminated"
    assert unquote_posix("'a' 'b'") == "a' 'b"


def test_fish_render_and_parse():
    grammar = get_grammar("fish")
    line = grammar.render("greet", "echo 'hi' \\n")
    assert line == "alias greet='echo \\'hi\\' \\\\n'"
    assert grammar.parse_line(line[len("alias "):]) == ("greet", "echo 'hi' \\n")


def test_fish_parse__listing_format():
    grammar = get_grammar("fish")
    assert grammar.parse_line("ll 'ls -la'") == ("ll", "ls -la")
    assert grammar.parse_line("gs='git status'") == ("gs", "git status")


def test_unquote_fish__falls_back_to_quote_strip():
    assert unquote_fish("'unterminated") == "'unterminated"
    assert unquote_fish("'two words' extra") == "'two words' extra"


def test_powershell_render_and_parse():
    grammar = get_grammar("powershell")
    assert grammar.render("gs", "git status") == "function gs { git status }"
    assert grammar.parse_line("function gs { git status }") == ("gs", "git status")
    assert grammar.parse_line("gal           Get-Alias") == ("gal", "Get-Alias")
    assert grammar.parse_line("lonely") is None


def test_cmd_render_and_parse():
    grammar = get_grammar("cmd")
    assert grammar.render("gs", "git status") == "gs=git status"
    assert grammar.parse_line("gs=git status") == ("gs", "git status")
    assert grammar.parse_line("gs=") is None
    assert grammar.is_statement("gs=git status")
    assert not grammar.is_statement("REM x=y")


def test_is_statement():
    assert get_grammar("bash").is_statement("  alias ll='ls -la'")
    assert not get_grammar("bash").is_statement("# alias ll='ls -la'")
    assert get_grammar("powershell").is_statement("function gs { git status }")
