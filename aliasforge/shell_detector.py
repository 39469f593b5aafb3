"""Shell detection and configuration file lookup"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from aliasforge.grammars import ShellType, get_grammar


@dataclass
class ShellInfo:
    """What the engine needs to know about the user's shell"""
    platform: str
    default_shell: ShellType
    shell_path: str
    config_path: Path


class ShellDetector:
    """Detect shell type and configuration files"""

    # Common config file patterns
    CONFIG_FILES = {
        ShellType.BASH: [".bashrc", ".bash_profile", ".bash_aliases", ".profile"],
        ShellType.ZSH: [".zshrc", ".zshenv", ".zprofile", ".zsh_aliases"],
        ShellType.FISH: [".config/fish/config.fish"],
        ShellType.POWERSHELL: ["Documents/PowerShell/Microsoft.PowerShell_profile.ps1"],
        ShellType.CMD: ["aliases.cmd"],
    }

    def __init__(
        self,
        home_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        platform: Optional[str] = None,
    ):
        """Initialize detector with home directory, environment and platform"""
        self.home_dir = home_dir or Path.home()
        self.environ = os.environ if environ is None else environ
        self.platform = platform or sys.platform

    def shell_path(self) -> str:
        """Path of the user's login shell"""
        shell_env = self.environ.get("SHELL", "")
        if shell_env:
            return shell_env
        if self.platform == "win32":
            return "powershell.exe"

        # Fall back to the passwd entry before assuming bash
        try:
            import pwd

            user_shell = pwd.getpwuid(os.getuid()).pw_shell
            if user_shell:
                return user_shell
        except (ImportError, KeyError, AttributeError, OSError):
            pass
        return "/bin/bash"

    def detect_current_shell(self) -> ShellType:
        """Detect the current shell from the environment"""
        if self.platform == "win32":
            return ShellType.POWERSHELL

        shell_name = Path(self.shell_path()).name.lower()
        if "zsh" in shell_name:
            return ShellType.ZSH
        elif "bash" in shell_name:
            return ShellType.BASH
        elif "fish" in shell_name:
            return ShellType.FISH
        return ShellType.BASH

    def detect(self, config_path: Optional[Path] = None) -> ShellInfo:
        """Platform, default shell, its binary and the file aliases go to"""
        shell_type = self.detect_current_shell()
        return ShellInfo(
            platform=self.platform,
            default_shell=shell_type,
            shell_path=self.shell_path(),
            config_path=config_path or get_grammar(shell_type).default_config_path(self.home_dir),
        )

    def find_config_files(self, shell_type: Optional[ShellType] = None) -> Dict[str, Path]:
        """Find existing configuration files for shell"""
        if shell_type is None:
            shell_type = self.detect_current_shell()

        config_files = {}
        for pattern in self.CONFIG_FILES.get(shell_type, []):
            config_path = self.home_dir / pattern
            if config_path.exists() and config_path.is_file():
                config_files[pattern] = config_path

        return config_files
