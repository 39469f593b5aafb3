import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from aliasforge.backup import DEFAULT_BACKUP_COUNT
from aliasforge.errors import AliasForgeError
from aliasforge.grammars import ShellType, get_grammar
from aliasforge.scanner import DEFAULT_TIMEOUT


def validate_file_path(path: Union[str, Path]) -> Path:
    """Reject paths that climb out of their directory with '..'"""
    path = Path(path).expanduser()
    if ".." in path.parts:
        raise AliasForgeError(f"Invalid file path: {path}", path=path)
    return path


class Config:
    """Manage AliasForge settings"""

    DEFAULT_CONFIG = {
        "backup_count": DEFAULT_BACKUP_COUNT,
        "export_paths": {},  # shell id -> config file, overrides the shell default
        "import_timeout": DEFAULT_TIMEOUT,
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".aliasforge"
        self.config_path = self.config_dir / "settings.json"
        self.config = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file"""
        defaults = copy.deepcopy(self.DEFAULT_CONFIG)
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    user_config = json.load(f)
                if isinstance(user_config, dict):
                    return {**defaults, **user_config}
            except (OSError, ValueError):
                pass
        return defaults

    def save(self) -> None:
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        self.config[key] = value
        self.save()

    @property
    def backup_count(self) -> int:
        try:
            return max(1, int(self.get("backup_count", DEFAULT_BACKUP_COUNT)))
        except (TypeError, ValueError):
            return DEFAULT_BACKUP_COUNT

    @property
    def import_timeout(self) -> float:
        try:
            return float(self.get("import_timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError):
            return DEFAULT_TIMEOUT

    def config_path_for(self, shell: Union[str, ShellType], home: Optional[Path] = None) -> Path:
        """Config file for a shell: the export_paths override, else the shell default"""
        grammar = get_grammar(shell)
        export_paths = self.get("export_paths") or {}
        override = export_paths.get(grammar.shell_id) if isinstance(export_paths, dict) else None
        if override:
            return validate_file_path(override)
        return grammar.default_config_path(home)
