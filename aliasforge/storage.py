import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from aliasforge.fs import FileSystem
from aliasforge.models import AliasRecord

logger = logging.getLogger(__name__)


class AliasStorage:
    """Handle storage and retrieval of the alias collection"""

    def __init__(self, storage_path: Optional[Path] = None, fs: Optional[FileSystem] = None):
        """Initialize storage with optional custom path"""
        if storage_path:
            self.storage_path = storage_path
        else:
            # Default to ~/.aliasforge/aliases.json
            self.storage_path = Path.home() / ".aliasforge" / "aliases.json"

        self.fs = fs or FileSystem()
        self.aliases: Dict[str, AliasRecord] = {}
        self.profiles: List[Any] = []
        self.load()

    def load(self) -> None:
        """Load aliases from JSON file"""
        if not self.storage_path.exists():
            return
        try:
            with open(self.storage_path, 'r') as f:
                data = json.load(f)
            records = [AliasRecord.from_dict(item) for item in data.get("aliases", [])]
            self.aliases = {alias.name: alias for alias in records}
            self.profiles = data.get("profiles", [])
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            # Corrupted file: start fresh but keep the old file around
            backup_path = self.storage_path.with_suffix('.corrupted')
            logger.warning("Alias collection %s is unreadable (%s), moved to %s",
                           self.storage_path, exc, backup_path.name)
            self.storage_path.rename(backup_path)
            self.aliases = {}
            self.profiles = []

    def save(self) -> None:
        """Save aliases to JSON file"""
        data = {
            "aliases": [alias.to_dict() for alias in self.aliases.values()],
            "profiles": self.profiles,
        }
        self.fs.write_text(self.storage_path, json.dumps(data, indent=2) + "\n")

    def add(self, alias: AliasRecord) -> bool:
        """Add a new alias, return True if successful"""
        if alias.name in self.aliases:
            return False
        self.aliases[alias.name] = alias
        self.save()
        return True

    def remove(self, name: str) -> bool:
        """Remove an alias, return True if it existed"""
        if name in self.aliases:
            del self.aliases[name]
            self.save()
            return True
        return False

    def get(self, name: str) -> Optional[AliasRecord]:
        """Get an alias by name"""
        return self.aliases.get(name)

    def list_all(self) -> List[AliasRecord]:
        """Get all aliases as a list"""
        return list(self.aliases.values())

    def names(self) -> List[str]:
        return list(self.aliases)

    def set_enabled(self, name: str, enabled: bool) -> bool:
        """Enable or disable an alias, return True if it exists"""
        alias = self.aliases.get(name)
        if alias is None:
            return False
        alias.enabled = enabled
        self.save()
        return True

    def merge(self, aliases: Iterable[AliasRecord]) -> List[AliasRecord]:
        """Add aliases whose names are new; return the ones added"""
        added = []
        for alias in aliases:
            if alias.name not in self.aliases:
                self.aliases[alias.name] = alias
                added.append(alias)
        if added:
            self.save()
        return added
