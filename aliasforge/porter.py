"""Import and export of alias collections as JSON or YAML documents"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from aliasforge.backup import iso_timestamp, utc_now
from aliasforge.errors import ErrorKind
from aliasforge.models import (
    AliasRecord,
    AliasSource,
    FileImportResult,
    InvalidRecord,
    is_valid_name,
)

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0"
FORMATS = ("json", "yaml")
SOURCES = {source.value for source in AliasSource}


def format_for_path(filepath: Path) -> str:
    """Pick the document format from a file suffix"""
    return "yaml" if filepath.suffix.lower() in [".yaml", ".yml"] else "json"


class AliasPorter:
    """Handle import and export of aliases"""

    def export_to_dict(self, aliases: List[AliasRecord], tag_filter: Optional[str] = None) -> Dict[str, Any]:
        """Export aliases to a dictionary format"""
        if tag_filter:
            aliases = [alias for alias in aliases if tag_filter in alias.tags]

        return {
            "version": DOCUMENT_VERSION,
            "exportDate": iso_timestamp(utc_now()),
            "aliases": [alias.to_dict() for alias in aliases],
        }

    def export_to_text(
        self, aliases: List[AliasRecord], format: str = "json", tag_filter: Optional[str] = None
    ) -> str:
        """Serialize aliases to a document; writing it anywhere is up to the caller"""
        data = self.export_to_dict(aliases, tag_filter=tag_filter)

        if format == "yaml":
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
        elif format == "json":
            return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        raise ValueError(f"Unsupported format: {format}")

    def import_from_text(
        self, text: str, existing_names: Iterable[str] = (), format: str = "json"
    ) -> FileImportResult:
        """Split a document's aliases into valid, invalid and duplicate records.

        Duplicates are names already present in ``existing_names`` or repeated
        earlier in the same document; they are reported, never merged.
        """
        try:
            if format == "yaml":
                data = yaml.safe_load(text)
            elif format == "json":
                data = json.loads(text)
            else:
                return FileImportResult(error=f"Unsupported format: {format}")
        except (ValueError, yaml.YAMLError) as exc:
            return FileImportResult(error=f"Import failed: {exc}")

        if not isinstance(data, dict) or not isinstance(data.get("aliases"), list):
            return FileImportResult(error="Invalid format: missing 'aliases' list")

        result = FileImportResult()
        seen = set(existing_names)

        for index, entry in enumerate(data["aliases"], start=1):
            problem = self.validate_entry(entry)
            if problem:
                kind, message = problem
                result.invalid.append(
                    InvalidRecord(index=index, kind=kind, message=f"entry {index}: {message}", data=entry)
                )
                continue

            alias = self._to_record(entry)
            if alias.name in seen:
                result.duplicates.append(alias)
                continue
            seen.add(alias.name)
            result.valid.append(alias)

        logger.info(
            "Document import: %d valid, %d invalid, %d duplicates",
            len(result.valid),
            len(result.invalid),
            len(result.duplicates),
        )
        return result

    def validate_entry(self, entry: Any) -> Optional[Tuple[ErrorKind, str]]:
        """Return (kind, message) describing the first problem, or None"""
        if not isinstance(entry, dict):
            return ErrorKind.MALFORMED_STRUCTURE, "not an alias object"

        for field in ("id", "name", "command"):
            if field not in entry or entry[field] is None:
                return ErrorKind.MALFORMED_STRUCTURE, f"missing {field} field"
            if not isinstance(entry[field], str):
                return ErrorKind.MALFORMED_STRUCTURE, f"{field} must be a string"

        if not entry["id"].strip():
            return ErrorKind.MALFORMED_STRUCTURE, "id must not be empty"
        if not entry["command"].strip():
            return ErrorKind.MALFORMED_STRUCTURE, "command must not be empty"

        tags = entry.get("tags")
        if tags is not None and (not isinstance(tags, list) or not all(isinstance(t, str) for t in tags)):
            return ErrorKind.MALFORMED_STRUCTURE, "tags must be a list of strings"

        if "enabled" in entry and not isinstance(entry["enabled"], bool):
            return ErrorKind.MALFORMED_STRUCTURE, "enabled must be true or false"

        description = entry.get("description")
        if description is not None and not isinstance(description, str):
            return ErrorKind.MALFORMED_STRUCTURE, "description must be a string"

        source = entry.get("source")
        if source is not None and source not in SOURCES:
            return ErrorKind.MALFORMED_STRUCTURE, f"unknown source '{source}'"

        if not is_valid_name(entry["name"]):
            return ErrorKind.INVALID_NAME, f"invalid alias name '{entry['name']}'"

        return None

    def _to_record(self, entry: Dict[str, Any]) -> AliasRecord:
        profile = entry.get("profile")
        return AliasRecord(
            id=entry["id"],
            name=entry["name"],
            command=entry["command"],
            description=entry.get("description") or "",
            tags=entry.get("tags") or [],
            enabled=entry.get("enabled", True),
            source=entry.get("source") or AliasSource.IMPORTED,
            profile=str(profile) if profile is not None else None,
        )
