import json
from pathlib import Path

import pytest
import yaml
from freezegun import freeze_time

from aliasforge.errors import ErrorKind
from aliasforge.models import AliasSource
from aliasforge.porter import AliasPorter, format_for_path


@pytest.fixture
def porter() -> AliasPorter:
    return AliasPorter()


def document(*entries) -> str:
    return json.dumps({"version": "1.0", "exportDate": "2026-01-26T10:00:00.000Z", "aliases": list(entries)})


def entry(**overrides):
    data = {"id": "alias-9", "name": "gp", "command": "git push", "tags": [], "enabled": True}
    data.update(overrides)
    return data


@freeze_time("2026-01-26 10:00:00")
def test_export_to_dict(porter, alias_list):
    export = porter.export_to_dict(alias_list)

    assert export["version"] == "1.0"
    assert export["exportDate"] == "2026-01-26T10:00:00.000Z"
    assert export["aliases"][0] == {
        "id": "alias-1",
        "name": "ll",
        "description": "List all files",
        "tags": ["fs", "daily"],
        "enabled": True,
        "command": "ls -la",
        "profile": None,
        "source": "user",
    }
    assert len(export["aliases"]) == 3


def test_export_to_dict__tag_filter(porter, alias_list):
    export = porter.export_to_dict(alias_list, tag_filter="git")

    assert [a["name"] for a in export["aliases"]] == ["gs"]


def test_export_to_text__json(porter, alias_list):
    text = porter.export_to_text(alias_list)

    assert text.endswith("}\n")
    assert [a["name"] for a in json.loads(text)["aliases"]] == ["ll", "gs", "old"]


def test_export_to_text__yaml(porter, alias_list):
    text = porter.export_to_text(alias_list, format="yaml")

    data = yaml.safe_load(text)
    assert data["version"] == "1.0"
    assert data["aliases"][2]["enabled"] is False


def test_export_to_text__unsupported_format(porter, alias_list):
    with pytest.raises(ValueError):
        porter.export_to_text(alias_list, format="toml")


def test_export_then_import_keeps_records(porter, alias_list):
    result = porter.import_from_text(porter.export_to_text(alias_list))

    assert result.success
    assert [a.to_dict() for a in result.valid] == [a.to_dict() for a in alias_list]


def test_import_from_text__duplicates_against_existing(porter, export_document):
    result = porter.import_from_text(export_document, existing_names=["gs"])

    assert [a.name for a in result.valid] == ["ll", "old"]
    assert [a.name for a in result.duplicates] == ["gs"]
    assert result.invalid == []


def test_import_from_text__duplicates_within_document(porter):
    result = porter.import_from_text(document(entry(), entry(id="alias-10", command="git push -f")))

    assert [a.command for a in result.valid] == ["git push"]
    assert [a.command for a in result.duplicates] == ["git push -f"]


@pytest.mark.parametrize(
    "bad,kind,message",
    [
        (entry(name=None), ErrorKind.MALFORMED_STRUCTURE, "entry 1: missing name field"),
        ({"name": "gp", "command": "git push"}, ErrorKind.MALFORMED_STRUCTURE, "entry 1: missing id field"),
        (entry(command=""), ErrorKind.MALFORMED_STRUCTURE, "entry 1: command must not be empty"),
        (entry(tags="git"), ErrorKind.MALFORMED_STRUCTURE, "entry 1: tags must be a list of strings"),
        (entry(enabled="yes"), ErrorKind.MALFORMED_STRUCTURE, "entry 1: enabled must be true or false"),
        (entry(source="cloud"), ErrorKind.MALFORMED_STRUCTURE, "entry 1: unknown source 'cloud'"),
        (entry(name="git push"), ErrorKind.INVALID_NAME, "entry 1: invalid alias name 'git push'"),
        ("gp=git push", ErrorKind.MALFORMED_STRUCTURE, "entry 1: not an alias object"),
    ],
)
def test_import_from_text__invalid_entries(porter, bad, kind, message):
    result = porter.import_from_text(document(bad, entry(id="alias-2", name="ok")))

    assert result.success
    assert [a.name for a in result.valid] == ["ok"]
    assert len(result.invalid) == 1
    assert result.invalid[0].kind == kind
    assert result.invalid[0].message == message
    assert result.invalid[0].index == 1


def test_import_from_text__not_json(porter):
    result = porter.import_from_text("{not json")

    assert not result.success
    assert result.error.startswith("Import failed:")
    assert result.valid == []


@pytest.mark.parametrize("text", ['{"version": "1.0"}', '{"aliases": {}}', "[]"])
def test_import_from_text__missing_aliases_list(porter, text):
    result = porter.import_from_text(text)

    assert result.error == "Invalid format: missing 'aliases' list"


def test_import_from_text__source_and_defaults(porter):
    result = porter.import_from_text(
        document(
            {"id": "a", "name": "one", "command": "echo 1"},
            entry(id="b", name="two", source="user", profile="work", description="second"),
        )
    )

    one, two = result.valid
    assert one.source == AliasSource.IMPORTED
    assert one.enabled
    assert one.tags == []
    assert one.description == ""
    assert two.source == AliasSource.USER
    assert two.profile == "work"
    assert two.description == "second"


def test_import_from_text__yaml(porter):
    text = """
version: "1.0"
aliases:
  - id: alias-1
    name: ll
    command: ls -la
    tags: [fs]
"""
    result = porter.import_from_text(text, format="yaml")

    assert [(a.name, a.command, a.tags) for a in result.valid] == [("ll", "ls -la", ["fs"])]


def test_import_from_text__bad_yaml(porter):
    result = porter.import_from_text("aliases: [unclosed", format="yaml")

    assert result.error.startswith("Import failed:")


def test_format_for_path():
    assert format_for_path(Path("aliases.yaml")) == "yaml"
    assert format_for_path(Path("aliases.YML")) == "yaml"
    assert format_for_path(Path("aliases.json")) == "json"
    assert format_for_path(Path("aliases")) == "json"
