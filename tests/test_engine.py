import pytest
from freezegun import freeze_time

from aliasforge.engine import AliasForge
from aliasforge.errors import AliasForgeError, ErrorKind
from aliasforge.grammars import ShellType
from aliasforge.shell_detector import ShellDetector


@pytest.fixture
def forge(tmp_path, config, mock_runner) -> AliasForge:
    detector = ShellDetector(tmp_path, environ={"SHELL": "/usr/bin/zsh"}, platform="linux")
    return AliasForge(config=config, runner=mock_runner, detector=detector, home_dir=tmp_path)


def test_detect_shell(forge, tmp_path):
    info = forge.detect_shell()

    assert info.default_shell == ShellType.ZSH
    assert info.shell_path == "/usr/bin/zsh"
    assert info.config_path == tmp_path / ".zshrc"


def test_detect_shell__configured_path(forge, tmp_path):
    forge.config.config["export_paths"] = {"zsh": str(tmp_path / "aliases.zsh")}

    assert forge.detect_shell().config_path == tmp_path / "aliases.zsh"


def test_import_from_shell__uses_detected_binary(forge, mock_runner, completed):
    mock_runner.run.return_value = completed(stdout="ll='ls -la'\n")

    result = forge.import_from_shell("zsh")

    assert result.success
    assert [a.name for a in result.aliases] == ["ll"]
    mock_runner.run.assert_called_once_with(["/usr/bin/zsh", "-i", "-c", "alias"], timeout=10)


def test_import_from_shell__other_shell_by_name(forge, mock_runner):
    forge.import_from_shell("bash")

    mock_runner.run.assert_called_once_with(["bash", "-i", "-c", "alias"], timeout=10)


def test_import_from_shell__unknown(forge):
    result = forge.import_from_shell("tcsh")

    assert not result.success
    assert result.error == "Unsupported shell: tcsh"


def test_import_from_file(forge, export_document):
    result = forge.import_from_file(export_document, existing_names=["ll"])

    assert [a.name for a in result.valid] == ["gs", "old"]
    assert [a.name for a in result.duplicates] == ["ll"]


@freeze_time("2026-01-26 10:00:00")
def test_export_to_shell__default_target(forge, alias_list, tmp_path):
    result = forge.export_to_shell(alias_list, "zsh")

    assert result.success
    assert result.path == tmp_path / ".zshrc"
    assert "alias gs='git status'" in result.path.read_text()


def test_export_to_shell__explicit_path(forge, alias_list, tmp_path):
    target = tmp_path / "custom" / "aliases.sh"

    result = forge.export_to_shell(alias_list, "bash", target)

    assert result.success
    assert target.read_text().startswith("# >>> AliasForge managed aliases >>>\n")


def test_export_to_shell__unknown_shell(forge, alias_list):
    result = forge.export_to_shell(alias_list, "tcsh")

    assert not result.success
    assert result.error_kind == ErrorKind.UNKNOWN_SHELL


def test_export_to_shell__rejects_parent_traversal(forge, alias_list):
    result = forge.export_to_shell(alias_list, "zsh", "/tmp/../etc/zshrc")

    assert not result.success
    assert result.error.startswith("Invalid file path")


def test_preview_export(forge, alias_list, zshrc):
    target, previous, new_text = forge.preview_export(alias_list, "zsh", zshrc)

    assert target.config_path == zshrc
    assert previous == ""
    assert new_text.startswith("export PATH=$PATH:/opt/bin\n\n# >>> AliasForge")
    assert zshrc.read_text() == "export PATH=$PATH:/opt/bin\n"


def test_preview_export__unknown_shell(forge, alias_list):
    with pytest.raises(AliasForgeError):
        forge.preview_export(alias_list, "tcsh")


def test_export_to_file(forge, alias_list):
    text = forge.export_to_file(alias_list, format="yaml")

    assert "name: ll" in text


def test_backup_then_restore(forge, zshrc):
    backup = forge.backup_file(zshrc)
    zshrc.write_text("oops\n")

    restored = forge.restore_file(zshrc)

    assert backup.success
    assert restored.success
    assert restored.backup_path == backup.backup_path
    assert zshrc.read_text() == "export PATH=$PATH:/opt/bin\n"
    assert [s.backup_path for s in forge.list_backups(zshrc)] == [backup.backup_path]


def test_backup_file__missing(forge, tmp_path):
    result = forge.backup_file(tmp_path / "nope")

    assert not result.success
    assert result.error_kind == ErrorKind.FILE_NOT_FOUND


def test_restore_file__no_backup(forge, zshrc):
    result = forge.restore_file(zshrc)

    assert not result.success
    assert result.error_kind == ErrorKind.NO_BACKUP
    assert result.path == zshrc
    assert zshrc.read_text() == "export PATH=$PATH:/opt/bin\n"


def test_scan_config(forge, tmp_path):
    (tmp_path / ".bashrc").write_text("alias ll='ls -la'\nexport X=1\n")

    result = forge.scan_config("bash")

    assert result.success
    assert [a.name for a in result.aliases] == ["ll"]


def test_backup_count_from_config(tmp_path, config, mock_runner):
    config.config["backup_count"] = 2

    forge = AliasForge(config=config, runner=mock_runner, home_dir=tmp_path)

    assert forge.backups.backup_count == 2
