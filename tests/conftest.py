import json
import subprocess
from pathlib import Path
from typing import List
from unittest.mock import Mock

import pytest

from aliasforge.backup import BackupManager
from aliasforge.config import Config
from aliasforge.fs import FileSystem, ProcessRunner
from aliasforge.models import AliasRecord
from aliasforge.shell_integrator import ShellIntegrator


@pytest.fixture
def alias() -> AliasRecord:
    return AliasRecord(
        id="alias-1",
        name="ll",
        command="ls -la",
        description="List all files",
        tags=["fs", "daily"],
    )


@pytest.fixture
def alias_list(alias) -> List[AliasRecord]:
    return [
        alias,
        AliasRecord(id="alias-2", name="gs", command="git status", tags=["git"]),
        AliasRecord(id="alias-3", name="old", command="echo legacy", enabled=False),
    ]


@pytest.fixture
def fs() -> FileSystem:
    return FileSystem()


@pytest.fixture
def backups(fs) -> BackupManager:
    return BackupManager(fs, backup_count=5)


@pytest.fixture
def integrator(fs, backups) -> ShellIntegrator:
    return ShellIntegrator(fs, backups)


@pytest.fixture
def zshrc(tmp_path) -> Path:
    """Config file with user content and no managed block"""
    config_file = tmp_path / ".zshrc"
    config_file.write_text("export PATH=$PATH:/opt/bin\n")
    return config_file


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(config_dir=tmp_path / ".aliasforge")


@pytest.fixture
def mock_runner():
    """ProcessRunner whose run() returns an empty successful listing"""
    runner = Mock(spec=ProcessRunner)
    runner.run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
    return runner


@pytest.fixture
def completed():
    """Build the CompletedProcess a shell would hand back"""
    def make(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
        return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)
    return make


@pytest.fixture
def export_document(alias_list) -> str:
    return json.dumps(
        {
            "version": "1.0",
            "exportDate": "2026-01-26T10:00:00.000Z",
            "aliases": [a.to_dict() for a in alias_list],
        }
    )
