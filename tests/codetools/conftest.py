"""Shared fixtures for server application tests."""

import json

import pytest

from code_tool import CodeToolManager
from code_tool.filesystem.filesystem_code_tool import FileSystemCodeTool
from fs_engine import FsEnginePathResolver


@pytest.fixture
def write_config(tmp_path):
    """Factory for writing a JSON configuration file."""
    def _write(data, name: str = "config.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding='utf-8')

        else:
            path.write_text(json.dumps(data), encoding='utf-8')

        return str(path)

    return _write


@pytest.fixture
def served_dir(tmp_path):
    """Fixture providing a directory for the server to operate on."""
    root = tmp_path / "served"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("alpha\n", encoding='utf-8')
    (root / "sub" / "b.txt").write_text("beta\n", encoding='utf-8')
    return root


@pytest.fixture
def server_manager(served_dir):
    """Fixture providing a fresh tool manager with the filesystem tool registered."""
    CodeToolManager._instance = None
    manager = CodeToolManager()
    manager.register_tool(FileSystemCodeTool(resolver=FsEnginePathResolver(served_dir)), "Filesystem")
    yield manager
    CodeToolManager._instance = None
