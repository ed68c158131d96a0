"""
Shared fixtures and utilities for tool tests.
"""
from pathlib import Path
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

from code_tool import CodeToolCall, CodeToolManager
from code_tool.filesystem.filesystem_code_tool import FileSystemCodeTool
from fs_engine import FsEnginePathResolver


@pytest.fixture
def workspace(tmp_path):
    """
    Fixture providing a small directory tree to run tools against.

    Layout:
        src/main.py
        src/lib/util.py
        docs/guide.md
        .env
        notes.txt
    """
    files = {
        "src/main.py": "print('main')\n",
        "src/lib/util.py": "def util():\n    pass\n",
        "docs/guide.md": "# Guide\n",
        ".env": "SECRET=1\n",
        "notes.txt": "notes\n",
    }
    for relative, content in files.items():
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')

    return tmp_path


@pytest.fixture
def filesystem_tool(workspace):
    """Fixture providing a filesystem tool rooted at the test workspace."""
    return FileSystemCodeTool(resolver=FsEnginePathResolver(workspace))


@pytest.fixture
def tool_manager():
    """Fixture providing a fresh tool manager singleton."""
    CodeToolManager._instance = None
    manager = CodeToolManager()
    yield manager
    CodeToolManager._instance = None


@pytest.fixture
def mock_authorization():
    """Fixture providing a mocked authorization callback."""
    mock = MagicMock()

    async def mock_auth_callback(_tool_name, _arguments, _context, _requester_ref, _destructive):
        return True  # Default to authorized

    mock.side_effect = mock_auth_callback
    return mock


@pytest.fixture
def mock_authorization_denied():
    """Fixture providing a mocked authorization callback that denies requests."""
    mock = MagicMock()

    async def mock_auth_callback(_tool_name, _arguments, _context, _requester_ref, _destructive):
        return False  # Always deny

    mock.side_effect = mock_auth_callback
    return mock


@pytest.fixture
def make_tool_call():
    """Factory for creating CodeToolCall objects for testing."""
    counter = [0]

    def _make_call(tool_name: str, arguments: Dict[str, Any]) -> CodeToolCall:
        counter[0] += 1
        return CodeToolCall(
            id=f"test_call_{counter[0]}",
            name=tool_name,
            arguments=arguments
        )

    return _make_call


@pytest.fixture
def read_text():
    """Helper for reading a file's text in assertions."""
    def _read(path: Path) -> str:
        return path.read_text(encoding='utf-8')

    return _read
