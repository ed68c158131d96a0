"""Shared fixtures and utilities for filesystem engine tests."""

import os
from pathlib import Path
from typing import Dict

import pytest

from fs_engine.fs_engine_cancellation import FsEngineCancellationToken
from fs_engine.fs_engine_mutation import FsEngineMutation
from fs_engine.fs_engine_pattern_matcher import FsEnginePatternMatcher
from fs_engine.fs_engine_transfer import FsEngineTransfer
from fs_engine.fs_engine_traversal import FsEngineTraversal


def create_layout(root: Path, layout: Dict[str, str | None]) -> None:
    """
    Create files and directories below root.

    Args:
        root: Directory to create the layout in
        layout: Mapping of relative path to file content, or None for a directory
    """
    for relative, content in layout.items():
        path = root / relative
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')


@pytest.fixture
def make_tree():
    """Factory for creating a layout of files and directories."""
    return create_layout


@pytest.fixture
def matcher():
    """Fixture providing a pattern matcher."""
    return FsEnginePatternMatcher()


@pytest.fixture
def traversal():
    """Fixture providing a traversal engine."""
    return FsEngineTraversal()


@pytest.fixture
def transfer():
    """Fixture providing a transfer engine."""
    return FsEngineTransfer()


@pytest.fixture
def mutation():
    """Fixture providing a mutation engine."""
    return FsEngineMutation()


@pytest.fixture
def sample_tree(tmp_path):
    """
    Fixture providing a small project tree.

    Layout:
        src/main.go
        src/pkg/util.go
        src/pkg/util_test.go
        docs/readme.txt
        .git/config
        .hidden_file
        top.txt
    """
    root = tmp_path / "project"
    create_layout(root, {
        "src/main.go": "package main\n",
        "src/pkg/util.go": "package pkg\n",
        "src/pkg/util_test.go": "package pkg\n",
        "docs/readme.txt": "read me\n",
        ".git/config": "[core]\n",
        ".hidden_file": "secret\n",
        "top.txt": "top\n",
    })
    return root


@pytest.fixture
def set_mtime():
    """Factory for setting a file's modification time."""
    def _set(path: Path, mtime: float) -> None:
        os.utime(path, (mtime, mtime))

    return _set


class CountdownToken(FsEngineCancellationToken):
    """Token that cancels itself after a fixed number of checks."""

    def __init__(self, checks_before_cancel: int) -> None:
        super().__init__()
        self._remaining = checks_before_cancel

    def check(self) -> None:
        self._remaining -= 1
        if self._remaining < 0:
            self.cancel()

        super().check()


@pytest.fixture
def countdown_token():
    """Factory for tokens that cancel after a given number of checks."""
    return CountdownToken
