"""Normalization of caller-supplied paths."""

import os
from pathlib import Path

from fs_engine.fs_engine_exceptions import FsEngineInvalidPathError


class FsEnginePathResolver:
    """
    Turns raw path strings into absolute, lexically normalized paths.

    Resolution never touches the filesystem beyond reading the working directory:
    symlinks are not followed and existence is not checked.
    """

    def __init__(self, base_dir: Path | str | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            base_dir: Directory relative paths are joined to (defaults to the working directory)
        """
        self._base_dir = Path(base_dir) if base_dir is not None else None

    def base_dir(self) -> Path:
        """
        Get the directory relative paths are resolved against.

        Returns:
            Absolute base directory
        """
        if self._base_dir is None:
            return Path(os.getcwd())

        return Path(os.path.abspath(self._base_dir))

    def resolve(self, raw_path: str) -> Path:
        """
        Resolve a raw path string.

        Args:
            raw_path: Absolute or relative path

        Returns:
            Absolute, normalized path

        Raises:
            FsEngineInvalidPathError: If the string cannot be turned into a usable path
        """
        if not isinstance(raw_path, str) or not raw_path:
            raise FsEngineInvalidPathError("Path must be a non-empty string", raw_path)

        if "\x00" in raw_path:
            raise FsEngineInvalidPathError("Path contains a NUL character", raw_path.replace("\x00", "\\0"))

        try:
            os.fsencode(raw_path)
            joined = os.path.join(self.base_dir(), raw_path)
            return Path(os.path.normpath(joined))

        except (ValueError, UnicodeError, OSError) as e:
            raise FsEngineInvalidPathError(f"Cannot normalize path '{raw_path}': {str(e)}", raw_path) from e
