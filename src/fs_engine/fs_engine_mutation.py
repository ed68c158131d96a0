"""Deletion of files and directory trees."""

import logging
import os
from pathlib import Path
import stat
from typing import List, Tuple

from fs_engine.fs_engine_cancellation import FsEngineCancellationToken
from fs_engine.fs_engine_exceptions import (
    FsEngineError, FsEngineIsADirectoryError, FsEngineNotFoundError
)


class FsEngineMutation:
    """Delete and remove operations."""

    def __init__(self) -> None:
        self._logger = logging.getLogger("FsEngineMutation")

    def delete(self, path: Path) -> None:
        """
        Delete exactly one file.

        Symbolic links are removed themselves, never their targets.

        Args:
            path: Absolute path of the file

        Raises:
            FsEngineNotFoundError: If the path does not exist
            FsEngineIsADirectoryError: If the path is a directory
            FsEngineUnderlyingError: If the OS refuses the removal
        """
        path_stat = self._lstat(path)
        if stat.S_ISDIR(path_stat.st_mode):
            raise FsEngineIsADirectoryError(
                f"Delete expects a file but a directory was provided: {path}", path
            )

        try:
            os.unlink(path)

        except OSError as e:
            raise FsEngineError.from_os_error(e, path) from e

        self._logger.info("Deleted file %s", path)

    def remove(
        self,
        path: Path,
        recursive: bool = False,
        cancel_token: FsEngineCancellationToken | None = None
    ) -> None:
        """
        Remove a file, an empty directory or, with recursive set, a whole directory tree.

        A recursive removal walks the tree itself, deleting each directory after its
        contents.  Symbolic links inside the tree are removed, never followed.

        Args:
            path: Absolute path to remove
            recursive: Remove directories together with their contents
            cancel_token: Cancellation signal, checked at every directory and entry

        Raises:
            FsEngineNotFoundError: If the path does not exist
            FsEngineCancelledError: If cancelled; entries already removed stay removed
            FsEngineUnderlyingError: If the OS refuses the removal, including a
                non-empty directory when recursive is not set
        """
        token = cancel_token or FsEngineCancellationToken()
        path_stat = self._lstat(path)
        token.check()

        try:
            if not stat.S_ISDIR(path_stat.st_mode):
                os.unlink(path)

            elif recursive:
                self._remove_tree(path, token)

            else:
                os.rmdir(path)

        except OSError as e:
            raise FsEngineError.from_os_error(e, path) from e

        self._logger.info("Removed %s%s", path, " recursively" if recursive else "")

    def _remove_tree(self, root: Path, token: FsEngineCancellationToken) -> None:
        """
        Remove a directory tree bottom-up.

        Each stack item is a directory and whether its children have been dealt with.
        """
        stack: List[Tuple[str, bool]] = [(str(root), False)]

        while stack:
            directory, emptied = stack.pop()
            if emptied:
                os.rmdir(directory)
                continue

            token.check()
            stack.append((directory, True))

            with os.scandir(directory) as iterator:
                children = list(iterator)

            for child in children:
                token.check()
                if child.is_dir(follow_symlinks=False):
                    stack.append((child.path, False))
                    continue

                os.unlink(child.path)

    def _lstat(self, path: Path) -> os.stat_result:
        """Stat a path without following a final symlink, mapping a missing path to NotFound."""
        try:
            return os.lstat(path)

        except FileNotFoundError as e:
            raise FsEngineNotFoundError(f"Path does not exist: {path}", path) from e

        except OSError as e:
            raise FsEngineError.from_os_error(e, path) from e
