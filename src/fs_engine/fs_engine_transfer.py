"""Copy and move of files and directory trees."""

import errno
import logging
import os
from pathlib import Path
import shutil
import stat
from typing import List, Tuple

from fs_engine.fs_engine_cancellation import FsEngineCancellationToken
from fs_engine.fs_engine_exceptions import (
    FsEngineAlreadyExistsError, FsEngineError, FsEngineInvalidPathError,
    FsEngineNotFoundError, FsEnginePartialFailureError
)
from fs_engine.fs_engine_mutation import FsEngineMutation
from fs_engine.fs_engine_types import FsEngineTransferPlan


class FsEngineTransfer:
    """
    Copy and move operations.

    Every precondition of a transfer plan is checked before anything on disk is
    touched.  A move is a single atomic rename whenever the OS allows it; only when
    the rename fails with EXDEV (source and destination on different filesystems)
    is the data copied and the source removed afterwards.
    """

    CHUNK_SIZE = 1024 * 1024

    def __init__(self) -> None:
        self._logger = logging.getLogger("FsEngineTransfer")
        self._mutation = FsEngineMutation()

    def copy(self, plan: FsEngineTransferPlan, cancel_token: FsEngineCancellationToken | None = None) -> None:
        """
        Copy a file or directory tree.

        Args:
            plan: Source, destination and overwrite policy
            cancel_token: Cancellation signal, checked between directories and copy chunks

        Raises:
            FsEngineNotFoundError: If the source does not exist
            FsEngineAlreadyExistsError: If the destination exists and overwrite is not set
            FsEngineInvalidPathError: If source and destination overlap
            FsEngineCancelledError: If cancelled part way through
            FsEngineUnderlyingError: If the OS rejects any step
        """
        token = cancel_token or FsEngineCancellationToken()
        self._validate_plan(plan, "copy")
        token.check()

        self._clear_destination(plan)
        self._copy_with_cleanup(plan.source, plan.destination, token)
        self._logger.info("Copied %s to %s", plan.source, plan.destination)

    def move(self, plan: FsEngineTransferPlan, cancel_token: FsEngineCancellationToken | None = None) -> None:
        """
        Move a file or directory tree.

        Args:
            plan: Source, destination and overwrite policy
            cancel_token: Cancellation signal; only the cross-device copy and source removal can be interrupted

        Raises:
            FsEngineNotFoundError: If the source does not exist
            FsEngineAlreadyExistsError: If the destination exists and overwrite is not set
            FsEngineInvalidPathError: If source and destination overlap
            FsEngineCancelledError: If cancelled before the source was touched
            FsEnginePartialFailureError: If the data was copied across devices but the
                source could not be removed afterwards, including a cancelled removal
            FsEngineUnderlyingError: If the rename fails for any reason other than EXDEV
        """
        token = cancel_token or FsEngineCancellationToken()
        self._validate_plan(plan, "move")
        token.check()

        self._clear_destination(plan)
        self._make_parents(plan.destination)

        try:
            os.rename(plan.source, plan.destination)
            self._logger.info("Moved %s to %s", plan.source, plan.destination)
            return

        except OSError as e:
            if e.errno != errno.EXDEV:
                raise FsEngineError.from_os_error(e, plan.source) from e

        self._logger.info(
            "Rename of %s crosses filesystems, copying to %s instead", plan.source, plan.destination
        )
        self._copy_with_cleanup(plan.source, plan.destination, token)

        try:
            self._mutation.remove(plan.source, recursive=True, cancel_token=token)

        except FsEngineError as e:
            self._logger.warning("Moved %s to %s but could not remove source: %s", plan.source, plan.destination, e)
            raise FsEnginePartialFailureError(
                f"Moved to {plan.destination} but failed to remove source {plan.source}: {e.message}",
                plan.source,
                plan.destination
            ) from e

        self._logger.info("Moved %s to %s across filesystems", plan.source, plan.destination)

    def _validate_plan(self, plan: FsEngineTransferPlan, operation: str) -> None:
        """
        Check every precondition of a plan before anything is modified.

        Overlap checks compare paths with their parent directories resolved, so a
        destination that reaches the source through a symlinked directory is caught.

        Raises:
            FsEngineNotFoundError: If the source does not exist
            FsEngineInvalidPathError: If source and destination overlap
            FsEngineAlreadyExistsError: If the destination exists and overwrite is not set
        """
        try:
            source_stat = os.lstat(plan.source)

        except FileNotFoundError as e:
            raise FsEngineNotFoundError(f"Source does not exist: {plan.source}", plan.source) from e

        except OSError as e:
            raise FsEngineError.from_os_error(e, plan.source) from e

        source_physical = self._physical_path(plan.source)
        destination_physical = self._physical_path(plan.destination)

        if plan.source == plan.destination or source_physical == destination_physical:
            raise FsEngineInvalidPathError(
                f"Source and destination are the same path: {plan.source}", plan.source
            )

        if stat.S_ISDIR(source_stat.st_mode) and self._is_within(destination_physical, source_physical):
            raise FsEngineInvalidPathError(
                f"Cannot {operation} a directory into itself: {plan.source} -> {plan.destination}",
                plan.destination
            )

        try:
            destination_stat = os.lstat(plan.destination)

        except FileNotFoundError:
            return

        except OSError as e:
            raise FsEngineError.from_os_error(e, plan.destination) from e

        if not plan.overwrite:
            raise FsEngineAlreadyExistsError(f"Destination already exists: {plan.destination}", plan.destination)

        if (destination_stat.st_dev, destination_stat.st_ino) == (source_stat.st_dev, source_stat.st_ino):
            raise FsEngineInvalidPathError(
                f"Source and destination are the same file: {plan.source} -> {plan.destination}", plan.destination
            )

        if self._is_within(source_physical, destination_physical):
            raise FsEngineInvalidPathError(
                f"Cannot overwrite a directory that contains the source: {plan.destination}", plan.destination
            )

    def _physical_path(self, path: Path) -> Path:
        """Resolve every symlink in the parent directories of path, leaving the final component as is."""
        return Path(os.path.realpath(path.parent)) / path.name

    def _is_within(self, path: Path, directory: Path) -> bool:
        """Check whether path lies strictly inside directory."""
        if path == directory:
            return False

        try:
            return os.path.commonpath([path, directory]) == str(directory)

        except ValueError:
            # Different drives on Windows
            return False

    def _clear_destination(self, plan: FsEngineTransferPlan) -> None:
        """Remove an existing destination that the plan allows to be overwritten."""
        if not os.path.lexists(plan.destination):
            return

        self._logger.debug("Removing existing destination %s", plan.destination)
        self._mutation.remove(plan.destination, recursive=True)

    def _make_parents(self, path: Path) -> None:
        """Create any missing parent directories of path."""
        try:
            os.makedirs(path.parent, exist_ok=True)

        except OSError as e:
            raise FsEngineError.from_os_error(e, path.parent) from e

    def _copy_with_cleanup(self, source: Path, destination: Path, token: FsEngineCancellationToken) -> None:
        """Copy source to destination, discarding a partially written destination on failure."""
        try:
            self._make_parents(destination)
            self._copy_node(source, destination, token)

        except OSError as e:
            self._discard_partial_copy(destination)
            raise FsEngineError.from_os_error(e) from e

        except FsEngineError:
            self._discard_partial_copy(destination)
            raise

    def _discard_partial_copy(self, destination: Path) -> None:
        """Best-effort removal of an incomplete copy."""
        if not os.path.lexists(destination):
            return

        try:
            self._mutation.remove(destination, recursive=True)

        except FsEngineError as e:
            self._logger.warning("Could not remove partial copy %s: %s", destination, e)

    def _copy_node(self, source: Path, destination: Path, token: FsEngineCancellationToken) -> None:
        """Copy a single file, link or whole directory tree."""
        source_stat = os.lstat(source)

        if stat.S_ISLNK(source_stat.st_mode):
            os.symlink(os.readlink(source), destination)
            return

        if stat.S_ISDIR(source_stat.st_mode):
            self._copy_directory(source, destination, token)
            return

        self._copy_file(source, destination, token)

    def _copy_directory(self, source: Path, destination: Path, token: FsEngineCancellationToken) -> None:
        """Copy a directory tree, preserving relative structure and file modes."""
        stack: List[Tuple[Path, Path]] = [(source, destination)]

        while stack:
            token.check()
            source_dir, destination_dir = stack.pop()
            os.makedirs(destination_dir, exist_ok=True)

            with os.scandir(source_dir) as iterator:
                children = list(iterator)

            for child in children:
                token.check()
                child_source = Path(child.path)
                child_destination = destination_dir / child.name

                if child.is_symlink():
                    os.symlink(os.readlink(child_source), child_destination)

                elif child.is_dir(follow_symlinks=False):
                    stack.append((child_source, child_destination))

                else:
                    self._copy_file(child_source, child_destination, token)

    def _copy_file(self, source: Path, destination: Path, token: FsEngineCancellationToken) -> None:
        """Copy file content in chunks, then the permission mode."""
        with open(source, 'rb') as source_file, open(destination, 'wb') as destination_file:
            while True:
                token.check()
                chunk = source_file.read(self.CHUNK_SIZE)
                if not chunk:
                    break

                destination_file.write(chunk)

        shutil.copymode(source, destination)
