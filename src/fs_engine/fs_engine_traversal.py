"""Bounded, cancellable directory traversal: listing, tree rendering and glob search."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import glob
import logging
import os
from pathlib import Path
import stat
from typing import Iterator, List, Set, Tuple

from fs_engine.fs_engine_cancellation import FsEngineCancellationToken
from fs_engine.fs_engine_exceptions import (
    FsEngineError, FsEngineInvalidPathError, FsEngineNotADirectoryError
)
from fs_engine.fs_engine_pattern_matcher import FsEnginePatternMatcher
from fs_engine.fs_engine_types import FsEngineEntry


HIDDEN_MARKER = "."


@dataclass
class _TreeFrame:
    """One directory level of an in-progress tree render."""
    children: List[os.DirEntry]
    prefix: str
    depth: int
    index: int = field(default=0)


class FsEngineTraversal:
    """
    Directory walks shared by the list, tree and glob operations.

    All walks use explicit stacks, so arbitrarily deep trees do not hit the
    interpreter's recursion limit.  The cancellation token is checked before every
    directory read and every entry, so a cancelled walk stops after at most one
    directory's worth of work.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger("FsEngineTraversal")
        self._matcher = FsEnginePatternMatcher()

    def list_directory(
        self,
        root: Path,
        recursive: bool = False,
        show_hidden: bool = False,
        limit: int | None = None,
        cancel_token: FsEngineCancellationToken | None = None
    ) -> List[FsEngineEntry]:
        """
        List the entries below a directory.

        Hidden entries are skipped unless show_hidden is set; a skipped hidden directory is
        never descended into.  The root itself is not part of the result.

        Args:
            root: Absolute directory to list
            recursive: Walk the whole subtree depth-first instead of just the immediate children
            show_hidden: Include entries whose names start with '.'
            limit: Maximum number of entries to return (None or 0 for no limit)
            cancel_token: Cancellation signal

        Returns:
            Entries in walk order, at most `limit` of them

        Raises:
            FsEngineNotFoundError: If root does not exist
            FsEngineNotADirectoryError: If root is not a directory
            FsEngineCancelledError: If cancelled before the walk completed
            FsEngineUnderlyingError: If root cannot be read
        """
        token = cancel_token or FsEngineCancellationToken()
        max_entries = self._normalize_limit(limit)
        self._require_directory(root)

        self._logger.debug(
            "Listing %s (recursive=%s, show_hidden=%s, limit=%d)", root, recursive, show_hidden, max_entries
        )

        entries: List[FsEngineEntry] = []
        stack: List[Iterator[os.DirEntry]] = [iter(self._scan_root(root, token))]

        while stack:
            token.check()
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue

            if not show_hidden and child.name.startswith(HIDDEN_MARKER):
                continue

            entry = self._make_entry(child)
            if entry is None:
                continue

            entries.append(entry)
            if max_entries and len(entries) >= max_entries:
                self._logger.debug("Listing of %s stopped at limit %d", root, max_entries)
                break

            if recursive and entry.is_dir:
                stack.append(iter(self._scan_subdirectory(entry.path, token)))

        return entries

    def render_tree(
        self,
        root: Path,
        max_depth: int = 0,
        show_hidden: bool = False,
        limit: int | None = None,
        cancel_token: FsEngineCancellationToken | None = None
    ) -> str:
        """
        Render a directory as an ASCII tree.

        The first line is the root path.  Children appear in the order the OS enumerates
        them; the last child of each directory uses the '\\-- ' connector, the others '|-- '.
        Directory names carry a trailing '/'.

        Args:
            root: Absolute directory to render
            max_depth: Number of levels below root to show (0 for unlimited)
            show_hidden: Include entries whose names start with '.'
            limit: Maximum number of nodes to render (None or 0 for no limit)
            cancel_token: Cancellation signal

        Returns:
            Tree text without a trailing newline

        Raises:
            FsEngineNotFoundError: If root does not exist
            FsEngineNotADirectoryError: If root is not a directory
            FsEngineCancelledError: If cancelled before the render completed
            FsEngineUnderlyingError: If root cannot be read
        """
        token = cancel_token or FsEngineCancellationToken()
        max_nodes = self._normalize_limit(limit)
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")

        self._require_directory(root)

        lines = [str(root)]
        count = 0
        root_children = self._filter_hidden(self._scan_root(root, token), show_hidden)
        stack = [_TreeFrame(children=root_children, prefix="", depth=1)]

        while stack:
            token.check()
            frame = stack[-1]
            if frame.index >= len(frame.children):
                stack.pop()
                continue

            if max_nodes and count >= max_nodes:
                self._logger.debug("Tree of %s stopped at limit %d", root, max_nodes)
                break

            child = frame.children[frame.index]
            frame.index += 1
            is_last = frame.index == len(frame.children)

            connector = "\\-- " if is_last else "|-- "
            child_prefix = frame.prefix + ("    " if is_last else "|   ")
            is_dir = self._is_dir(child)

            lines.append(f"{frame.prefix}{connector}{child.name}{'/' if is_dir else ''}")
            count += 1

            if is_dir and (max_depth == 0 or frame.depth < max_depth):
                grandchildren = self._scan_subdirectory(Path(child.path), token)
                stack.append(_TreeFrame(
                    children=self._filter_hidden(grandchildren, show_hidden),
                    prefix=child_prefix,
                    depth=frame.depth + 1
                ))

        return "\n".join(lines).rstrip("\n")

    def glob(
        self,
        root: Path,
        pattern: str,
        cancel_token: FsEngineCancellationToken | None = None
    ) -> List[Path]:
        """
        Find files below root matching a glob pattern.

        Patterns without a '**' component use the OS's single-level expansion.  Patterns
        with '**' walk the whole tree and match each root-relative path component-wise.

        Args:
            root: Absolute directory to search
            pattern: Glob pattern relative to root
            cancel_token: Cancellation signal

        Returns:
            Matching non-directory paths, newest modification time first

        Raises:
            FsEngineInvalidPathError: If the pattern is empty
            FsEngineNotFoundError: If root does not exist
            FsEngineNotADirectoryError: If root is not a directory
            FsEngineCancelledError: If cancelled before the search completed
        """
        token = cancel_token or FsEngineCancellationToken()
        if not pattern:
            raise FsEngineInvalidPathError("Pattern must not be empty")

        self._require_directory(root)

        if FsEnginePatternMatcher.has_recursive_wildcard(pattern):
            candidates = self._walk_matching(root, pattern, token)

        else:
            token.check()
            full_pattern = os.path.join(glob.escape(str(root)), pattern)
            candidates = [Path(match) for match in glob.glob(full_pattern, include_hidden=True)]

        seen: Set[Path] = set()
        files: List[Tuple[float, Path]] = []
        for candidate in candidates:
            token.check()
            if candidate in seen:
                continue

            seen.add(candidate)

            try:
                candidate_stat = os.stat(candidate)

            except OSError:
                continue

            if stat.S_ISDIR(candidate_stat.st_mode):
                continue

            files.append((candidate_stat.st_mtime, candidate))

        files.sort(key=lambda item: item[0], reverse=True)
        return [path for _, path in files]

    def _walk_matching(self, root: Path, pattern: str, token: FsEngineCancellationToken) -> List[Path]:
        """Walk the whole tree below root and collect files whose relative path matches."""
        pattern_components = FsEnginePatternMatcher.split(pattern)
        matches: List[Path] = []
        stack: List[Iterator[os.DirEntry]] = [iter(self._scan_root(root, token))]

        while stack:
            token.check()
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue

            child_path = Path(child.path)
            if self._is_dir(child):
                stack.append(iter(self._scan_subdirectory(child_path, token)))
                continue

            relative = FsEnginePatternMatcher.split(os.path.relpath(child_path, root))
            if self._matcher.match_components(relative, pattern_components):
                matches.append(child_path)

        return matches

    def _normalize_limit(self, limit: int | None) -> int:
        """Convert an optional limit into an int where 0 means unbounded."""
        if limit is None:
            return 0

        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        return limit

    def _require_directory(self, root: Path) -> None:
        """
        Check that root exists and is a directory.

        Raises:
            FsEngineNotFoundError: If root does not exist
            FsEngineNotADirectoryError: If root is not a directory
        """
        try:
            root_stat = os.stat(root)

        except OSError as e:
            raise FsEngineError.from_os_error(e, root) from e

        if not stat.S_ISDIR(root_stat.st_mode):
            raise FsEngineNotADirectoryError(f"Path is not a directory: {root}", root)

    def _read_directory(self, path: Path, token: FsEngineCancellationToken) -> List[os.DirEntry]:
        """Read all entries of one directory, checking for cancellation as it goes."""
        token.check()
        children: List[os.DirEntry] = []
        with os.scandir(path) as iterator:
            for child in iterator:
                token.check()
                children.append(child)

        return children

    def _scan_root(self, root: Path, token: FsEngineCancellationToken) -> List[os.DirEntry]:
        """Read the root directory; failures here are fatal."""
        try:
            return self._read_directory(root, token)

        except OSError as e:
            raise FsEngineError.from_os_error(e, root) from e

    def _scan_subdirectory(self, path: Path, token: FsEngineCancellationToken) -> List[os.DirEntry]:
        """Read a directory below the root; unreadable directories are skipped."""
        try:
            return self._read_directory(path, token)

        except OSError as e:
            self._logger.warning("Skipping unreadable directory %s: %s", path, str(e))
            return []

    def _filter_hidden(self, children: List[os.DirEntry], show_hidden: bool) -> List[os.DirEntry]:
        """Drop hidden entries unless they were asked for."""
        if show_hidden:
            return children

        return [child for child in children if not child.name.startswith(HIDDEN_MARKER)]

    def _is_dir(self, child: os.DirEntry) -> bool:
        """Check whether a directory entry is a real directory (symlinks are not followed)."""
        try:
            return child.is_dir(follow_symlinks=False)

        except OSError:
            return False

    def _make_entry(self, child: os.DirEntry) -> FsEngineEntry | None:
        """Build an entry from a directory entry, or None if it cannot be stat'ed."""
        try:
            child_stat = child.stat(follow_symlinks=False)

        except OSError as e:
            self._logger.warning("Skipping unreadable entry %s: %s", child.path, str(e))
            return None

        return FsEngineEntry(
            path=Path(child.path),
            name=child.name,
            is_dir=stat.S_ISDIR(child_stat.st_mode),
            size=child_stat.st_size,
            mode=child_stat.st_mode,
            mod_time=datetime.fromtimestamp(child_stat.st_mtime, tz=timezone.utc)
        )
