"""Conversion of engine results into tool records and text summaries."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from fs_engine import FsEngineEntry


class FileSystemFormatter:
    """Formats engine results for the filesystem tool."""

    def format_time(self, dt: datetime) -> str:
        """
        Format a timestamp as RFC 3339 in UTC.

        Args:
            dt: Timezone-aware datetime

        Returns:
            Timestamp such as '2024-01-31T12:00:00Z'
        """
        return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def sort_entries(self, entries: List[FsEngineEntry]) -> List[FsEngineEntry]:
        """
        Order entries directories first, then by path.

        Args:
            entries: Entries in walk order

        Returns:
            New sorted list
        """
        return sorted(entries, key=lambda entry: (not entry.is_dir, str(entry.path)))

    def entry_to_dict(self, entry: FsEngineEntry) -> Dict[str, Any]:
        """Convert an entry into its record form."""
        return {
            'path': str(entry.path),
            'name': entry.name,
            'is_dir': entry.is_dir,
            'size_bytes': entry.size,
            'mode': entry.mode_string(),
            'mod_time': self.format_time(entry.mod_time)
        }

    def format_entry_line(self, entry: FsEngineEntry) -> str:
        """
        Format one entry as a fixed-width summary line.

        Args:
            entry: Entry to format

        Returns:
            Line of the form 'dir  <size>B <time> <path>'
        """
        label = "dir" if entry.is_dir else "file"
        return f"{label:<4} {entry.size:>12}B {self.format_time(entry.mod_time)} {entry.path}"

    def format_listing(self, entries: List[FsEngineEntry]) -> str:
        """
        Format a whole listing.

        Args:
            entries: Entries, already sorted

        Returns:
            One line per entry, or '(empty)'
        """
        if not entries:
            return "(empty)"

        return "\n".join(self.format_entry_line(entry) for entry in entries)

    def format_glob(self, files: List[Path]) -> str:
        """
        Format glob matches.

        Args:
            files: Matching paths, newest first

        Returns:
            Count header followed by one path per line, or by '(none)'
        """
        lines = [f"Found {len(files)} files:"]
        if not files:
            lines.append("(none)")

        lines.extend(str(path) for path in files)
        return "\n".join(lines)
