"""Data types shared by the filesystem engine."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
import stat


class FsEngineErrorKind(Enum):
    """Kinds of failure reported by engine operations."""
    INVALID_PATH = "invalid_path"
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    IS_A_DIRECTORY = "is_a_directory"
    ALREADY_EXISTS = "already_exists"
    CANCELLED = "cancelled"
    PARTIAL_FAILURE = "partial_failure"
    UNDERLYING = "underlying"


@dataclass(frozen=True)
class FsEngineEntry:
    """
    One filesystem node discovered during a traversal.

    Attributes:
        path: Absolute path of the node
        name: Base name of the node
        is_dir: True if the node is a directory (symlinks are never directories here)
        size: Size in bytes as reported by the OS
        mode: Raw st_mode bits
        mod_time: Modification time (UTC)
    """
    path: Path
    name: str
    is_dir: bool
    size: int
    mode: int
    mod_time: datetime

    def mode_string(self) -> str:
        """
        Get the mode bits in `ls -l` form.

        Returns:
            Mode string such as 'drwxr-xr-x'
        """
        return stat.filemode(self.mode)


@dataclass(frozen=True)
class FsEngineTransferPlan:
    """A validated (source, destination, overwrite) triple for copy and move."""
    source: Path
    destination: Path
    overwrite: bool = False
