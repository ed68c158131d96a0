"""Exceptions raised by filesystem engine operations."""

from pathlib import Path

from fs_engine.fs_engine_types import FsEngineErrorKind


class FsEngineError(Exception):
    """Base exception for filesystem engine operations."""

    kind = FsEngineErrorKind.UNDERLYING

    def __init__(self, message: str, path: Path | str | None = None):
        """
        Initialize the exception.

        Args:
            message: Descriptive error message
            path: Path the failure relates to, if any
        """
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None

    @staticmethod
    def from_os_error(error: OSError, path: Path | str | None = None) -> "FsEngineError":
        """
        Classify an OS error into an engine error.

        Args:
            error: The OS error to classify
            path: Path the operation was working on

        Returns:
            The matching engine exception, carrying the OS message verbatim
        """
        if path is None and error.filename is not None:
            path = error.filename

        message = error.strerror or str(error)
        if path is not None:
            message = f"{message}: {path}"

        if isinstance(error, FileNotFoundError):
            return FsEngineNotFoundError(message, path)

        if isinstance(error, NotADirectoryError):
            return FsEngineNotADirectoryError(message, path)

        if isinstance(error, IsADirectoryError):
            return FsEngineIsADirectoryError(message, path)

        if isinstance(error, FileExistsError):
            return FsEngineAlreadyExistsError(message, path)

        return FsEngineUnderlyingError(message, path, error.errno)


class FsEngineInvalidPathError(FsEngineError):
    """Raised when a path cannot be normalized or is not acceptable for the operation."""

    kind = FsEngineErrorKind.INVALID_PATH


class FsEngineNotFoundError(FsEngineError):
    """Raised when a required path does not exist."""

    kind = FsEngineErrorKind.NOT_FOUND


class FsEngineNotADirectoryError(FsEngineError):
    """Raised when a directory was expected but something else was found."""

    kind = FsEngineErrorKind.NOT_A_DIRECTORY


class FsEngineIsADirectoryError(FsEngineError):
    """Raised when a file was expected but a directory was found."""

    kind = FsEngineErrorKind.IS_A_DIRECTORY


class FsEngineAlreadyExistsError(FsEngineError):
    """Raised when a destination exists and overwrite was not requested."""

    kind = FsEngineErrorKind.ALREADY_EXISTS


class FsEngineCancelledError(FsEngineError):
    """Raised when the caller cancelled an in-flight operation."""

    kind = FsEngineErrorKind.CANCELLED


class FsEnginePartialFailureError(FsEngineError):
    """Raised when a cross-device move copied the data but could not remove the source."""

    kind = FsEngineErrorKind.PARTIAL_FAILURE

    def __init__(self, message: str, source: Path | str, destination: Path | str):
        """
        Initialize the exception.

        Args:
            message: Descriptive error message
            source: Source path that could not be fully removed
            destination: Destination path that now holds a complete copy
        """
        super().__init__(message, source)
        self.source = str(source)
        self.destination = str(destination)


class FsEngineUnderlyingError(FsEngineError):
    """Pass-through of an OS error that has no more specific kind."""

    kind = FsEngineErrorKind.UNDERLYING

    def __init__(self, message: str, path: Path | str | None = None, errno: int | None = None):
        """
        Initialize the exception.

        Args:
            message: OS-provided message
            path: Path the failure relates to, if any
            errno: OS error number, if known
        """
        super().__init__(message, path)
        self.errno = errno
