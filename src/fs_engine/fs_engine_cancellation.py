"""Cancellation signal passed into long-running engine operations."""

import threading

from fs_engine.fs_engine_exceptions import FsEngineCancelledError


class FsEngineCancellationToken:
    """
    Thread-safe cancellation flag.

    The token is set from the event loop thread while the engine runs in a worker
    thread; the engine polls it at each directory boundary and copy chunk.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation of the operation holding this token."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """
        Check whether cancellation has been requested.

        Returns:
            True if cancel() has been called
        """
        return self._event.is_set()

    def check(self) -> None:
        """
        Raise if cancellation has been requested.

        Raises:
            FsEngineCancelledError: If cancel() has been called
        """
        if self._event.is_set():
            raise FsEngineCancelledError("Operation was cancelled")
