"""Logging setup for the code tools server."""

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from types import TracebackType
from typing import List

from codetools.codetools_config import CodeToolsLoggingSettings


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(settings: CodeToolsLoggingSettings) -> None:
    """
    Configure application logging.

    Log records go to a rotating file and, if enabled, to stderr.  Stdout is never
    used because it carries the tool protocol.

    Args:
        settings: Logging settings
    """
    handlers: List[logging.Handler] = []

    if settings.output_file:
        log_dir = os.path.dirname(os.path.abspath(settings.output_file))
        os.makedirs(log_dir, exist_ok=True)

        # Keep up to 6 log files, max_size_mb each
        handlers.append(RotatingFileHandler(
            settings.output_file,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        ))

    if settings.console or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def install_global_exception_handler() -> None:
    """Install a global exception handler for uncaught exceptions."""
    logger = logging.getLogger('GlobalExceptionHandler')

    def handle_exception(exc_type: type[BaseException], exc_value: BaseException, exc_traceback: TracebackType | None) -> None:
        """Handle uncaught exceptions and log them."""
        if issubclass(exc_type, KeyboardInterrupt):
            # Don't log keyboard interrupt
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback),
            stack_info=True
        )

    sys.excepthook = handle_exception
