"""Filesystem tool server: configuration, logging, stdio transport and command line."""

from codetools.codetools_config import CodeToolsConfig, CodeToolsFilesystemSettings, CodeToolsLoggingSettings
from codetools.codetools_logging import install_global_exception_handler, setup_logging
from codetools.codetools_stdio_server import CodeToolsStdioServer


__all__ = [
    "CodeToolsConfig",
    "CodeToolsFilesystemSettings",
    "CodeToolsLoggingSettings",
    "CodeToolsStdioServer",
    "install_global_exception_handler",
    "setup_logging",
]
