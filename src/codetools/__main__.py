"""Main entry point for the code tools server."""

import argparse
import asyncio
import logging
import sys
from typing import List

from code_tool import CodeToolManager
from code_tool.filesystem.filesystem_code_tool import FileSystemCodeTool
from codetools.codetools_config import CodeToolsConfig
from codetools.codetools_logging import install_global_exception_handler, setup_logging
from codetools.codetools_stdio_server import CodeToolsStdioServer
from fs_engine import FsEnginePathResolver


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="codetools",
        description="Filesystem traversal and mutation tools for tool-calling clients"
    )
    parser.add_argument("-c", "--config", help="Path to a JSON configuration file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    stdio_parser = subparsers.add_parser("stdio", help="Serve tool calls as JSON lines on stdin/stdout")
    stdio_parser.add_argument("--root", help="Base directory for relative paths (overrides the configuration)")
    stdio_parser.add_argument(
        "--read-only",
        action="store_true",
        help="Deny every operation that modifies the filesystem"
    )

    return parser


def create_tool_manager(config: CodeToolsConfig, root: str | None = None) -> CodeToolManager:
    """
    Create the tool manager with the filesystem tool registered.

    Args:
        config: Server configuration
        root: Base directory overriding the configured one

    Returns:
        Tool manager ready to execute calls
    """
    base_dir = root or config.filesystem.root
    tool = FileSystemCodeTool(
        resolver=FsEnginePathResolver(base_dir),
        default_list_limit=config.filesystem.default_list_limit,
        default_tree_limit=config.filesystem.default_tree_limit
    )

    manager = CodeToolManager()
    manager.unregister_tool("filesystem")
    manager.register_tool(tool, "Filesystem")

    return manager


def main(argv: List[str] | None = None) -> int:
    """Main function to run the server."""
    args = build_parser().parse_args(argv)

    config = CodeToolsConfig.load_or_default(args.config)
    setup_logging(config.logging)
    install_global_exception_handler()

    logger = logging.getLogger("codetools")

    if args.command == "stdio":
        manager = create_tool_manager(config, args.root)
        server = CodeToolsStdioServer(manager, read_only=args.read_only)
        try:
            asyncio.run(server.run())

        except KeyboardInterrupt:
            logger.info("Interrupted")

        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
