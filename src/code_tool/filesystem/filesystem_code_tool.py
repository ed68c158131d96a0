import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, TypeVar

from code_tool import (
    CodeToolDefinition, CodeToolParameter, CodeTool, CodeToolExecutionError,
    CodeToolAuthorizationDenied, CodeToolAuthorizationCallback, CodeToolOperationDefinition,
    CodeToolResult, CodeToolCall
)
from code_tool.filesystem.filesystem_formatter import FileSystemFormatter
from fs_engine import (
    FsEngineCancellationToken, FsEngineError, FsEngineMutation, FsEnginePathResolver,
    FsEngineTransfer, FsEngineTransferPlan, FsEngineTraversal
)


T = TypeVar("T")


class FileSystemCodeTool(CodeTool):
    """
    Filesystem traversal and mutation tool.

    Read operations (list_dir, tree, glob) run without authorization.  Operations that
    write to the filesystem ask the authorization callback first.  All engine work runs
    in a worker thread; if the awaiting task is cancelled the worker is told to stop at
    its next check point.
    """

    def __init__(
        self,
        resolver: FsEnginePathResolver | None = None,
        default_list_limit: int = 0,
        default_tree_limit: int = 0
    ) -> None:
        """
        Initialize the filesystem tool.

        Args:
            resolver: Resolver for caller-supplied paths (defaults to one based on the working directory)
            default_list_limit: Entry limit for list_dir when the caller gives none (0 for unbounded)
            default_tree_limit: Node limit for tree when the caller gives none (0 for unbounded)
        """
        self._resolver = resolver or FsEnginePathResolver()
        self._default_list_limit = default_list_limit
        self._default_tree_limit = default_tree_limit
        self._traversal = FsEngineTraversal()
        self._transfer = FsEngineTransfer()
        self._mutation = FsEngineMutation()
        self._formatter = FileSystemFormatter()
        self._logger = logging.getLogger("FileSystemCodeTool")

    def get_definition(self) -> CodeToolDefinition:
        """
        Get the tool definition.

        Returns:
            Tool definition with parameters and description
        """
        return self._build_definition_from_operations(
            name="filesystem",
            description_prefix=(
                "The filesystem tool lists, searches, copies, moves and removes files and directories. "
                "Relative paths are resolved against the server's base directory. "
                "Operations that modify the filesystem require authorization before proceeding."
            ),
            additional_parameters=[
                CodeToolParameter(
                    name="path",
                    type="string",
                    description="Path to file or directory (relative to the base directory or absolute)",
                    required=False
                ),
                CodeToolParameter(
                    name="destination",
                    type="string",
                    description="Destination path (for copy and move operations)",
                    required=False
                ),
                CodeToolParameter(
                    name="pattern",
                    type="string",
                    description="Glob pattern relative to path, '**' matches any number of directories "
                        "(for glob operation)",
                    required=False
                ),
                CodeToolParameter(
                    name="recursive",
                    type="boolean",
                    description="Walk the whole subtree (list_dir) or remove directory contents (remove)",
                    required=False
                ),
                CodeToolParameter(
                    name="show_hidden",
                    type="boolean",
                    description="Include entries whose names start with '.' (for list_dir and tree)",
                    required=False
                ),
                CodeToolParameter(
                    name="limit",
                    type="integer",
                    description="Maximum number of entries or nodes to return, 0 for no limit "
                        "(for list_dir and tree)",
                    required=False
                ),
                CodeToolParameter(
                    name="depth",
                    type="integer",
                    description="Maximum depth below the root, 0 for unlimited (for tree operation)",
                    required=False
                ),
                CodeToolParameter(
                    name="overwrite",
                    type="boolean",
                    description="Replace an existing destination (for copy and move operations)",
                    required=False
                )
            ]
        )

    def get_operation_definitions(self) -> Dict[str, CodeToolOperationDefinition]:
        """
        Get operation definitions for this tool.

        Returns:
            Dictionary mapping operation names to their definitions
        """
        return {
            "list_dir": CodeToolOperationDefinition(
                name="list_dir",
                handler=self._list_dir,
                allowed_parameters={"path", "recursive", "show_hidden", "limit"},
                required_parameters={"path"},
                description="List directory entries, optionally recursively. Directories are listed first"
            ),
            "tree": CodeToolOperationDefinition(
                name="tree",
                handler=self._tree,
                allowed_parameters={"path", "depth", "show_hidden", "limit"},
                required_parameters={"path"},
                description="Render a directory as an ASCII tree"
            ),
            "glob": CodeToolOperationDefinition(
                name="glob",
                handler=self._glob,
                allowed_parameters={"pattern", "path"},
                required_parameters={"pattern"},
                description="Find files matching a glob pattern, newest first"
            ),
            "copy": CodeToolOperationDefinition(
                name="copy",
                handler=self._copy,
                allowed_parameters={"path", "destination", "overwrite"},
                required_parameters={"path", "destination"},
                description="Copy a file or directory tree to destination"
            ),
            "move": CodeToolOperationDefinition(
                name="move",
                handler=self._move,
                allowed_parameters={"path", "destination", "overwrite"},
                required_parameters={"path", "destination"},
                description="Move/rename a file or directory, across filesystems if needed"
            ),
            "delete": CodeToolOperationDefinition(
                name="delete",
                handler=self._delete,
                allowed_parameters={"path"},
                required_parameters={"path"},
                description="Delete a single file"
            ),
            "remove": CodeToolOperationDefinition(
                name="remove",
                handler=self._remove,
                allowed_parameters={"path", "recursive"},
                required_parameters={"path"},
                description="Remove a file or empty directory, or a whole directory tree if recursive is set"
            )
        }

    def _validate_and_resolve_path(self, key: str, path_str: str) -> Path:
        """
        Validate path and resolve to an absolute path.

        Args:
            key: Argument name the path came from
            path_str: String path to validate and resolve

        Returns:
            Resolved absolute Path

        Raises:
            CodeToolExecutionError: If path is invalid
        """
        try:
            return self._resolver.resolve(path_str)

        except FsEngineError as e:
            raise CodeToolExecutionError(f"{key}: {e.message}", e.kind.value) from e

    async def _run(self, operation: Callable[[FsEngineCancellationToken], T]) -> T:
        """
        Run an engine operation in a worker thread.

        Args:
            operation: Callable taking the cancellation token for this run

        Returns:
            Whatever the operation returns

        Raises:
            CodeToolExecutionError: If the engine reports a failure
            asyncio.CancelledError: If the awaiting task was cancelled
        """
        token = FsEngineCancellationToken()

        try:
            return await asyncio.to_thread(operation, token)

        except asyncio.CancelledError:
            self._logger.debug("Filesystem operation cancelled, signalling worker to stop")
            token.cancel()
            raise

        except FsEngineError as e:
            raise CodeToolExecutionError(e.message, e.kind.value) from e

        except ValueError as e:
            raise CodeToolExecutionError(str(e), "invalid_arguments") from e

    async def _list_dir(
        self,
        tool_call: CodeToolCall,
        _requester_ref: Any,
        _request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """List directory entries."""
        arguments = tool_call.arguments
        path = self._validate_and_resolve_path("path", self._get_required_str_value("path", arguments))
        recursive = self._get_optional_bool_value("recursive", arguments)
        show_hidden = self._get_optional_bool_value("show_hidden", arguments)
        limit = self._get_optional_int_value("limit", arguments, self._default_list_limit, minimum=0)

        entries = await self._run(
            lambda token: self._traversal.list_directory(path, recursive, show_hidden, limit, token)
        )
        entries = self._formatter.sort_entries(entries)

        return CodeToolResult(
            id=tool_call.id,
            name="filesystem",
            content=self._formatter.format_listing(entries),
            data={'entries': [self._formatter.entry_to_dict(entry) for entry in entries]}
        )

    async def _tree(
        self,
        tool_call: CodeToolCall,
        _requester_ref: Any,
        _request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """Render a directory tree."""
        arguments = tool_call.arguments
        path = self._validate_and_resolve_path("path", self._get_required_str_value("path", arguments))
        depth = self._get_optional_int_value("depth", arguments, 0, minimum=0)
        show_hidden = self._get_optional_bool_value("show_hidden", arguments)
        limit = self._get_optional_int_value("limit", arguments, self._default_tree_limit, minimum=0)

        tree = await self._run(
            lambda token: self._traversal.render_tree(path, depth, show_hidden, limit, token)
        )

        return CodeToolResult(
            id=tool_call.id,
            name="filesystem",
            content=tree,
            data={'tree': tree}
        )

    async def _glob(
        self,
        tool_call: CodeToolCall,
        _requester_ref: Any,
        _request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """Find files matching a pattern."""
        arguments = tool_call.arguments
        pattern = self._get_required_str_value("pattern", arguments)
        path_arg = self._get_optional_str_value("path", arguments)
        root = self._validate_and_resolve_path("path", path_arg) if path_arg else self._resolver.base_dir()

        files = await self._run(lambda token: self._traversal.glob(root, pattern, token))

        return CodeToolResult(
            id=tool_call.id,
            name="filesystem",
            content=self._formatter.format_glob(files),
            data={'files': [str(file) for file in files]}
        )

    def _build_plan(self, arguments: Dict[str, Any]) -> FsEngineTransferPlan:
        """Resolve the source, destination and overwrite arguments of a transfer."""
        source = self._validate_and_resolve_path("path", self._get_required_str_value("path", arguments))
        destination = self._validate_and_resolve_path(
            "destination", self._get_required_str_value("destination", arguments)
        )
        overwrite = self._get_optional_bool_value("overwrite", arguments)
        return FsEngineTransferPlan(source=source, destination=destination, overwrite=overwrite)

    async def _copy(
        self,
        tool_call: CodeToolCall,
        requester_ref: Any,
        request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """Copy a file or directory tree."""
        arguments = tool_call.arguments
        plan = self._build_plan(arguments)

        if plan.overwrite and os.path.lexists(plan.destination):
            context = f"Copy '{plan.source}' to '{plan.destination}'. " \
                "This will overwrite the existing destination and its contents will be lost."
            destructive = True

        else:
            context = f"Copy '{plan.source}' to '{plan.destination}'. This will create a new item at the destination."
            destructive = False

        authorized = await request_authorization("filesystem", arguments, context, requester_ref, destructive)
        if not authorized:
            raise CodeToolAuthorizationDenied(
                f"User denied permission to copy: {arguments['path']} -> {arguments['destination']}"
            )

        await self._run(lambda token: self._transfer.copy(plan, token))

        return self._success_result(tool_call, f"Copied {plan.source} to {plan.destination}")

    async def _move(
        self,
        tool_call: CodeToolCall,
        requester_ref: Any,
        request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """Move/rename a file or directory tree."""
        arguments = tool_call.arguments
        plan = self._build_plan(arguments)

        if plan.overwrite and os.path.lexists(plan.destination):
            context = f"Move '{plan.source}' to '{plan.destination}'. " \
                "This will overwrite the existing destination and its contents will be lost."

        else:
            context = f"Move '{plan.source}' to '{plan.destination}'."

        authorized = await request_authorization("filesystem", arguments, context, requester_ref, True)
        if not authorized:
            raise CodeToolAuthorizationDenied(
                f"User denied permission to move: {arguments['path']} -> {arguments['destination']}"
            )

        await self._run(lambda token: self._transfer.move(plan, token))

        return self._success_result(tool_call, f"Moved {plan.source} to {plan.destination}")

    async def _delete(
        self,
        tool_call: CodeToolCall,
        requester_ref: Any,
        request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """Delete a single file."""
        arguments = tool_call.arguments
        path = self._validate_and_resolve_path("path", self._get_required_str_value("path", arguments))

        context = f"Delete the file '{path}'. This file will be permanently removed and cannot be recovered."
        authorized = await request_authorization("filesystem", arguments, context, requester_ref, True)
        if not authorized:
            raise CodeToolAuthorizationDenied(f"User denied permission to delete file: {arguments['path']}")

        await self._run(lambda _token: self._mutation.delete(path))

        return self._success_result(tool_call, f"Deleted file {path}")

    async def _remove(
        self,
        tool_call: CodeToolCall,
        requester_ref: Any,
        request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """Remove a file, an empty directory or a directory tree."""
        arguments = tool_call.arguments
        path = self._validate_and_resolve_path("path", self._get_required_str_value("path", arguments))
        recursive = self._get_optional_bool_value("recursive", arguments)

        if recursive:
            context = f"Recursively remove '{path}'. Everything below it will be permanently removed."

        else:
            context = f"Remove '{path}'. It will be permanently removed and cannot be recovered."

        authorized = await request_authorization("filesystem", arguments, context, requester_ref, True)
        if not authorized:
            raise CodeToolAuthorizationDenied(f"User denied permission to remove: {arguments['path']}")

        await self._run(lambda token: self._mutation.remove(path, recursive, token))

        message = f"Recursively removed {path}" if recursive else f"Removed {path}"
        return self._success_result(tool_call, message)

    def _success_result(self, tool_call: CodeToolCall, message: str) -> CodeToolResult:
        """Build the result of a successful mutating operation."""
        return CodeToolResult(
            id=tool_call.id,
            name="filesystem",
            content=message,
            data={'success': True, 'message': message}
        )
