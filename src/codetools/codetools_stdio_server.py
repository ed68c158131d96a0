"""JSON-lines tool server over stdin/stdout."""

import asyncio
import json
import logging
import sys
from typing import Any, Dict, TextIO

from code_tool import CodeToolCall, CodeToolManager, CodeToolResult


class CodeToolsStdioServer:
    """
    Serves tool calls as one JSON object per line.

    Requests:
        {"type": "list_tools"}
        {"type": "call", "id": ..., "name": ..., "arguments": {...}}
        {"type": "cancel", "id": ...}

    Calls run concurrently; each produces exactly one "result" message, in completion
    order.  A cancelled call reports error_kind "cancelled".
    """

    def __init__(
        self,
        manager: CodeToolManager,
        read_only: bool = False,
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None
    ) -> None:
        """
        Initialize the server.

        Args:
            manager: Tool manager calls are dispatched to
            read_only: Deny every operation that asks for authorization
            input_stream: Request stream (defaults to stdin)
            output_stream: Response stream (defaults to stdout)
        """
        self._manager = manager
        self._read_only = read_only
        self._input = input_stream or sys.stdin
        self._output = output_stream or sys.stdout
        self._tasks: Dict[str, asyncio.Task] = {}
        self._write_lock = asyncio.Lock()
        self._logger = logging.getLogger("CodeToolsStdioServer")

    async def run(self) -> None:
        """Serve requests until the input stream is closed, then wait for in-flight calls."""
        self._logger.info("Stdio server started (read_only=%s)", self._read_only)

        while True:
            line = await asyncio.to_thread(self._input.readline)
            if not line:
                break

            line = line.strip()
            if not line:
                continue

            await self.handle_line(line)

        if self._tasks:
            self._logger.debug("Input closed, waiting for %d in-flight calls", len(self._tasks))
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)

        self._logger.info("Stdio server stopped")

    async def handle_line(self, line: str) -> None:
        """
        Handle one request line.

        Args:
            line: JSON-encoded request
        """
        try:
            request = json.loads(line)

        except json.JSONDecodeError as e:
            await self._write_error(f"Invalid JSON: {str(e)}")
            return

        if not isinstance(request, dict):
            await self._write_error("Request must be a JSON object")
            return

        request_type = request.get("type")

        if request_type == "list_tools":
            definitions = [definition.to_dict() for definition in self._manager.get_tool_definitions()]
            await self._write({"type": "tools", "tools": definitions})
            return

        if request_type == "call":
            await self._start_call(request)
            return

        if request_type == "cancel":
            await self._cancel_call(request)
            return

        await self._write_error(f"Unknown request type: {request_type}")

    async def _start_call(self, request: Dict[str, Any]) -> None:
        """Start a tool call as a concurrent task."""
        try:
            tool_call = CodeToolCall.from_dict(request)

        except ValueError as e:
            await self._write_error(f"Invalid call request: {str(e)}")
            return

        if tool_call.id in self._tasks:
            await self._write_error(f"Call {tool_call.id} is already in progress")
            return

        task = asyncio.create_task(self._run_call(tool_call))
        self._tasks[tool_call.id] = task
        task.add_done_callback(lambda _task: self._tasks.pop(tool_call.id, None))

    async def _cancel_call(self, request: Dict[str, Any]) -> None:
        """Cancel an in-flight tool call."""
        call_id = request.get("id")
        task = self._tasks.get(str(call_id)) if call_id is not None else None
        if task is None:
            await self._write_error(f"No call in progress with id {call_id}")
            return

        self._logger.debug("Cancelling call %s", call_id)
        task.cancel()

    async def _run_call(self, tool_call: CodeToolCall) -> None:
        """Execute a tool call and write its result."""
        try:
            result = await self._manager.execute_tool(tool_call, self._authorize)

        except asyncio.CancelledError:
            result = CodeToolResult(
                id=tool_call.id,
                name=tool_call.name,
                content="",
                error="Tool call was cancelled",
                error_kind="cancelled"
            )

        message = {"type": "result"}
        message.update(result.to_dict())
        await self._write(message)

    async def _authorize(
        self,
        tool_name: str,
        _arguments: Dict[str, Any],
        context: str,
        _requester_ref: str | None,
        destructive: bool
    ) -> bool:
        """Approve or deny an operation that modifies the filesystem."""
        if self._read_only:
            self._logger.warning("Denied %s request in read-only mode: %s", tool_name, context)
            return False

        self._logger.debug("Approved %s request (destructive=%s): %s", tool_name, destructive, context)
        return True

    async def _write_error(self, message: str) -> None:
        """Write a protocol error message."""
        self._logger.warning("Protocol error: %s", message)
        await self._write({"type": "error", "error": message})

    async def _write(self, message: Dict[str, Any]) -> None:
        """Write one message line, serialized against concurrent writers."""
        async with self._write_lock:
            self._output.write(json.dumps(message) + "\n")
            self._output.flush()
