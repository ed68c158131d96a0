"""Singleton manager for tools."""

import asyncio
import logging
from typing import Dict, List

from code_tool.code_tool import CodeTool, CodeToolAuthorizationCallback
from code_tool.code_tool_call import CodeToolCall
from code_tool.code_tool_definition import CodeToolDefinition
from code_tool.code_tool_exceptions import CodeToolAuthorizationDenied, CodeToolExecutionError
from code_tool.code_tool_registered import CodeToolRegistered
from code_tool.code_tool_result import CodeToolResult


class CodeToolManager:
    """Singleton manager for tools."""

    _instance: 'CodeToolManager | None' = None

    def __new__(cls) -> 'CodeToolManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)

        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_initialized'):
            self._registered_tools: Dict[str, CodeToolRegistered] = {}
            self._enabled_tools: Dict[str, bool] = {}
            self._logger = logging.getLogger("CodeToolManager")
            self._initialized = True

    def register_tool(self, tool: CodeTool, display_name: str, enabled_by_default: bool = True) -> None:
        """
        Register a tool.

        Args:
            tool: The tool to register
            display_name: Human-readable name for the tool
            enabled_by_default: Whether the tool should be enabled by default

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        definition = tool.get_definition()

        if definition.name in self._registered_tools:
            raise ValueError(f"Tool '{definition.name}' is already registered")

        self._registered_tools[definition.name] = CodeToolRegistered(
            tool=tool,
            display_name=display_name,
            enabled_by_default=enabled_by_default
        )

        if definition.name not in self._enabled_tools:
            self._enabled_tools[definition.name] = enabled_by_default

        self._logger.info("Registered tool: %s (display: %s)", definition.name, display_name)

    def unregister_tool(self, name: str) -> None:
        """
        Unregister a tool.

        Args:
            name: Name of the tool to unregister
        """
        if name in self._registered_tools:
            del self._registered_tools[name]
            if name in self._enabled_tools:
                del self._enabled_tools[name]

            self._logger.info("Unregistered tool: %s", name)

    def set_tool_enabled(self, tool_name: str, enabled: bool) -> None:
        """
        Enable or disable a tool.

        Args:
            tool_name: Name of the tool to enable/disable
            enabled: Whether the tool should be enabled
        """
        self._enabled_tools[tool_name] = enabled
        self._logger.debug("Tool '%s' %s", tool_name, "enabled" if enabled else "disabled")

    def is_tool_enabled(self, tool_name: str) -> bool:
        """
        Check if a tool is enabled.

        Args:
            tool_name: Name of the tool to check

        Returns:
            True if the tool is enabled, False otherwise
        """
        return self._enabled_tools.get(tool_name, True)

    def get_tool_definitions(self) -> List[CodeToolDefinition]:
        """
        Get definitions for all registered and enabled tools.

        Returns:
            List of tool definitions for enabled tools only
        """
        return [
            registered_tool.tool.get_definition()
            for tool_name, registered_tool in self._registered_tools.items()
            if self.is_tool_enabled(tool_name)
        ]

    def get_tool(self, name: str) -> CodeTool | None:
        """
        Get a registered tool by its name.

        Args:
            name: Name of the tool to retrieve

        Returns:
            The registered tool instance, or None if not found
        """
        registered_tool = self._registered_tools.get(name)
        return registered_tool.tool if registered_tool else None

    def get_tool_names(self) -> List[str]:
        """Get names of all registered tools."""
        return list(self._registered_tools.keys())

    def get_enabled_tool_names(self) -> List[str]:
        """Get names of all enabled tools."""
        return [
            tool_name for tool_name in self._registered_tools
            if self.is_tool_enabled(tool_name)
        ]

    async def execute_tool(
        self,
        tool_call: CodeToolCall,
        request_authorization: CodeToolAuthorizationCallback,
        requester_ref: str | None = None
    ) -> CodeToolResult:
        """
        Execute a tool call.

        Failures are reported in the returned result rather than raised.  Cancellation of
        the awaiting task is the one exception: it propagates so the caller can observe it.

        Args:
            tool_call: The tool call to execute
            request_authorization: Callback for requesting authorization
            requester_ref: Reference to the requester, passed through to the tool

        Returns:
            CodeToolResult containing the execution result or the failure
        """
        registered_tool = self._registered_tools.get(tool_call.name)
        if registered_tool is None:
            error_msg = f"Unknown tool: {tool_call.name}"
            self._logger.error(error_msg)
            return self._error_result(tool_call, error_msg, "unknown_tool")

        if not self.is_tool_enabled(tool_call.name):
            error_msg = f"Tool is disabled: {tool_call.name}"
            self._logger.error(error_msg)
            return self._error_result(tool_call, error_msg, "tool_disabled")

        try:
            self._logger.debug("Executing tool '%s' with args %s", tool_call.name, tool_call.arguments)

            result = await registered_tool.tool.execute(tool_call, requester_ref, request_authorization)

            self._logger.debug("Tool '%s' executed successfully with args %s", tool_call.name, tool_call.arguments)
            return result

        except asyncio.CancelledError:
            self._logger.info("Tool '%s' call %s was cancelled", tool_call.name, tool_call.id)
            raise

        except CodeToolAuthorizationDenied as e:
            self._logger.warning(
                "Tool '%s' authorization denied with args %s: %s",
                tool_call.name,
                tool_call.arguments,
                str(e)
            )
            return self._error_result(tool_call, f"Tool authorization denied: {str(e)}", "authorization_denied")

        except CodeToolExecutionError as e:
            self._logger.warning(
                "Tool '%s' failed with args %s: %s",
                tool_call.name,
                tool_call.arguments,
                str(e)
            )
            return self._error_result(tool_call, f"Tool execution failed: {str(e)}", e.kind)

        except Exception as e:
            self._logger.exception(
                "Tool '%s' failed with args %s: %s",
                tool_call.name,
                tool_call.arguments,
                str(e)
            )
            return self._error_result(tool_call, f"Tool execution failed: {str(e)}", "underlying")

    def _error_result(self, tool_call: CodeToolCall, message: str, kind: str) -> CodeToolResult:
        """Build a failed result for a tool call."""
        return CodeToolResult(
            id=tool_call.id,
            name=tool_call.name,
            content="",
            error=message,
            error_kind=kind
        )
