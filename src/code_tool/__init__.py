"""Tool calling framework."""

from code_tool.code_tool import CodeTool, CodeToolAuthorizationCallback, INVALID_ARGUMENTS
from code_tool.code_tool_call import CodeToolCall
from code_tool.code_tool_definition import CodeToolDefinition
from code_tool.code_tool_manager import CodeToolManager
from code_tool.code_tool_operation_definition import CodeToolOperationDefinition
from code_tool.code_tool_parameter import CodeToolParameter
from code_tool.code_tool_registered import CodeToolRegistered
from code_tool.code_tool_result import CodeToolResult
from code_tool.code_tool_exceptions import CodeToolAuthorizationDenied, CodeToolExecutionError


__all__ = [
    "CodeTool",
    "CodeToolAuthorizationCallback",
    "CodeToolAuthorizationDenied",
    "CodeToolCall",
    "CodeToolDefinition",
    "CodeToolExecutionError",
    "CodeToolManager",
    "CodeToolOperationDefinition",
    "CodeToolParameter",
    "CodeToolRegistered",
    "CodeToolResult",
    "INVALID_ARGUMENTS",
]
