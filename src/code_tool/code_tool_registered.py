"""Internal representation of a registered tool."""

from dataclasses import dataclass

from code_tool.code_tool import CodeTool


@dataclass
class CodeToolRegistered:
    """Internal representation of a registered tool."""
    tool: CodeTool
    display_name: str
    enabled_by_default: bool
