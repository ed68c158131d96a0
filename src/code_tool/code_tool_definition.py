"""Tool definition."""

from dataclasses import dataclass
from typing import Any, Dict, List

from code_tool.code_tool_parameter import CodeToolParameter


@dataclass
class CodeToolDefinition:
    """Definition of an available tool."""
    name: str
    description: str
    parameters: List[CodeToolParameter]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the definition to a dictionary.

        Returns:
            Dictionary representation of the definition
        """
        return {
            'name': self.name,
            'description': self.description,
            'parameters': [parameter.to_dict() for parameter in self.parameters]
        }
