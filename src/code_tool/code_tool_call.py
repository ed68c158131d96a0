"""Tool call representation."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class CodeToolCall:
    """Represents a tool call request from a client."""
    id: str  # Unique identifier for this tool call
    name: str
    arguments: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodeToolCall':
        """
        Create a tool call from a decoded request.

        Args:
            data: Dictionary with 'id', 'name' and optional 'arguments'

        Returns:
            New tool call

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        call_id = data.get('id')
        name = data.get('name')
        arguments = data.get('arguments', {})

        if not isinstance(call_id, (str, int)) or isinstance(call_id, bool):
            raise ValueError("'id' must be a string or integer")

        if not isinstance(name, str) or not name:
            raise ValueError("'name' must be a non-empty string")

        if not isinstance(arguments, dict):
            raise ValueError("'arguments' must be an object")

        return cls(id=str(call_id), name=name, arguments=arguments)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the tool call to a dictionary.

        Returns:
            Dictionary representation of the tool call
        """
        return {
            'id': self.id,
            'name': self.name,
            'arguments': self.arguments
        }
