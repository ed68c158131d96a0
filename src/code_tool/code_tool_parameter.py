"""Tool parameter definition."""

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class CodeToolParameter:
    """Definition of a tool parameter."""
    name: str
    type: str  # "string", "integer", "boolean", "object"
    description: str
    required: bool = True
    enum: List[str] | None = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the parameter to a dictionary.

        Returns:
            Dictionary representation of the parameter
        """
        result: Dict[str, Any] = {
            'name': self.name,
            'type': self.type,
            'description': self.description,
            'required': self.required
        }
        if self.enum is not None:
            result['enum'] = list(self.enum)

        return result
