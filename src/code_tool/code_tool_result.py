"""Tool result representation."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class CodeToolResult:
    """
    Result of a tool execution.

    `content` is the human-readable summary and `data` the machine-readable record.
    On failure `error` holds the message and `error_kind` the classified failure.
    """
    id: str
    name: str
    content: str
    data: Dict[str, Any] | None = None
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the tool result to a dictionary.

        Returns:
            Dictionary representation of the tool result
        """
        return {
            'id': self.id,
            'name': self.name,
            'content': self.content,
            'data': self.data,
            'error': self.error,
            'error_kind': self.error_kind
        }
