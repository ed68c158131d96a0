"""Tool operation definition."""

from dataclasses import dataclass
from typing import Callable, Set


@dataclass
class CodeToolOperationDefinition:
    """Definition of a tool operation (sub-command)."""
    name: str
    handler: Callable
    allowed_parameters: Set[str]
    required_parameters: Set[str]
    description: str
