"""Abstract base class for tools."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Callable, Awaitable

from code_tool.code_tool_call import CodeToolCall
from code_tool.code_tool_definition import CodeToolDefinition
from code_tool.code_tool_parameter import CodeToolParameter
from code_tool.code_tool_operation_definition import CodeToolOperationDefinition
from code_tool.code_tool_exceptions import CodeToolExecutionError, CodeToolAuthorizationDenied
from code_tool.code_tool_result import CodeToolResult


# Type alias for the authorization callback: (tool_name, arguments, context, requester_ref, destructive)
CodeToolAuthorizationCallback = Callable[[str, Dict[str, Any], str, str | None, bool], Awaitable[bool]]


INVALID_ARGUMENTS = "invalid_arguments"


class CodeTool(ABC):
    """Abstract base class for tools."""

    @abstractmethod
    def get_definition(self) -> CodeToolDefinition:
        """
        Get the tool definition for registration.

        Returns:
            CodeToolDefinition describing this tool's interface
        """

    def get_operation_definitions(self) -> Dict[str, CodeToolOperationDefinition]:
        """
        Get operation definitions for this tool.

        Returns:
            Dictionary mapping operation names to their definitions.
        """
        return {}

    async def execute(
        self,
        tool_call: CodeToolCall,
        requester_ref: Any,
        request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        """
        Execute the tool with given arguments.

        Default implementation handles operation-based routing if operations are defined.
        Tools without operations must override this method.

        Args:
            tool_call: Tool call containing arguments and metadata
            requester_ref: Reference to the requester (e.g., user or system)
            request_authorization: Callback for requesting authorization

        Returns:
            CodeToolResult containing the execution result

        Raises:
            CodeToolExecutionError: If tool execution fails
            CodeToolAuthorizationDenied: If authorization is required but denied
        """
        operation_definitions = self.get_operation_definitions()

        # If no operations defined, subclass must override execute()
        if not operation_definitions:
            raise NotImplementedError(
                f"{self.__class__.__name__} must either define operations or override execute()"
            )

        arguments = tool_call.arguments
        operation = arguments.get("operation")

        if not operation:
            raise CodeToolExecutionError("No 'operation' argument provided", INVALID_ARGUMENTS)

        if not isinstance(operation, str):
            raise CodeToolExecutionError("'operation' must be a string", INVALID_ARGUMENTS)

        if operation not in operation_definitions:
            available_operations = ", ".join(sorted(operation_definitions.keys()))
            raise CodeToolExecutionError(
                f"Unsupported operation: {operation}. Available operations: {available_operations}",
                INVALID_ARGUMENTS
            )

        operation_def = operation_definitions[operation]

        provided_params = set(arguments.keys())
        provided_params.discard("operation")

        invalid_params = provided_params - operation_def.allowed_parameters
        if invalid_params:
            invalid_list = ", ".join(sorted(invalid_params))
            raise CodeToolExecutionError(
                f"Parameter(s) {invalid_list} not valid for operation '{operation}'", INVALID_ARGUMENTS
            )

        missing_params = operation_def.required_parameters - provided_params
        if missing_params:
            missing_list = ", ".join(sorted(missing_params))
            raise CodeToolExecutionError(
                f"Required parameter(s) {missing_list} missing for operation '{operation}'", INVALID_ARGUMENTS
            )

        logger = self.get_logger()
        logger.debug("%s operation requested: %s", self.get_tool_name(), operation)

        try:
            return await operation_def.handler(tool_call, requester_ref, request_authorization)

        except (CodeToolExecutionError, CodeToolAuthorizationDenied):
            raise

        except Exception as e:
            logger.error(
                "Unexpected error in %s operation '%s': %s",
                self.get_tool_name(), operation, str(e), exc_info=True
            )
            raise CodeToolExecutionError(f"{self.get_tool_name()} operation failed: {str(e)}") from e

    def get_logger(self) -> logging.Logger:
        """
        Get logger for this tool.

        Returns:
            Logger instance for this tool
        """
        return logging.getLogger(self.__class__.__name__)

    def get_tool_name(self) -> str:
        """
        Get tool name for logging and error messages.

        Returns:
            Tool name string
        """
        # Default: remove "CodeTool" suffix and convert to lowercase
        class_name = self.__class__.__name__
        if class_name.endswith("CodeTool"):
            return class_name[:-8].lower()

        return class_name.lower()

    def _build_definition_from_operations(
        self,
        name: str,
        description_prefix: str,
        additional_parameters: List[CodeToolParameter] | None = None
    ) -> CodeToolDefinition:
        """
        Build tool definition from operation definitions.

        Args:
            name: Tool name
            description_prefix: Description text before operation list
            additional_parameters: Optional additional parameters beyond standard 'operation' parameter

        Returns:
            Complete tool definition
        """
        operations = self.get_operation_definitions()
        operation_names = list(operations.keys())

        operation_list = []
        for op_name, op_def in operations.items():
            operation_list.append(f"- {op_name}: {op_def.description}")

        description = f"{description_prefix}\n\nAvailable operations:\n\n" + "\n".join(operation_list)

        parameters = [
            CodeToolParameter(
                name="operation",
                type="string",
                description=f"{name.capitalize()} operation to perform",
                required=True,
                enum=operation_names
            )
        ]

        if additional_parameters:
            parameters.extend(additional_parameters)

        return CodeToolDefinition(
            name=name,
            description=description,
            parameters=parameters
        )

    def _get_required_str_value(self, key: str, arguments: Dict[str, Any]) -> str:
        """
        Extract a required string value from arguments.

        Args:
            key: Key to extract from arguments
            arguments: Dictionary containing operation parameters

        Returns:
            String value for the given key

        Raises:
            CodeToolExecutionError: If key is missing or value is not a string
        """
        if key not in arguments:
            raise CodeToolExecutionError(f"No '{key}' argument provided", INVALID_ARGUMENTS)

        value = arguments[key]
        if not isinstance(value, str):
            raise CodeToolExecutionError(f"'{key}' must be a string", INVALID_ARGUMENTS)

        return value

    def _get_optional_str_value(self, key: str, arguments: Dict[str, Any], default: str | None = None) -> str | None:
        """Extract an optional string value from arguments."""
        value = arguments.get(key)
        if value is None:
            return default

        if not isinstance(value, str):
            raise CodeToolExecutionError(f"'{key}' must be a string", INVALID_ARGUMENTS)

        return value

    def _get_optional_bool_value(self, key: str, arguments: Dict[str, Any], default: bool = False) -> bool:
        """Extract an optional boolean value from arguments."""
        value = arguments.get(key)
        if value is None:
            return default

        if not isinstance(value, bool):
            raise CodeToolExecutionError(f"'{key}' must be a boolean", INVALID_ARGUMENTS)

        return value

    def _get_optional_int_value(
        self,
        key: str,
        arguments: Dict[str, Any],
        default: int = 0,
        minimum: int | None = None
    ) -> int:
        """
        Extract an optional integer value from arguments.

        Args:
            key: Key to extract from arguments
            arguments: Dictionary containing operation parameters
            default: Value used when the key is absent
            minimum: Smallest accepted value, if any

        Returns:
            Integer value for the given key

        Raises:
            CodeToolExecutionError: If the value is not an integer or is below minimum
        """
        value = arguments.get(key)
        if value is None:
            return default

        # bool is a subclass of int but is never a valid count
        if isinstance(value, bool) or not isinstance(value, int):
            raise CodeToolExecutionError(f"'{key}' must be an integer", INVALID_ARGUMENTS)

        if minimum is not None and value < minimum:
            raise CodeToolExecutionError(f"'{key}' must be >= {minimum}", INVALID_ARGUMENTS)

        return value
