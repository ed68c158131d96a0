"""
Tests for the tool base class: operation routing, argument validation and typed getters.
"""
import asyncio
from typing import Any, Dict

import pytest

from code_tool import (
    CodeTool, CodeToolAuthorizationCallback, CodeToolAuthorizationDenied, CodeToolCall, CodeToolDefinition,
    CodeToolExecutionError, CodeToolOperationDefinition, CodeToolParameter, CodeToolResult
)


class EchoCodeTool(CodeTool):
    """Small operation-based tool used to exercise the base class."""

    def get_definition(self) -> CodeToolDefinition:
        return self._build_definition_from_operations(
            name="echo",
            description_prefix="Echo tool for tests.",
            additional_parameters=[
                CodeToolParameter(name="text", type="string", description="Text to echo", required=False)
            ]
        )

    def get_operation_definitions(self) -> Dict[str, CodeToolOperationDefinition]:
        return {
            "say": CodeToolOperationDefinition(
                name="say",
                handler=self._say,
                allowed_parameters={"text", "repeat", "loud", "suffix"},
                required_parameters={"text"},
                description="Echo text"
            ),
            "deny": CodeToolOperationDefinition(
                name="deny",
                handler=self._deny,
                allowed_parameters=set(),
                required_parameters=set(),
                description="Always denied"
            ),
            "crash": CodeToolOperationDefinition(
                name="crash",
                handler=self._crash,
                allowed_parameters=set(),
                required_parameters=set(),
                description="Always fails unexpectedly"
            )
        }

    async def _say(
        self,
        tool_call: CodeToolCall,
        _requester_ref: Any,
        _request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        arguments = tool_call.arguments
        text = self._get_required_str_value("text", arguments)
        repeat = self._get_optional_int_value("repeat", arguments, 1, minimum=1)
        loud = self._get_optional_bool_value("loud", arguments)
        suffix = self._get_optional_str_value("suffix", arguments, "")
        content = (text.upper() if loud else text) * repeat + suffix
        return CodeToolResult(id=tool_call.id, name="echo", content=content)

    async def _deny(
        self,
        _tool_call: CodeToolCall,
        _requester_ref: Any,
        _request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        raise CodeToolAuthorizationDenied("denied")

    async def _crash(
        self,
        _tool_call: CodeToolCall,
        _requester_ref: Any,
        _request_authorization: CodeToolAuthorizationCallback
    ) -> CodeToolResult:
        raise RuntimeError("boom")


@pytest.fixture
def echo_tool():
    """Fixture providing the echo tool."""
    return EchoCodeTool()


class TestCodeToolDefinition:
    """Test definitions built from operations."""

    def test_build_definition_from_operations(self, echo_tool):
        """Test that the operation parameter lists every operation."""
        definition = echo_tool.get_definition()

        assert definition.name == "echo"
        assert "Echo tool for tests." in definition.description
        assert "- say: Echo text" in definition.description
        assert definition.parameters[0].name == "operation"
        assert definition.parameters[0].enum == ["say", "deny", "crash"]
        assert definition.parameters[1].name == "text"

    def test_definition_to_dict(self, echo_tool):
        """Test dictionary form of a definition."""
        data = echo_tool.get_definition().to_dict()

        assert data["name"] == "echo"
        assert data["parameters"][0] == {
            "name": "operation",
            "type": "string",
            "description": "Echo operation to perform",
            "required": True,
            "enum": ["say", "deny", "crash"]
        }
        assert "enum" not in data["parameters"][1]

    def test_get_tool_name(self, echo_tool):
        """Test that the class suffix is stripped from the tool name."""
        assert echo_tool.get_tool_name() == "echo"


class TestCodeToolExecute:
    """Test operation routing and validation."""

    def test_execute_operation(self, echo_tool, mock_authorization, make_tool_call):
        """Test routing to an operation handler."""
        tool_call = make_tool_call("echo", {"operation": "say", "text": "hi", "repeat": 2, "loud": True})
        result = asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert result.content == "HIHI"
        assert result.id == tool_call.id

    def test_missing_operation(self, echo_tool, mock_authorization, make_tool_call):
        """Test that a call without an operation is rejected."""
        tool_call = make_tool_call("echo", {"text": "hi"})
        with pytest.raises(CodeToolExecutionError) as exc_info:
            asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert "No 'operation' argument provided" in str(exc_info.value)
        assert exc_info.value.kind == "invalid_arguments"

    def test_unsupported_operation(self, echo_tool, mock_authorization, make_tool_call):
        """Test that an unknown operation lists the available ones."""
        tool_call = make_tool_call("echo", {"operation": "shout"})
        with pytest.raises(CodeToolExecutionError) as exc_info:
            asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert "Unsupported operation: shout. Available operations: crash, deny, say" in str(exc_info.value)

    def test_invalid_parameter(self, echo_tool, mock_authorization, make_tool_call):
        """Test that parameters not allowed for an operation are rejected."""
        tool_call = make_tool_call("echo", {"operation": "say", "text": "hi", "volume": 11})
        with pytest.raises(CodeToolExecutionError) as exc_info:
            asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert "Parameter(s) volume not valid for operation 'say'" in str(exc_info.value)

    def test_missing_required_parameter(self, echo_tool, mock_authorization, make_tool_call):
        """Test that missing required parameters are rejected."""
        tool_call = make_tool_call("echo", {"operation": "say"})
        with pytest.raises(CodeToolExecutionError) as exc_info:
            asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert "Required parameter(s) text missing for operation 'say'" in str(exc_info.value)

    def test_authorization_denied_propagates(self, echo_tool, mock_authorization, make_tool_call):
        """Test that authorization denial is raised unchanged."""
        tool_call = make_tool_call("echo", {"operation": "deny"})
        with pytest.raises(CodeToolAuthorizationDenied):
            asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

    def test_unexpected_error_wrapped(self, echo_tool, mock_authorization, make_tool_call):
        """Test that unexpected handler errors become execution errors."""
        tool_call = make_tool_call("echo", {"operation": "crash"})
        with pytest.raises(CodeToolExecutionError) as exc_info:
            asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert "echo operation failed: boom" in str(exc_info.value)
        assert exc_info.value.kind == "underlying"


class TestCodeToolArgumentGetters:
    """Test typed argument extraction."""

    @pytest.mark.parametrize("arguments, message", [
        ({"text": 5}, "'text' must be a string"),
        ({"text": "a", "repeat": "2"}, "'repeat' must be an integer"),
        ({"text": "a", "repeat": True}, "'repeat' must be an integer"),
        ({"text": "a", "repeat": 0}, "'repeat' must be >= 1"),
        ({"text": "a", "loud": "yes"}, "'loud' must be a boolean"),
        ({"text": "a", "suffix": 3}, "'suffix' must be a string"),
    ])
    def test_wrong_types_rejected(self, echo_tool, mock_authorization, make_tool_call, arguments, message):
        """Test that badly typed arguments are rejected."""
        tool_call = make_tool_call("echo", {"operation": "say", **arguments})
        with pytest.raises(CodeToolExecutionError) as exc_info:
            asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert message in str(exc_info.value)
        assert exc_info.value.kind == "invalid_arguments"

    def test_defaults_used_for_missing_optionals(self, echo_tool, mock_authorization, make_tool_call):
        """Test that absent or null optional arguments take their defaults."""
        tool_call = make_tool_call("echo", {"operation": "say", "text": "a", "repeat": None, "suffix": None})
        result = asyncio.run(echo_tool.execute(tool_call, "", mock_authorization))

        assert result.content == "a"


class TestCodeToolCall:
    """Test decoding tool calls."""

    def test_from_dict(self):
        """Test decoding a complete call."""
        tool_call = CodeToolCall.from_dict({"id": 7, "name": "echo", "arguments": {"operation": "say"}})

        assert tool_call.id == "7"
        assert tool_call.name == "echo"
        assert tool_call.to_dict() == {"id": "7", "name": "echo", "arguments": {"operation": "say"}}

    def test_from_dict_default_arguments(self):
        """Test that arguments default to an empty object."""
        assert CodeToolCall.from_dict({"id": "a", "name": "echo"}).arguments == {}

    @pytest.mark.parametrize("data", [
        {"name": "echo"},
        {"id": True, "name": "echo"},
        {"id": "a"},
        {"id": "a", "name": ""},
        {"id": "a", "name": "echo", "arguments": []},
    ])
    def test_from_dict_invalid(self, data):
        """Test that malformed calls are rejected."""
        with pytest.raises(ValueError):
            CodeToolCall.from_dict(data)
