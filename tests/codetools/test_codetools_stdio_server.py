"""Tests for the JSON-lines stdio server."""

import asyncio
import io
import json
from unittest.mock import patch

from codetools.codetools_stdio_server import CodeToolsStdioServer


def run_server(manager, lines, read_only=False):
    """Run the server over the given request lines and return the decoded responses."""
    input_stream = io.StringIO("".join(line + "\n" for line in lines))
    output_stream = io.StringIO()
    server = CodeToolsStdioServer(manager, read_only=read_only, input_stream=input_stream, output_stream=output_stream)
    asyncio.run(server.run())
    return [json.loads(line) for line in output_stream.getvalue().splitlines()]


def call(call_id, arguments):
    """Encode a filesystem call request."""
    return json.dumps({"type": "call", "id": call_id, "name": "filesystem", "arguments": arguments})


class TestCodeToolsStdioServer:
    """Test request handling."""

    def test_list_tools(self, server_manager):
        """Test that the tool definitions are returned."""
        responses = run_server(server_manager, [json.dumps({"type": "list_tools"})])

        assert len(responses) == 1
        assert responses[0]["type"] == "tools"
        assert [tool["name"] for tool in responses[0]["tools"]] == ["filesystem"]
        assert responses[0]["tools"][0]["parameters"][0]["name"] == "operation"

    def test_call(self, server_manager, served_dir):
        """Test a successful call."""
        responses = run_server(server_manager, [call("1", {"operation": "list_dir", "path": "."})])

        assert len(responses) == 1
        response = responses[0]
        assert response["type"] == "result"
        assert response["id"] == "1"
        assert response["name"] == "filesystem"
        assert response["error"] is None
        assert response["error_kind"] is None
        assert [entry["name"] for entry in response["data"]["entries"]] == ["sub", "a.txt"]

    def test_call_failure(self, server_manager):
        """Test that a failing call reports its error kind."""
        responses = run_server(server_manager, [call("1", {"operation": "list_dir", "path": "missing"})])

        assert responses[0]["type"] == "result"
        assert responses[0]["error_kind"] == "not_found"
        assert responses[0]["error"].startswith("Tool execution failed:")

    def test_concurrent_calls_each_answered(self, server_manager):
        """Test that several calls each get exactly one result."""
        responses = run_server(server_manager, [
            call("a", {"operation": "tree", "path": "."}),
            call("b", {"operation": "glob", "pattern": "**/*.txt"}),
            call("c", {"operation": "list_dir", "path": "sub"}),
        ])

        assert sorted(response["id"] for response in responses) == ["a", "b", "c"]
        assert all(response["error"] is None for response in responses)

    def test_destructive_call_approved(self, server_manager, served_dir):
        """Test that mutating operations are approved by default."""
        responses = run_server(server_manager, [call("1", {"operation": "delete", "path": "a.txt"})])

        assert responses[0]["data"]["success"] is True
        assert not (served_dir / "a.txt").exists()

    def test_read_only_denies_mutation(self, server_manager, served_dir):
        """Test that read-only mode denies mutating operations."""
        responses = run_server(
            server_manager,
            [
                call("1", {"operation": "remove", "path": "sub", "recursive": True}),
                call("2", {"operation": "copy", "path": "a.txt", "destination": "c.txt"}),
            ],
            read_only=True
        )

        assert {response["error_kind"] for response in responses} == {"authorization_denied"}
        assert (served_dir / "sub" / "b.txt").exists()
        assert not (served_dir / "c.txt").exists()

    def test_read_only_allows_reads(self, server_manager):
        """Test that read operations work in read-only mode."""
        responses = run_server(server_manager, [call("1", {"operation": "tree", "path": "."})], read_only=True)

        assert responses[0]["error"] is None

    def test_unknown_tool(self, server_manager):
        """Test calling a tool that does not exist."""
        request = json.dumps({"type": "call", "id": "1", "name": "shell", "arguments": {}})
        responses = run_server(server_manager, [request])

        assert responses[0]["error_kind"] == "unknown_tool"

    def test_malformed_lines(self, server_manager):
        """Test protocol errors for malformed requests."""
        responses = run_server(server_manager, [
            "{not json",
            json.dumps([1, 2]),
            json.dumps({"type": "shutdown"}),
            json.dumps({"type": "call", "name": "filesystem"}),
            json.dumps({"type": "cancel", "id": "nothing"}),
            "",
        ])

        assert [response["type"] for response in responses] == ["error"] * 5
        assert responses[0]["error"].startswith("Invalid JSON")
        assert responses[1]["error"] == "Request must be a JSON object"
        assert responses[2]["error"] == "Unknown request type: shutdown"
        assert responses[3]["error"].startswith("Invalid call request")
        assert responses[4]["error"] == "No call in progress with id nothing"

    def test_cancel_in_flight_call(self, server_manager):
        """Test that cancelling a call produces a cancelled result and stops the worker."""
        tool = server_manager.get_tool("filesystem")
        seen_tokens = []

        def blocking_list(_root, _recursive, _show_hidden, _limit, token):
            seen_tokens.append(token)
            while not token.is_cancelled():
                token._event.wait(0.01)

            token.check()

        output_stream = io.StringIO()
        server = CodeToolsStdioServer(server_manager, input_stream=io.StringIO(), output_stream=output_stream)

        async def run():
            with patch.object(tool._traversal, "list_directory", side_effect=blocking_list):
                await server.handle_line(call("slow", {"operation": "list_dir", "path": "."}))
                while not seen_tokens:
                    await asyncio.sleep(0.01)

                await server.handle_line(call("slow", {"operation": "list_dir", "path": "."}))
                task = server._tasks["slow"]
                await server.handle_line(json.dumps({"type": "cancel", "id": "slow"}))
                await task

        asyncio.run(run())

        responses = [json.loads(line) for line in output_stream.getvalue().splitlines()]
        assert responses[0] == {"type": "error", "error": "Call slow is already in progress"}
        assert responses[1]["type"] == "result"
        assert responses[1]["id"] == "slow"
        assert responses[1]["error_kind"] == "cancelled"
        assert seen_tokens[0].is_cancelled()
        assert server._tasks == {}
