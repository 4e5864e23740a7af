"""
Tests for the MCP server: tool table, argument validation and the
JSON-RPC dispatcher.
"""

import json
from io import StringIO
from unittest.mock import MagicMock

import pytest

from aztecmirror.api import AztecMirror
from aztecmirror.mcp import create_mcp_server, InvalidParamsError
from aztecmirror.mcp.server import (
    _handle_jsonrpc_request, _run_stdio_server,
    PARSE_ERROR, INVALID_REQUEST, METHOD_NOT_FOUND, INVALID_PARAMS, INTERNAL_ERROR,
)

TOOL_NAMES = [
    "aztec_sync_repos",
    "aztec_status",
    "aztec_search_code",
    "aztec_search_docs",
    "aztec_list_examples",
    "aztec_read_example",
    "aztec_read_file",
]


@pytest.fixture
def mirror():
    return MagicMock(spec=AztecMirror)


@pytest.fixture
def server(mirror):
    return create_mcp_server(mirror)


def request(method, params=None, request_id=1):
    message = {"jsonrpc": "2.0", "method": method, "id": request_id}
    if params is not None:
        message["params"] = params
    return message


class TestToolTable:

    def test_all_tools_registered(self, server):
        assert [t["name"] for t in server.list_tools()] == TOOL_NAMES

    def test_schemas_declare_required_arguments(self, server):
        tools = {t["name"]: t for t in server.list_tools()}
        assert tools["aztec_search_code"]["inputSchema"]["required"] == ["query"]
        assert tools["aztec_read_file"]["inputSchema"]["required"] == ["path"]
        assert "required" not in tools["aztec_status"]["inputSchema"]


class TestCallTool:

    def test_search_code_maps_arguments(self, server, mirror):
        mirror.search_code.return_value = {'success': True, 'results': [], 'message': "No matches found"}

        text = server.call_tool("aztec_search_code", {
            "query": "PrivateSet", "filePattern": "*.ts", "maxResults": 5, "bogus": 1,
        })

        mirror.search_code.assert_called_once_with(
            "PrivateSet", file_pattern="*.ts", repo=None, max_results=5,
        )
        assert text.startswith("No matches found")

    def test_search_defaults(self, server, mirror):
        mirror.search_code.return_value = {'success': True, 'results': [], 'message': "No matches found"}
        mirror.search_docs.return_value = {'success': True, 'results': [], 'message': "x"}

        server.call_tool("aztec_search_code", {"query": "q"})
        server.call_tool("aztec_search_docs", {"query": "q"})

        assert mirror.search_code.call_args[1]["file_pattern"] == "*.nr"
        assert mirror.search_code.call_args[1]["max_results"] == 30
        assert mirror.search_docs.call_args[1]["max_results"] == 20

    def test_sync_arguments(self, server, mirror):
        mirror.sync.return_value = {
            'success': True, 'message': "Successfully synced 1 repositories to /r",
            'version': "v1", 'repos_dir': "/r",
            'repos': [{'name': "noir", 'status': "Cloned noir", 'ok': True}],
        }

        text = server.call_tool("aztec_sync_repos", {"version": "v1", "repos": ["noir"]})

        mirror.sync.assert_called_once_with(force=False, repos=["noir"], version="v1")
        assert "✓ Sync completed" in text
        assert "  ✓ noir: Cloned noir" in text

    def test_missing_required_argument(self, server):
        with pytest.raises(InvalidParamsError):
            server.call_tool("aztec_read_file", {})

    def test_empty_required_argument(self, server):
        with pytest.raises(InvalidParamsError):
            server.call_tool("aztec_search_code", {"query": ""})

    def test_read_example_text(self, server, mirror):
        mirror.read_example.return_value = {
            'success': True,
            'example': {'name': "token", 'repo': "aztec-examples", 'path': "aztec-examples/token/src/main.nr"},
            'content': "contract Token {}",
            'message': "Read token from aztec-examples",
        }

        text = server.call_tool("aztec_read_example", {"name": "token"})

        assert "```noir\ncontract Token {}\n```" in text


class TestJsonRpc:

    def test_initialize(self, server):
        response = _handle_jsonrpc_request(server, request("initialize", {}))
        assert response["result"]["protocolVersion"] == "2024-11-05"
        assert response["result"]["serverInfo"]["name"] == "aztec-mcp"

    def test_tools_call_wraps_text(self, server, mirror):
        mirror.read_file.return_value = {'success': True, 'content': "hello", 'message': "Read file: a"}

        response = _handle_jsonrpc_request(
            server, request("tools/call", {"name": "aztec_read_file", "arguments": {"path": "a"}})
        )

        assert response["result"] == {"content": [{"type": "text", "text": "hello"}]}

    def test_invalid_params(self, server):
        response = _handle_jsonrpc_request(
            server, request("tools/call", {"name": "aztec_read_file", "arguments": {}})
        )
        assert response["error"]["code"] == INVALID_PARAMS

    def test_unknown_tool(self, server):
        response = _handle_jsonrpc_request(server, request("tools/call", {"name": "nope"}))
        assert response["error"]["code"] == METHOD_NOT_FOUND

    def test_unknown_method(self, server):
        response = _handle_jsonrpc_request(server, request("resources/list"))
        assert response["error"]["code"] == METHOD_NOT_FOUND

    def test_handler_failure_is_internal_error(self, server, mirror):
        mirror.status.side_effect = RuntimeError("disk gone")

        response = _handle_jsonrpc_request(server, request("tools/call", {"name": "aztec_status"}))

        assert response["error"]["code"] == INTERNAL_ERROR
        assert response["error"]["message"] == "Tool execution failed: disk gone"

    def test_notification_gets_no_response(self, server):
        assert _handle_jsonrpc_request(server, {"jsonrpc": "2.0", "method": "notifications/initialized"}) is None

    @pytest.mark.parametrize("message", [[1, 2], "x", 42, None])
    def test_non_object_is_invalid_request(self, server, message):
        response = _handle_jsonrpc_request(server, message)

        assert response["id"] is None
        assert response["error"]["code"] == INVALID_REQUEST


class TestStdioLoop:

    def test_one_response_per_request(self, server):
        stdin = StringIO(
            json.dumps(request("ping", request_id=1)) + "\n"
            + "\n"
            + json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}) + "\n"
            + "not json\n"
            + json.dumps(request("tools/list", request_id=2)) + "\n"
        )
        stdout = StringIO()

        _run_stdio_server(server, stdin=stdin, stdout=stdout)

        responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert [r.get("id") for r in responses] == [1, None, 2]
        assert responses[0]["result"] == {}
        assert responses[1]["error"]["code"] == PARSE_ERROR
        assert len(responses[2]["result"]["tools"]) == len(TOOL_NAMES)

    def test_non_object_lines_do_not_stop_the_loop(self, server):
        stdin = StringIO(
            "[1, 2]\n"
            '"x"\n'
            + json.dumps(request("ping", request_id=7)) + "\n"
        )
        stdout = StringIO()

        _run_stdio_server(server, stdin=stdin, stdout=stdout)

        responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert [r.get("id") for r in responses] == [None, None, 7]
        assert responses[0]["error"]["code"] == INVALID_REQUEST
        assert responses[1]["error"]["code"] == INVALID_REQUEST
        assert responses[2]["result"] == {}
