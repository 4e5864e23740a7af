"""
MCP Server implementation for aztecmirror.

Implements the Model Context Protocol (JSON-RPC 2.0) so LLM tools can
sync, search and read the local Aztec mirror.

Architecture:
    MCPServer holds the tool table. Handlers call the AztecMirror API
    and turn its result dicts into text with the render formatters.
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .. import __version__
from ..api import AztecMirror
from .. import registry
from ..render import (
    format_sync_result,
    format_status,
    format_search_results,
    format_examples_list,
    format_example_content,
    format_file_content,
)

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "aztec-mcp"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class MCPError(Exception):
    """An error reported to the client as a JSON-RPC error object."""
    code = INTERNAL_ERROR


class InvalidParamsError(MCPError):
    """A required tool argument is missing."""
    code = INVALID_PARAMS


class UnknownToolError(MCPError):
    code = METHOD_NOT_FOUND


@dataclass
class Tool:
    """Represents an MCP tool (action)."""
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable[..., str]

    @property
    def required(self) -> List[str]:
        return self.input_schema.get("required", [])


@dataclass
class MCPServer:
    """
    aztecmirror MCP Server.

    Exposes the mirror's operations as MCP tools returning text.
    """
    tools: Dict[str, Tool] = field(default_factory=dict)

    def register_tool(self, name: str, description: str,
                      input_schema: Dict[str, Any], handler: Callable[..., str]):
        """Register a tool with its handler."""
        self.tools[name] = Tool(
            name=name,
            description=description,
            input_schema=input_schema,
            handler=handler
        )
        logger.debug(f"Registered tool: {name}")

    def list_tools(self) -> List[Dict[str, Any]]:
        """List all available tools."""
        return [
            {
                "name": t.name,
                "description": t.description,
                "inputSchema": t.input_schema
            }
            for t in self.tools.values()
        ]

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> str:
        """
        Call a tool by name.

        Raises:
            UnknownToolError: no tool with that name
            InvalidParamsError: a required argument is missing or empty
        """
        if name not in self.tools:
            raise UnknownToolError(f"Unknown tool: {name}")

        tool = self.tools[name]
        arguments = arguments or {}
        for param in tool.required:
            if not arguments.get(param):
                raise InvalidParamsError(f"{param} is required")

        known = tool.input_schema.get("properties", {})
        return tool.handler(**{k: v for k, v in arguments.items() if k in known})


def create_mcp_server(mirror: Optional[AztecMirror] = None) -> MCPServer:
    """
    Create and configure the aztecmirror MCP server.

    Args:
        mirror: API instance to serve (process settings if None)

    Returns:
        Configured MCPServer instance
    """
    server = MCPServer()
    mirror = mirror or AztecMirror()
    repo_names = ", ".join(registry.list_names())

    # === TOOL HANDLERS ===

    def tool_sync(version: Optional[str] = None, force: Optional[bool] = None,
                  repos: Optional[Sequence[str]] = None) -> str:
        result = mirror.sync(
            force=bool(force),
            repos=list(repos) if repos is not None else None,
            version=version,
        )
        return format_sync_result(result)

    def tool_status() -> str:
        return format_status(mirror.status())

    def tool_search_code(query: str, filePattern: Optional[str] = None,
                         repo: Optional[str] = None, maxResults: Optional[int] = None) -> str:
        result = mirror.search_code(
            query,
            file_pattern=filePattern or "*.nr",
            repo=repo,
            max_results=int(maxResults) if maxResults else 30,
        )
        return format_search_results(result)

    def tool_search_docs(query: str, section: Optional[str] = None,
                         maxResults: Optional[int] = None) -> str:
        result = mirror.search_docs(
            query,
            section=section,
            max_results=int(maxResults) if maxResults else 20,
        )
        return format_search_results(result)

    def tool_list_examples(category: Optional[str] = None) -> str:
        return format_examples_list(mirror.list_examples(category))

    def tool_read_example(name: str) -> str:
        return format_example_content(mirror.read_example(name))

    def tool_read_file(path: str) -> str:
        return format_file_content(mirror.read_file(path))

    # === REGISTER TOOLS ===

    server.register_tool(
        "aztec_sync_repos",
        "Clone or update Aztec repositories locally. Run this first to enable searching. "
        "Specify a version to clone a specific Aztec release tag.",
        {
            "type": "object",
            "properties": {
                "version": {
                    "type": "string",
                    "description": "Aztec version tag to clone (e.g., 'v3.0.0-devnet.6-patch.1'). "
                                   "Defaults to the configured version."
                },
                "force": {
                    "type": "boolean",
                    "description": "Force re-clone even if repos exist (default: false)"
                },
                "repos": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": f"Specific repos to sync. Options: {repo_names}"
                }
            }
        },
        tool_sync
    )

    server.register_tool(
        "aztec_status",
        "Check the status of cloned Aztec repositories: which are available and their commit hashes.",
        {"type": "object", "properties": {}},
        tool_status
    )

    server.register_tool(
        "aztec_search_code",
        "Search Aztec contract code and source files. Supports regex patterns.",
        {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (supports regex)"},
                "filePattern": {
                    "type": "string",
                    "description": "File glob pattern (default: *.nr). Examples: *.ts, *.{nr,ts}"
                },
                "repo": {
                    "type": "string",
                    "description": f"Specific repo to search. Options: {repo_names}"
                },
                "maxResults": {"type": "number", "description": "Maximum results to return (default: 30)"}
            },
            "required": ["query"]
        },
        tool_search_code
    )

    server.register_tool(
        "aztec_search_docs",
        "Search Aztec documentation for tutorials, guides and API docs.",
        {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Documentation search query"},
                "section": {
                    "type": "string",
                    "description": "Docs section to search. Examples: tutorials, concepts, developers, reference"
                },
                "maxResults": {"type": "number", "description": "Maximum results to return (default: 20)"}
            },
            "required": ["query"]
        },
        tool_search_docs
    )

    server.register_tool(
        "aztec_list_examples",
        "List available Aztec contract examples. Returns contract names and paths.",
        {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "description": "Filter by category. Examples: token, nft, defi, escrow, crowdfund"
                }
            }
        },
        tool_list_examples
    )

    server.register_tool(
        "aztec_read_example",
        "Read the source code of an Aztec contract example. Use aztec_list_examples to find names.",
        {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Example contract name (e.g., 'token', 'escrow')"}
            },
            "required": ["name"]
        },
        tool_read_example
    )

    server.register_tool(
        "aztec_read_file",
        "Read any file from the cloned repositories. Path is relative to the repos directory.",
        {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "File path relative to repos directory "
                                   "(e.g., 'aztec-packages/docs/docs/tutorials/...')"
                }
            },
            "required": ["path"]
        },
        tool_read_file
    )

    return server


def run_mcp_server(transport: str = "stdio", port: int = 8765,
                   mirror: Optional[AztecMirror] = None):
    """
    Run the MCP server.

    Args:
        transport: Transport type ("stdio" or "http")
        port: Port for the HTTP transport
        mirror: API instance to serve
    """
    server = create_mcp_server(mirror)

    if transport == "stdio":
        _run_stdio_server(server)
    elif transport == "http":
        _run_http_server(server, port=port)
    else:
        raise ValueError(f"Unknown transport: {transport}")


def _run_stdio_server(server: MCPServer, stdin=None, stdout=None):
    """Run MCP server over stdio (newline-delimited JSON-RPC)."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    logger.info("Aztec MCP server started (stdio)")

    for line in stdin:
        if not line.strip():
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError:
            response = {
                "jsonrpc": "2.0",
                "error": {"code": PARSE_ERROR, "message": "Parse error"},
                "id": None
            }
        else:
            try:
                response = _handle_jsonrpc_request(server, request)
            except Exception as e:
                logger.error(f"Error processing request: {e}")
                response = {
                    "jsonrpc": "2.0",
                    "error": {"code": INTERNAL_ERROR, "message": f"Internal error: {e}"},
                    "id": None
                }

        if response is not None:
            print(json.dumps(response), file=stdout, flush=True)


def _handle_jsonrpc_request(server: MCPServer, request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Handle one JSON-RPC request.

    Returns None for notifications, which get no response.
    """
    if not isinstance(request, dict):
        return {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": INVALID_REQUEST, "message": "Invalid Request"}
        }

    method = request.get("method")
    params = request.get("params") or {}
    request_id = request.get("id")

    if "id" not in request:
        logger.debug(f"Notification: {method}")
        return None

    result = None
    error = None

    try:
        if method == "initialize":
            result = {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {
                    "name": SERVER_NAME,
                    "version": __version__
                }
            }

        elif method == "ping":
            result = {}

        elif method == "tools/list":
            result = {"tools": server.list_tools()}

        elif method == "tools/call":
            text = server.call_tool(params.get("name"), params.get("arguments"))
            result = {"content": [{"type": "text", "text": text}]}

        else:
            error = {"code": METHOD_NOT_FOUND, "message": f"Method not found: {method}"}

    except MCPError as e:
        error = {"code": e.code, "message": str(e)}
    except Exception as e:
        logger.error(f"Error handling {method}: {e}")
        error = {"code": INTERNAL_ERROR, "message": f"Tool execution failed: {e}"}

    response = {"jsonrpc": "2.0", "id": request_id}
    if error:
        response["error"] = error
    else:
        response["result"] = result

    return response


def _run_http_server(server: MCPServer, host: str = "localhost", port: int = 8765):
    """Run MCP server over HTTP (for testing/debugging)."""
    from http.server import HTTPServer, BaseHTTPRequestHandler

    class MCPHandler(BaseHTTPRequestHandler):
        def do_POST(self):
            content_length = int(self.headers['Content-Length'])
            body = self.rfile.read(content_length)

            try:
                request = json.loads(body)
            except json.JSONDecodeError:
                response = {"jsonrpc": "2.0", "error": {"code": PARSE_ERROR, "message": "Parse error"}, "id": None}
            else:
                response = _handle_jsonrpc_request(server, request)

            if response is None:
                self.send_response(204)
                self.end_headers()
                return

            self.send_response(200)
            self.send_header('Content-Type', 'application/json')
            self.end_headers()
            self.wfile.write(json.dumps(response).encode())

        def log_message(self, format, *args):
            logger.debug(format % args)

    httpd = HTTPServer((host, port), MCPHandler)
    logger.info(f"Aztec MCP server started (HTTP) on {host}:{port}")
    httpd.serve_forever()
