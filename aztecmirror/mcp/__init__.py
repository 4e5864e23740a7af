"""
MCP (Model Context Protocol) server for aztecmirror.

Tools:
    aztec_sync_repos(version?, force?, repos?)           - Clone or update the mirror
    aztec_status()                                       - Clone state and commits
    aztec_search_code(query, filePattern?, repo?, maxResults?)
    aztec_search_docs(query, section?, maxResults?)
    aztec_list_examples(category?)                       - Contract examples
    aztec_read_example(name)                             - Source of one example
    aztec_read_file(path)                                - Any mirrored file
"""

from .server import create_mcp_server, run_mcp_server, MCPServer, InvalidParamsError

__all__ = ['create_mcp_server', 'run_mcp_server', 'MCPServer', 'InvalidParamsError']
