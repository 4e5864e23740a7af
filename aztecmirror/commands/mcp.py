"""
MCP server command.

Starts the aztecmirror MCP (Model Context Protocol) server so LLM tools
can sync, search and read the Aztec mirror.
"""

import logging

import click


@click.command('mcp')
@click.option('--transport', '-t', default='stdio',
              type=click.Choice(['stdio', 'http']),
              help='Transport type (stdio for MCP clients, http for testing)')
@click.option('--port', '-p', default=8765, type=int,
              help='Port for HTTP transport (default: 8765)')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def mcp_handler(transport, port, debug):
    """Start the Aztec MCP server.

    \b
    Tools:
      aztec_sync_repos      - Clone or update the repositories
      aztec_status          - Clone state and commits
      aztec_search_code     - Regex search over source files
      aztec_search_docs     - Search the documentation
      aztec_list_examples   - List contract examples
      aztec_read_example    - Read one example contract
      aztec_read_file       - Read any mirrored file

    \b
    Examples:
      aztecmirror mcp                    # Start stdio server
      aztecmirror mcp --transport http   # Start HTTP server (for testing)
    """
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    from ..mcp import run_mcp_server

    if transport == 'http':
        click.echo(f"Starting Aztec MCP server on http://localhost:{port}", err=True)
        click.echo("Press Ctrl+C to stop", err=True)

    run_mcp_server(transport=transport, port=port)
