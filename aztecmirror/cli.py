#!/usr/bin/env python3

import click

from aztecmirror.commands.sync import sync_handler
from aztecmirror.commands.status import status_handler
from aztecmirror.commands.search import search_handler, docs_handler
from aztecmirror.commands.examples import examples_handler, example_handler
from aztecmirror.commands.read import read_handler
from aztecmirror.commands.mcp import mcp_handler


@click.group()
@click.version_option(package_name='aztecmirror')
def cli():
    """aztecmirror - Local mirror of the Aztec and Noir repositories.

    Clones version-pinned checkouts, then searches and reads them offline,
    from the command line or through an MCP server.
    """
    pass


cli.add_command(sync_handler)
cli.add_command(status_handler)
cli.add_command(search_handler)
cli.add_command(docs_handler)
cli.add_command(examples_handler)
cli.add_command(example_handler)
cli.add_command(read_handler)
cli.add_command(mcp_handler, name='mcp')


def main():
    cli()

if __name__ == "__main__":
    main()
