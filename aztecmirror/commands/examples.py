"""
Handles the 'examples' and 'example' commands for contract examples.
"""

import click

from ..cli_utils import standard_command, add_common_options, get_mirror
from ..exit_codes import CommandError, NoReposFoundError
from ..render import render_examples_table


@click.command(name='examples')
@click.argument('category', required=False)
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def examples_handler(category, table, progress, **kwargs):
    """List contract examples (every src/main.nr).

    CATEGORY filters by a substring of the name or path.

    \b
    Examples:
        aztecmirror examples
        aztecmirror examples token --table
    """
    result = get_mirror().list_examples(category)
    if not result['success']:
        raise NoReposFoundError(result['message'])

    progress(result['message'])
    if table:
        render_examples_table(result)
        return None
    return result['examples']


@click.command(name='example')
@click.argument('name')
@click.option('--raw', is_flag=True, help='Print only the source code')
@add_common_options('verbose', 'quiet', 'format')
@standard_command
def example_handler(name, raw, progress, **kwargs):
    """Read the source of one contract example.

    An exact (case-insensitive) name wins over a partial match.

    \b
    Examples:
        aztecmirror example token
        aztecmirror example escrow --raw
    """
    result = get_mirror().read_example(name)
    if not result['success']:
        raise CommandError(result['message'])

    progress(result['message'])
    if raw:
        click.echo(result['content'], nl=False)
        return None
    return {**result['example'], 'content': result['content']}
