"""
Handles the 'search' and 'docs' commands.

Both stream one JSONL line per match. A precondition failure (nothing
cloned yet) exits 64 with the API's message.
"""

import click

from ..cli_utils import standard_command, add_common_options, get_mirror
from ..exit_codes import NoReposFoundError
from ..render import render_search_table


def _finish(result, table, progress):
    if not result['success']:
        raise NoReposFoundError(result['message'])

    progress(result['message'])
    if table:
        render_search_table(result)
        return None
    return result['results']


@click.command(name='search')
@click.argument('query')
@click.option('--pattern', '-p', 'file_pattern', default='*.nr', show_default=True,
              help="File glob, e.g. '*.ts' or '*.{nr,ts}'")
@click.option('--repo', '-r', default=None, help='Restrict to one repository')
@click.option('--max-results', '-n', default=30, show_default=True, type=int)
@click.option('--case-sensitive', is_flag=True, help='Match case exactly')
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def search_handler(query, file_pattern, repo, max_results, case_sensitive, table, progress, **kwargs):
    """Search mirrored source code with a regex.

    \b
    Examples:
        aztecmirror search "PrivateSet"
        aztecmirror search "fn transfer" --repo aztec-examples
        aztecmirror search "deployContract|Wallet" -p "*.ts" -n 10
    """
    result = get_mirror().search_code(
        query, file_pattern=file_pattern, repo=repo,
        max_results=max_results, case_sensitive=case_sensitive,
    )
    return _finish(result, table, progress)


@click.command(name='docs')
@click.argument('query')
@click.option('--section', '-s', default=None,
              help='Docs section, e.g. tutorials, concepts, developers, reference')
@click.option('--max-results', '-n', default=20, show_default=True, type=int)
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def docs_handler(query, section, max_results, table, progress, **kwargs):
    """Search the Aztec documentation.

    \b
    Examples:
        aztecmirror docs "private state"
        aztecmirror docs "note" --section tutorials
    """
    result = get_mirror().search_docs(query, section=section, max_results=max_results)
    return _finish(result, table, progress)
