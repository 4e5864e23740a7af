"""
Handles the 'status' command for displaying clone state.
"""

import click

from ..cli_utils import standard_command, add_common_options, get_mirror
from ..render import render_status_table


@click.command(name='status')
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def status_handler(table, progress, **kwargs):
    """Show which repositories are cloned and at which commit.

    \b
    Examples:
        aztecmirror status
        aztecmirror status --table
    """
    status = get_mirror().status()
    progress(status['message'])

    if table:
        render_status_table(status)
        return None

    return [
        {**repo, 'repos_dir': status['repos_dir']}
        for repo in status['repos']
    ]
