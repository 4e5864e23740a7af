"""
Handles the 'read' command: print any file from the mirror.
"""

import click

from ..cli_utils import standard_command, add_common_options, get_mirror
from ..exit_codes import CommandError


@click.command(name='read')
@click.argument('path')
@click.option('--json', 'as_json', is_flag=True, help='Wrap the content in a JSON object')
@add_common_options('verbose', 'quiet', 'format')
@standard_command
def read_handler(path, as_json, progress, **kwargs):
    """Print a mirrored file.

    PATH is absolute or relative to the repos directory.

    \b
    Examples:
        aztecmirror read aztec-packages/docs/docs/index.md
        aztecmirror read noir/noir_stdlib/src/hash/mod.nr --json
    """
    result = get_mirror().read_file(path)
    if not result['success']:
        raise CommandError(result['message'])

    if as_json:
        return {'path': result['path'], 'category': result['category'], 'content': result['content']}

    click.echo(result['content'], nl=False)
    return None
