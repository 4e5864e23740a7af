"""
Handles the 'sync' command: clone missing repositories, update the rest.

Default output is one JSONL line per repository; --table renders a table.
Exits 71 when some repositories failed and 64 when no name matched.
"""

import click

from ..cli_utils import standard_command, add_common_options, emit, get_mirror
from ..exit_codes import NoReposFoundError, PartialSuccessError
from ..progress import LogLevel
from ..render import render_sync_table


@click.command(name='sync')
@click.option('--force', is_flag=True, help='Delete and re-clone existing checkouts')
@click.option('--repo', 'repos', multiple=True, help='Only sync this repository (repeatable)')
@click.option('--version', 'version', default=None, help='Aztec release tag (default: configured version)')
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def sync_handler(force, repos, version, table, progress, format=None, **kwargs):
    """Clone or update the mirrored repositories.

    \b
    The monorepo is synced first; the noir checkout then follows the
    commit recorded in aztec-packages at noir/noir-repo.

    \b
    Examples:
        aztecmirror sync                          # Everything, default version
        aztecmirror sync --version v2.0.0         # Pin Aztec repos to a release
        aztecmirror sync --repo noir --force      # Re-clone one repository
    """
    mirror = get_mirror()

    def report(outcome):
        level = LogLevel.SUCCESS if outcome.ok else LogLevel.ERROR
        progress(f"{outcome.name}: {outcome.message}", level=level)

    with progress.task("Syncing repositories"):
        result = mirror.sync(force=force, repos=list(repos) or None, version=version, on_outcome=report)

    if not result['repos']:
        raise NoReposFoundError(result['message'])

    if table:
        render_sync_table(result)
    elif not kwargs.get('quiet'):
        emit(
            ({**repo, 'version': result['version']} for repo in result['repos']),
            format,
        )

    if not result['success']:
        failed = sum(1 for repo in result['repos'] if not repo['ok'])
        raise PartialSuccessError(
            result['message'],
            succeeded=len(result['repos']) - failed,
            failed=failed,
        )

    progress.success(result['message'])
    return None
