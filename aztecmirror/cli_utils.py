"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
from functools import wraps
from typing import Generator, Optional

import click

from .progress import get_progress
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import FORMATS, format_output, get_format_from_env


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Progress reporting on stderr
    - Data on stdout as JSONL (or -f json/yaml)
    - --verbose/-v also turns on debug logging
    - --quiet/-q suppresses data output
    - Consistent error handling and exit codes

    A command returning None has printed its own output (e.g. a table).
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.get('verbose', False)
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format') or get_format_from_env('jsonl')

        if verbose:
            logging.getLogger('aztecmirror').setLevel(logging.DEBUG)

        progress = get_progress(enabled=verbose or None)
        kwargs['progress'] = progress

        try:
            result = func(*args, **kwargs)

            if quiet or result is None:
                pass
            elif isinstance(result, dict):
                for line in format_output([result], output_format):
                    print(line, flush=True)
            elif isinstance(result, (list, tuple, Generator)):
                for line in format_output(result, output_format):
                    print(line, flush=True)
            else:
                print(result, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            progress.error(str(e))
            if not quiet:
                _print_error(e, exit_code=e.exit_code)
            sys.exit(e.exit_code)
        except Exception as e:
            progress.error(f"Command failed: {e}")
            if not quiet:
                _print_error(e)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def _print_error(exc: Exception, exit_code: Optional[int] = None) -> None:
    """One JSON error object on stdout, so piped consumers see the failure."""
    error = {"error": str(exc), "type": type(exc).__name__}
    if exit_code is not None:
        error["exit_code"] = exit_code
    for counter in ("succeeded", "failed"):
        if hasattr(exc, counter):
            error[counter] = getattr(exc, counter)
    print(json.dumps(error, ensure_ascii=False), flush=True)


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Show progress and debug logging'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output, show only progress'),
    'format': click.option('-f', '--format',
                           type=click.Choice(list(FORMATS)),
                           help='Output format (default: jsonl, or from AZTECMIRROR_FORMAT env)'),
    'table': click.option('--table', is_flag=True,
                          help='Display as a formatted table'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator


def emit(items, output_format: str = 'jsonl'):
    """Print items in the chosen format before a command exits non-zero."""
    for line in format_output(items, output_format or get_format_from_env('jsonl')):
        print(line, flush=True)


def get_mirror():
    """AztecMirror built from the process settings."""
    from .api import AztecMirror
    return AztecMirror()
