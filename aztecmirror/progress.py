"""
Progress reporting for aztecmirror commands.

Everything here writes to stderr; stdout carries JSONL data only.
"""

import os
import sys
import time
from contextlib import contextmanager
from enum import Enum
from typing import Optional

from rich.console import Console


class LogLevel(Enum):
    """Log levels for progress messages."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    SUCCESS = 4


STYLES = {
    LogLevel.DEBUG: ("  ", "dim"),
    LogLevel.INFO: ("", None),
    LogLevel.WARNING: ("⚠ ", "yellow"),
    LogLevel.ERROR: ("✗ ", "red"),
    LogLevel.SUCCESS: ("✓ ", "green"),
}


class ProgressReporter:
    """
    Per-repository progress on stderr.

    Shown when stderr is a terminal unless enabled is given explicitly.
    Errors are always shown.
    """

    def __init__(self, enabled: Optional[bool] = None, console: Optional[Console] = None):
        self.enabled = sys.stderr.isatty() if enabled is None else enabled
        self.console = console or Console(
            stderr=True,
            highlight=False,
            no_color=os.environ.get('NO_COLOR') is not None,
        )

    def _print(self, message: str, level: LogLevel) -> None:
        prefix, style = STYLES[level]
        self.console.print(f"{prefix}{message}", style=style, markup=False)

    def __call__(self, message: str, force: bool = False, level: LogLevel = LogLevel.INFO):
        if force or self.enabled:
            self._print(message, level)

    def error(self, message: str):
        self._print(f"ERROR: {message}", LogLevel.ERROR)

    def success(self, message: str):
        self(message, level=LogLevel.SUCCESS)

    @contextmanager
    def task(self, description: str):
        """Announce a long step and report its duration when it ends."""
        started = time.monotonic()
        self(f"{description}...")
        try:
            yield
        finally:
            self(f"Completed in {time.monotonic() - started:.1f}s", level=LogLevel.DEBUG)


_progress: Optional[ProgressReporter] = None


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Shared reporter. AZTECMIRROR_PROGRESS=0/1 overrides auto-detection
    when enabled is not given.
    """
    global _progress
    if enabled is None:
        env = os.environ.get('AZTECMIRROR_PROGRESS')
        if env in ('0', '1'):
            enabled = env == '1'
    if _progress is None or enabled is not None:
        _progress = ProgressReporter(enabled)
    return _progress
