"""
Infrastructure layer for aztecmirror.

Contains abstractions for external processes:
- GitClient: git command execution
- RipgrepClient: ripgrep text search

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitCommit, GitCommandError
from .search_client import RipgrepClient, SearchToolError, escape_shell_query

__all__ = [
    'GitClient',
    'GitCommit',
    'GitCommandError',
    'RipgrepClient',
    'SearchToolError',
    'escape_shell_query',
]
