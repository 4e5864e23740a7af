"""
Domain layer for aztecmirror.

Contains pure domain objects with no I/O or side effects:
- RepositoryDescriptor: What to mirror and at which ref
- SyncOutcome / SyncReport: Results of a sync
- SearchResult / FileInfo: Matches and discovered examples

These objects are immutable where possible and provide
serialization methods for JSON output.
"""

from .repository import RepositoryDescriptor, RefKind, SearchPatterns
from .operation import SyncAction, SyncOutcome, SyncReport, RepoStatus, StatusReport
from .search import SearchResult, FileInfo, FileCategory, classify, repository_of

__all__ = [
    'RepositoryDescriptor',
    'RefKind',
    'SearchPatterns',
    'SyncAction',
    'SyncOutcome',
    'SyncReport',
    'RepoStatus',
    'StatusReport',
    'SearchResult',
    'FileInfo',
    'FileCategory',
    'classify',
    'repository_of',
]
