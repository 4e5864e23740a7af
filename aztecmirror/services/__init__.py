"""
Service layer for aztecmirror.

Contains the logic that orchestrates domain objects and infrastructure:
- CheckoutService: Clone/update/re-clone of one repository
- SyncService: Ordered sync across the registry
- SearchService: Code, docs and example search
- LookupService: File and example reads

Services are the primary API for commands to use.
"""

from .checkout_service import CheckoutService, CloneError
from .sync_service import SyncService, SyncOptions
from .search_service import SearchService
from .lookup_service import LookupService

__all__ = [
    'CheckoutService',
    'CloneError',
    'SyncService',
    'SyncOptions',
    'SearchService',
    'LookupService',
]
