"""
aztecmirror - A local, version-pinned mirror of the Aztec and Noir repositories.

aztecmirror clones the Aztec monorepo, its examples and the Noir toolchain
into one directory, keeps them at a chosen release, and answers code,
documentation and example queries against the checkouts.

Quick Start:
    import aztecmirror

    mirror = aztecmirror.AztecMirror()

    # Clone or update (monorepo first; noir follows its pinned commit)
    mirror.sync(version="v3.0.0-devnet.6-patch.1")

    # Search contract code
    mirror.search_code("PrivateSet", repo="aztec-packages")

    # Documentation and examples
    mirror.search_docs("note discovery", section="tutorials")
    mirror.list_examples("token")
    mirror.read_example("token")

Domain Objects:
    RepositoryDescriptor - What to mirror and at which ref
    SyncOutcome / SyncReport - Results of a sync
    SearchResult / FileInfo - Matches and discovered examples

Services:
    CheckoutService - Clone/update/re-clone of one repository
    SyncService - Ordered sync across the registry
    SearchService - ripgrep search with a manual fallback
    LookupService - File and example reads
"""

__version__ = "0.1.0"

# High-level API
from .api import AztecMirror, create

# Domain objects
from .domain import (
    RepositoryDescriptor,
    RefKind,
    SyncOutcome,
    SyncReport,
    SearchResult,
    FileInfo,
)

# Services (for advanced use)
from .services import (
    CheckoutService,
    SyncService,
    SyncOptions,
    SearchService,
    LookupService,
)

# Registry
from .registry import list_descriptors, lookup_by_name

# Configuration
from .config import Settings, load_config, get_settings

__all__ = [
    # Version
    "__version__",
    # High-level API
    "AztecMirror",
    "create",
    # Domain objects
    "RepositoryDescriptor",
    "RefKind",
    "SyncOutcome",
    "SyncReport",
    "SearchResult",
    "FileInfo",
    # Services
    "CheckoutService",
    "SyncService",
    "SyncOptions",
    "SearchService",
    "LookupService",
    # Registry
    "list_descriptors",
    "lookup_by_name",
    # Configuration
    "Settings",
    "load_config",
    "get_settings",
]
