"""
High-level Python API for aztecmirror.

Every operation returns a plain dict with `success` and `message` plus a
payload. Expected failures (nothing cloned, unknown example, missing
file) come back in-band as `success: False`; nothing here raises for them.

Example:
    import aztecmirror

    mirror = aztecmirror.AztecMirror()

    # Clone or update everything at the default version
    result = mirror.sync()
    print(result['message'])

    # Or just two repositories at a given release
    mirror.sync(repos=["aztec-packages", "noir"], version="v2.0.0")

    # Search contract code
    for match in mirror.search_code("PrivateSet", max_results=5)['results']:
        print(match['file'], match['line'])

    # Read an example contract
    print(mirror.read_example("token")['content'])

    # Low-level access to services
    mirror.sync_service
    mirror.search_service
"""

from typing import Any, Callable, Dict, List, Optional

import logging

from .config import Settings, get_settings
from .domain import SyncOutcome, classify
from .infra import GitClient, RipgrepClient
from .services import (
    CheckoutService, SyncService, SyncOptions, SearchService, LookupService,
)
from . import registry

logger = logging.getLogger(__name__)

SYNC_HINT = "Run aztec_sync_repos first."


class AztecMirror:
    """
    High-level API for aztecmirror.

    Wires the services from one Settings value. Pass settings explicitly
    to point at a different mirror root or default version.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        git_client: Optional[GitClient] = None,
        search_client: Optional[RipgrepClient] = None,
    ):
        """
        Initialize AztecMirror.

        Args:
            settings: Resolved settings (process settings if None)
            git_client: git wrapper (created from settings if None)
            search_client: rg wrapper (created from settings if None)
        """
        self._settings = settings or get_settings()

        self._checkout_service = CheckoutService(self._settings, git_client=git_client)
        self._sync_service = SyncService(self._settings, checkout_service=self._checkout_service)
        self._search_service = SearchService(self._settings, search_client=search_client)
        self._lookup_service = LookupService(self._settings, search_service=self._search_service)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def checkout_service(self) -> CheckoutService:
        return self._checkout_service

    @property
    def sync_service(self) -> SyncService:
        return self._sync_service

    @property
    def search_service(self) -> SearchService:
        return self._search_service

    @property
    def lookup_service(self) -> LookupService:
        return self._lookup_service

    def _any_cloned(self) -> bool:
        return any(self._checkout_service.is_cloned(name) for name in registry.list_names())

    # =========================================================================
    # SYNC
    # =========================================================================

    def sync(
        self,
        force: bool = False,
        repos: Optional[List[str]] = None,
        version: Optional[str] = None,
        on_outcome: Optional[Callable[[SyncOutcome], None]] = None,
    ) -> Dict[str, Any]:
        """
        Clone missing repositories and update existing ones.

        Args:
            force: Delete and re-clone existing checkouts
            repos: Only these repository names (all if None)
            version: Release tag for primary-namespace repos (default version if None)
            on_outcome: Per-repository callback, for progress display

        Returns:
            Dict with success, message, version, repos_dir and per-repo outcomes
        """
        report = self._sync_service.sync(
            SyncOptions(force=force, repositories=repos, version=version),
            on_outcome=on_outcome,
        )
        return report.to_dict()

    def status(self) -> Dict[str, Any]:
        """Clone state and short commit of every configured repository."""
        report = self._sync_service.status()
        result = report.to_dict()
        result['success'] = True
        result['message'] = f"{report.cloned_count} of {len(report.repos)} repositories cloned"
        return result

    # =========================================================================
    # SEARCH
    # =========================================================================

    def search_code(
        self,
        query: str,
        file_pattern: str = "*.nr",
        repo: Optional[str] = None,
        max_results: int = 30,
        case_sensitive: bool = False,
    ) -> Dict[str, Any]:
        """
        Search source files with a regex.

        Fails in-band when the named repository, or every repository, is
        not cloned yet.
        """
        if repo and not self._checkout_service.is_cloned(repo):
            return {
                'success': False,
                'results': [],
                'message': f"Repository '{repo}' is not cloned. {SYNC_HINT}",
            }

        if not self._any_cloned():
            return {
                'success': False,
                'results': [],
                'message': f"No repositories are cloned. {SYNC_HINT}",
            }

        results = self._search_service.search_code(
            query, file_pattern=file_pattern, repo=repo,
            max_results=max_results, case_sensitive=case_sensitive,
        )
        return {
            'success': True,
            'results': [r.to_dict() for r in results],
            'message': f"Found {len(results)} matches" if results else "No matches found",
        }

    def search_docs(
        self,
        query: str,
        section: Optional[str] = None,
        max_results: int = 20,
    ) -> Dict[str, Any]:
        """Search the monorepo's markdown documentation."""
        if not self._checkout_service.is_cloned(registry.MONOREPO_NAME):
            return {
                'success': False,
                'results': [],
                'message': (
                    f"{registry.MONOREPO_NAME} is not cloned. "
                    f"Run aztec_sync_repos first to get documentation."
                ),
            }

        results = self._search_service.search_docs(query, section=section, max_results=max_results)
        return {
            'success': True,
            'results': [r.to_dict() for r in results],
            'message': (
                f"Found {len(results)} documentation matches" if results
                else "No documentation matches found"
            ),
        }

    # =========================================================================
    # EXAMPLES AND FILES
    # =========================================================================

    def list_examples(self, category: Optional[str] = None) -> Dict[str, Any]:
        """List contract examples, optionally filtered by a category substring."""
        if not self._any_cloned():
            return {
                'success': False,
                'examples': [],
                'message': f"No repositories are cloned. {SYNC_HINT}",
            }

        examples = self._search_service.list_examples(category)
        if examples:
            message = f"Found {len(examples)} example contracts"
        elif category:
            message = f"No examples found matching category '{category}'"
        else:
            message = "No examples found"

        return {
            'success': True,
            'examples': [e.to_dict() for e in examples],
            'message': message,
        }

    def read_example(self, name: str) -> Dict[str, Any]:
        """Read the entry point of a named example contract."""
        example, content = self._lookup_service.read_example(name)

        if example is None:
            message = f"Example '{name}' not found. Use aztec_list_examples to see available examples."
            suggestions = self._search_service.suggest_examples(name)
            if suggestions:
                message += f" Did you mean: {', '.join(suggestions)}?"
            return {'success': False, 'message': message}

        if not content:
            return {
                'success': False,
                'example': example.to_dict(),
                'message': f"Could not read example file: {example.path}",
            }

        return {
            'success': True,
            'example': example.to_dict(),
            'content': content,
            'message': f"Read {example.name} from {example.repo}",
        }

    def read_file(self, path: str) -> Dict[str, Any]:
        """Read any file, absolute or relative to the mirror root."""
        content = self._lookup_service.read_file(path)

        if not content:
            return {
                'success': False,
                'message': (
                    f"File not found: {path}. "
                    f"Make sure the path is relative to the repos directory."
                ),
            }

        return {
            'success': True,
            'path': path,
            'category': classify(path).value,
            'content': content,
            'message': f"Read file: {path}",
        }


# Convenience function for quick access
def create(settings: Optional[Settings] = None, **kwargs) -> AztecMirror:
    """
    Create an AztecMirror instance.

    Convenience function for:
        mirror = aztecmirror.create()
    """
    return AztecMirror(settings=settings, **kwargs)
