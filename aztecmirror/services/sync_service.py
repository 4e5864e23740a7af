"""
Sync service for aztecmirror.

Runs the checkout engine over the configured repositories in a fixed
order. The monorepo goes first because the companion interpreter's
compatible commit is read from the monorepo's own dependency pin; the
rest follow sequentially.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence

from ..config import Settings
from ..domain import RepositoryDescriptor, SyncOutcome, SyncReport, StatusReport
from .. import registry
from .checkout_service import CheckoutService, CloneError
from ..infra.git_client import GitCommandError

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    """Options for a sync run."""
    force: bool = False
    repositories: Optional[Sequence[str]] = None   # None = all configured
    version: Optional[str] = None                  # None = settings.default_version


class SyncService:
    """
    Orchestrates clone/update across all mirrored repositories.

    Example:
        service = SyncService(settings)
        report = service.sync(SyncOptions(version="v2.0.0"))
        for outcome in report.outcomes:
            print(outcome.name, outcome.message)
    """

    def __init__(
        self,
        settings: Settings,
        checkout_service: Optional[CheckoutService] = None,
        descriptors: Optional[Callable[[Optional[str]], List[RepositoryDescriptor]]] = None,
    ):
        """
        Initialize SyncService.

        Args:
            settings: Resolved settings
            checkout_service: Clone/update engine (creates one if None)
            descriptors: Registry lookup taking a version (registry.list_descriptors if None)
        """
        self.settings = settings
        self.checkout = checkout_service or CheckoutService(settings)
        self.descriptors = descriptors or registry.list_descriptors

    def sync(
        self,
        options: Optional[SyncOptions] = None,
        on_outcome: Optional[Callable[[SyncOutcome], None]] = None,
    ) -> SyncReport:
        """
        Clone missing repositories and update existing ones.

        Order: monorepo, then companion-namespace repositories (the
        interpreter pinned to the monorepo's recorded commit when one is
        found), then everything else in registry order.

        Args:
            options: Filter, version and force flag
            on_outcome: Called with each outcome as soon as it is recorded
        """
        options = options or SyncOptions()
        version = options.version or self.settings.default_version
        report = SyncReport(version=version, repos_dir=str(self.settings.repos_dir))

        selected = self.descriptors(version)
        if options.repositories is not None:
            wanted = set(options.repositories)
            selected = [d for d in selected if d.name in wanted]

        def record(outcome: SyncOutcome) -> None:
            report.outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(outcome)

        if not selected:
            report.message = "No repositories matched the specified names"
            return report

        monorepo = next((d for d in selected if d.name == registry.MONOREPO_NAME), None)
        companions = [
            d for d in selected
            if d is not monorepo and d.belongs_to(registry.COMPANION_NAMESPACE)
        ]
        others = [d for d in selected if d is not monorepo and d not in companions]

        if monorepo is not None:
            record(self._materialize(monorepo, options.force))

        pin = self.checkout.dependency_pin(registry.MONOREPO_NAME, registry.COMPANION_PIN_PATH)
        if pin:
            logger.info(f"{registry.MONOREPO_NAME} pins {registry.COMPANION_INTERPRETER_NAME} at {pin[:7]}")

        for descriptor in companions:
            if descriptor.name == registry.COMPANION_INTERPRETER_NAME and pin:
                outcome = self._materialize(descriptor.pinned_to_commit(pin), options.force)
                record(self._mark_pinned(outcome))
            else:
                record(self._materialize(descriptor, options.force))

        for descriptor in others:
            record(self._materialize(descriptor, options.force))

        if report.success:
            report.message = (
                f"Successfully synced {len(report.outcomes)} repositories to {self.settings.repos_dir}"
            )
        else:
            report.message = (
                f"Some repositories failed to sync ({len(report.failed)} of {len(report.outcomes)})"
            )
        return report

    def _materialize(self, descriptor: RepositoryDescriptor, force: bool) -> SyncOutcome:
        try:
            outcome = self.checkout.materialize(descriptor, force)
        except (CloneError, GitCommandError, OSError) as e:
            logger.warning(f"{descriptor.name}: {e}")
            return SyncOutcome.failure(descriptor.name, str(e))

        if outcome.ok:
            logger.info(f"{descriptor.name}: {outcome.message}")
        return outcome

    def _mark_pinned(self, outcome: SyncOutcome) -> SyncOutcome:
        """Record that the interpreter's ref came from the monorepo, not the registry."""
        if not outcome.ok:
            return replace(outcome, pinned_by=registry.MONOREPO_NAME)
        return replace(
            outcome,
            pinned_by=registry.MONOREPO_NAME,
            message=f"{outcome.message} [commit from {registry.MONOREPO_NAME} {registry.COMPANION_PIN_PATH}]",
        )

    def status(self) -> StatusReport:
        """Clone state and current commit of every configured repository."""
        descriptors = self.descriptors(self.settings.default_version)
        return StatusReport(
            repos_dir=str(self.settings.repos_dir),
            repos=self.checkout.statuses(descriptors),
        )
