"""
Checkout service for aztecmirror.

Materializes one RepositoryDescriptor on disk: clone, update, or
re-clone. Whether a repository is cloned is decided only by the presence
of its .git directory; there is no separate state file.
"""

import logging
import re
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import Settings
from ..domain import RepositoryDescriptor, RefKind, SyncAction, SyncOutcome, RepoStatus
from ..infra.git_client import GitClient, GitCommandError

logger = logging.getLogger(__name__)

# "<mode> commit <hash>\t<path>" as printed by git ls-tree for a submodule
_PIN_LINE = re.compile(r'^\d+\s+commit\s+([0-9a-fA-F]{7,40})\s')

SPARSE_CLONE_FLAGS = ("--filter=blob:none", "--sparse")


class CloneError(Exception):
    """A clone step failed and the checkout could not be materialized."""

    def __init__(self, name: str, detail: str):
        self.name = name
        self.detail = detail
        super().__init__(f"Failed to clone {name}: {detail}")


class CheckoutService:
    """
    Clone/update engine for mirrored repositories.

    Example:
        service = CheckoutService(settings)
        outcome = service.materialize(lookup_by_name("noir"))
        print(outcome.message)   # "Cloned noir @ master (branch, sparse: docs, ...)"
    """

    def __init__(self, settings: Settings, git_client: Optional[GitClient] = None):
        self.settings = settings
        self.git = git_client or GitClient(timeout=settings.git_timeout)

    @property
    def root(self) -> Path:
        return self.settings.repos_dir

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def repo_path(self, name: str) -> Path:
        return self.root / name

    def is_cloned(self, name: str) -> bool:
        """Single source of truth for 'has this repository been cloned'."""
        return self.git.is_git_repo(str(self.repo_path(name)))

    def _remove(self, path: Path) -> None:
        logger.info(f"Removing {path}")
        shutil.rmtree(path, ignore_errors=False)

    # === STATE ===

    def current_commit(self, name: str, full: bool = False) -> Optional[str]:
        """HEAD commit of a checkout, shortened to 7 characters unless full."""
        if not self.is_cloned(name):
            return None
        try:
            commit = self.git.head_commit(str(self.repo_path(name)))
        except GitCommandError:
            return None
        if commit is None:
            return None
        return commit.hash if full else commit.short

    def current_tag(self, name: str) -> Optional[str]:
        """Tag at HEAD, or None when HEAD is not exactly at a tag."""
        if not self.is_cloned(name):
            return None
        return self.git.exact_tag(str(self.repo_path(name)))

    def needs_reclone(self, descriptor: RepositoryDescriptor) -> bool:
        """
        Whether the checkout must be (re)created to honour the descriptor.

        Branch-tracking checkouts never need it; pinned ones do when HEAD
        is not at the pinned tag or commit.
        """
        if not self.is_cloned(descriptor.name):
            return True

        if descriptor.commit and not descriptor.tag:
            head = self.current_commit(descriptor.name, full=True)
            return head is None or not head.startswith(descriptor.commit)

        if descriptor.tag:
            return self.current_tag(descriptor.name) != descriptor.tag

        return False

    def statuses(self, descriptors: Sequence[RepositoryDescriptor]) -> List[RepoStatus]:
        result = []
        for descriptor in descriptors:
            cloned = self.is_cloned(descriptor.name)
            result.append(RepoStatus(
                name=descriptor.name,
                description=descriptor.description,
                cloned=cloned,
                commit=self.current_commit(descriptor.name) if cloned else None,
                tag=self.current_tag(descriptor.name) if cloned else None,
            ))
        return result

    def dependency_pin(self, name: str, pin_path: str) -> Optional[str]:
        """
        Commit recorded for an embedded repository inside a checkout.

        Returns None when the checkout is missing, git fails, or the
        output is not a submodule entry.
        """
        if not self.is_cloned(name):
            return None
        try:
            output = self.git.ls_tree(str(self.repo_path(name)), pin_path)
        except GitCommandError as e:
            logger.debug(f"Could not read dependency pin {pin_path} in {name}: {e}")
            return None

        for line in (output or "").splitlines():
            match = _PIN_LINE.match(line)
            if match:
                return match.group(1)
        return None

    # === MATERIALIZE ===

    def materialize(self, descriptor: RepositoryDescriptor, force: bool = False) -> SyncOutcome:
        """
        Clone, update, or re-clone one repository.

        Args:
            descriptor: What to mirror
            force: Remove any existing checkout first

        Returns:
            SyncOutcome. Update failures come back as a failed outcome.

        Raises:
            CloneError: a clone step failed
        """
        self.ensure_root()
        name = descriptor.name
        path = self.repo_path(name)
        recloning = False

        if force and path.exists():
            self._remove(path)
            recloning = True
        elif self.is_cloned(name) and self.needs_reclone(descriptor):
            logger.info(f"{name} is not at {descriptor.ref_kind.value} {descriptor.ref}, re-cloning")
            self._remove(path)
            recloning = True

        if self.is_cloned(name):
            return self.update(descriptor)

        if path.exists():
            # Leftover from an interrupted clone; git refuses a non-empty target
            self._remove(path)

        message = self._clone(descriptor, path)
        return SyncOutcome(
            name=name,
            action=SyncAction.RECLONED if recloning else SyncAction.CLONED,
            message=message,
            commit=self.current_commit(name),
            ref=descriptor.ref,
            ref_kind=descriptor.ref_kind.value,
        )

    def _clone(self, descriptor: RepositoryDescriptor, path: Path) -> str:
        name = descriptor.name
        repo = str(path)
        kind = descriptor.ref_kind

        try:
            if descriptor.is_sparse:
                if kind in (RefKind.TAG, RefKind.COMMIT):
                    self.git.clone(descriptor.url, repo, [*SPARSE_CLONE_FLAGS, "--no-checkout"])
                    self.git.sparse_checkout_set(repo, descriptor.sparse)
                    self._fetch_and_checkout(repo, descriptor)
                else:
                    flags = [*SPARSE_CLONE_FLAGS, "--depth=1"]
                    if descriptor.branch:
                        flags += ["-b", descriptor.branch]
                    self.git.clone(descriptor.url, repo, flags)
                    self.git.sparse_checkout_set(repo, descriptor.sparse)
            else:
                if kind == RefKind.TAG:
                    self.git.clone(descriptor.url, repo, ["--no-checkout"])
                    self._fetch_and_checkout(repo, descriptor)
                elif kind == RefKind.COMMIT:
                    self.git.clone(descriptor.url, repo, ["--depth=1", "--no-checkout"])
                    self._fetch_and_checkout(repo, descriptor)
                else:
                    flags = ["--depth=1"]
                    if descriptor.branch:
                        flags += ["-b", descriptor.branch]
                    self.git.clone(descriptor.url, repo, flags)
        except GitCommandError as e:
            raise CloneError(name, str(e)) from e

        ref = descriptor.ref or "default branch"
        if descriptor.is_sparse:
            message = f"Cloned {name} @ {ref} ({kind.value}, sparse: {', '.join(descriptor.sparse)})"
        else:
            message = f"Cloned {name} @ {ref} ({kind.value})"
        logger.info(message)
        return message

    def _fetch_and_checkout(self, repo: str, descriptor: RepositoryDescriptor) -> None:
        """Fetch exactly the pinned tag or commit, then check it out."""
        if descriptor.tag:
            tag = descriptor.tag
            self.git.fetch(repo, ["--depth=1", "origin", f"refs/tags/{tag}:refs/tags/{tag}"])
            self.git.checkout(repo, tag)
        else:
            self.git.fetch(repo, ["origin", descriptor.commit])
            self.git.checkout(repo, descriptor.commit)

    # === UPDATE ===

    def update(self, descriptor: RepositoryDescriptor) -> SyncOutcome:
        """
        Bring an existing checkout up to date.

        Branch-tracking checkouts are fetched shallowly and hard-reset to
        origin/HEAD, falling back to a plain pull.

        A tag or commit checkout already at its pin is left alone: it is
        neither fetched nor reset, since resetting to origin/HEAD would move
        it off the pin. Re-pinning happens through a re-clone instead.
        """
        name = descriptor.name
        if not self.is_cloned(name):
            raise CloneError(name, f"Repository {name} is not cloned")

        repo = str(self.repo_path(name))

        if descriptor.is_pinned and not self.needs_reclone(descriptor):
            return SyncOutcome(
                name=name,
                action=SyncAction.UPDATED,
                message=f"Updated {name} (already at {descriptor.ref_kind.value} {descriptor.ref})",
                commit=self.current_commit(name),
                ref=descriptor.ref,
                ref_kind=descriptor.ref_kind.value,
            )

        try:
            self.git.fetch(repo, ["--depth=1"])
            self.git.reset(repo, "--hard", "origin/HEAD")
        except GitCommandError as fetch_error:
            logger.debug(f"fetch/reset failed for {name}, trying pull: {fetch_error}")
            try:
                self.git.pull(repo)
            except GitCommandError as pull_error:
                logger.warning(f"Failed to update {name}: {pull_error}")
                return SyncOutcome.failure(
                    name, str(pull_error), message=f"Failed to update {name}: {pull_error}"
                )

        logger.info(f"Updated {name}")
        return SyncOutcome(
            name=name,
            action=SyncAction.UPDATED,
            message=f"Updated {name}",
            commit=self.current_commit(name),
            ref=descriptor.ref,
            ref_kind=descriptor.ref_kind.value,
        )
