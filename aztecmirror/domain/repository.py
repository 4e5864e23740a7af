"""
Repository descriptor domain object for aztecmirror.

RepositoryDescriptor is the static fetch intent for one mirrored repository.
It is immutable: version stamping and commit pinning return new descriptors.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Dict, Any, Tuple


class RefKind(Enum):
    """Kind of git ref a descriptor resolves to."""
    TAG = "tag"
    BRANCH = "branch"
    COMMIT = "commit"


@dataclass(frozen=True)
class SearchPatterns:
    """File globs used to categorize a repository's content (display only)."""
    code: Tuple[str, ...] = ()
    docs: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {'code': list(self.code), 'docs': list(self.docs)}


@dataclass(frozen=True)
class RepositoryDescriptor:
    """
    Identity and fetch intent for one mirrored repository.

    At most one ref is honoured. When choosing how to clone, the
    precedence is tag > commit > branch; a descriptor with none of them
    follows the remote's default branch.
    """
    name: str
    url: str
    description: str = ""
    tag: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None
    sparse: Tuple[str, ...] = ()
    search_patterns: SearchPatterns = field(default_factory=SearchPatterns)

    @property
    def is_sparse(self) -> bool:
        return len(self.sparse) > 0

    @property
    def is_pinned(self) -> bool:
        """True when the descriptor names an immutable ref (tag or commit)."""
        return bool(self.tag or self.commit)

    @property
    def ref_kind(self) -> RefKind:
        if self.tag:
            return RefKind.TAG
        if self.commit:
            return RefKind.COMMIT
        return RefKind.BRANCH

    @property
    def ref(self) -> Optional[str]:
        """The ref value matching ref_kind (None means the default branch)."""
        if self.tag:
            return self.tag
        if self.commit:
            return self.commit
        return self.branch

    def belongs_to(self, namespace: str) -> bool:
        """Whether the source URL lives under the given owner/organization."""
        return f"/{namespace}/" in self.url or f":{namespace}/" in self.url

    def with_tag(self, tag: Optional[str]) -> 'RepositoryDescriptor':
        return replace(self, tag=tag)

    def pinned_to_commit(self, commit: str) -> 'RepositoryDescriptor':
        """Pin to an exact commit, dropping branch tracking."""
        return replace(self, commit=commit, branch=None)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'name': self.name,
            'url': self.url,
            'description': self.description,
            'ref': self.ref,
            'ref_kind': self.ref_kind.value,
        }
        if self.tag:
            result['tag'] = self.tag
        if self.branch:
            result['branch'] = self.branch
        if self.commit:
            result['commit'] = self.commit
        if self.sparse:
            result['sparse'] = list(self.sparse)
        if self.search_patterns.code or self.search_patterns.docs:
            result['search_patterns'] = self.search_patterns.to_dict()
        return result
