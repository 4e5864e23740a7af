"""
Sync result domain objects for aztecmirror.

Success is carried by an explicit discriminant on each outcome; the
message is for display only and is never parsed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class SyncAction(Enum):
    """What happened to one repository during a sync."""
    CLONED = "cloned"
    RECLONED = "recloned"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """
    Result of materializing one repository.

    The message names the repository, the resolved ref and its kind, and
    the sparse paths when sparse. It is the audit trail of what was fetched.
    """
    name: str
    action: SyncAction
    message: str
    ok: bool = True
    commit: Optional[str] = None
    ref: Optional[str] = None
    ref_kind: Optional[str] = None
    pinned_by: Optional[str] = None   # set when the ref came from another repo's dependency pin
    error: Optional[str] = None

    @classmethod
    def failure(cls, name: str, error: str, message: Optional[str] = None) -> 'SyncOutcome':
        return cls(
            name=name,
            action=SyncAction.FAILED,
            message=message or f"Error: {error}",
            ok=False,
            error=error,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'name': self.name,
            'status': self.message,
            'action': self.action.value,
            'ok': self.ok,
        }
        if self.commit:
            result['commit'] = self.commit
        if self.ref:
            result['ref'] = self.ref
            result['ref_kind'] = self.ref_kind
        if self.pinned_by:
            result['pinned_by'] = self.pinned_by
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class SyncReport:
    """Batch result of a sync across repositories."""
    version: str
    repos_dir: str
    outcomes: List[SyncOutcome] = field(default_factory=list)
    message: str = ""

    @property
    def success(self) -> bool:
        return bool(self.outcomes) and all(o.ok for o in self.outcomes)

    @property
    def failed(self) -> List[SyncOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'message': self.message,
            'version': self.version,
            'repos_dir': self.repos_dir,
            'repos': [o.to_dict() for o in self.outcomes],
        }


@dataclass(frozen=True)
class RepoStatus:
    """On-disk state of one configured repository."""
    name: str
    description: str
    cloned: bool
    commit: Optional[str] = None
    tag: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'name': self.name,
            'description': self.description,
            'cloned': self.cloned,
        }
        if self.commit:
            result['commit'] = self.commit
        if self.tag:
            result['tag'] = self.tag
        return result


@dataclass
class StatusReport:
    """Status of every configured repository."""
    repos_dir: str
    repos: List[RepoStatus] = field(default_factory=list)

    @property
    def cloned_count(self) -> int:
        return sum(1 for r in self.repos if r.cloned)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'repos_dir': self.repos_dir,
            'repos': [r.to_dict() for r in self.repos],
        }
