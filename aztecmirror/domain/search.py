"""
Search domain objects for aztecmirror.

SearchResult is one line match in the mirror; FileInfo is one discovered
example file. Both are pure values with to_dict() for JSON output.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional, Dict, Any


class FileCategory(Enum):
    """Coarse classification of a mirrored file."""
    CONTRACT = "contract"
    TEST = "test"
    SOURCE = "source"
    DOCUMENTATION = "documentation"
    OTHER = "other"


def classify(path: str) -> FileCategory:
    """Classify a file by extension and path. No I/O."""
    suffix = PurePosixPath(path).suffix.lower()
    lower_path = path.lower()

    if suffix == ".nr":
        if "test" in lower_path:
            return FileCategory.TEST
        return FileCategory.CONTRACT
    if suffix in (".ts", ".tsx"):
        return FileCategory.SOURCE
    if suffix in (".md", ".mdx"):
        return FileCategory.DOCUMENTATION
    return FileCategory.OTHER


def repository_of(relative_path: str) -> str:
    """Owning repository: the first segment of a mirror-relative path."""
    return relative_path.replace("\\", "/").split("/", 1)[0]


@dataclass(frozen=True)
class SearchResult:
    """A single match."""
    file: str                  # relative to the mirror root
    content: str
    repo: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'file': self.file,
            'content': self.content,
            'repo': self.repo,
        }
        if self.line is not None:
            result['line'] = self.line
        return result


@dataclass(frozen=True)
class FileInfo:
    """A discovered example or file."""
    path: str                  # relative to the mirror root
    name: str
    repo: str
    category: FileCategory = FileCategory.OTHER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'name': self.name,
            'repo': self.repo,
            'category': self.category.value,
        }
