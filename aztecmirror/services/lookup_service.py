"""
Lookup service for aztecmirror.

Reads files out of the mirror. Nothing here raises for a missing or
unreadable file; the caller gets None.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from ..config import Settings
from ..domain import FileInfo
from .search_service import SearchService

logger = logging.getLogger(__name__)


class LookupService:
    """
    File and example reader.

    Example:
        lookup = LookupService(settings)
        info, content = lookup.read_example("token")
    """

    def __init__(self, settings: Settings, search_service: Optional[SearchService] = None):
        self.settings = settings
        self.search = search_service or SearchService(settings)

    def resolve(self, path: str) -> Path:
        """Absolute paths are used as-is; relative ones hang off the mirror root."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.settings.repos_dir / candidate

    def read_file(self, path: str) -> Optional[str]:
        """
        Read a whole file as UTF-8.

        Args:
            path: Absolute, or relative to the mirror root

        Returns:
            File content, or None if missing or unreadable
        """
        full_path = self.resolve(path)
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cannot read {full_path}: {e}")
            return None

    def read_example(self, name: str) -> Tuple[Optional[FileInfo], Optional[str]]:
        """Resolve an example by name and read its entry point."""
        example = self.search.find_example(name)
        if example is None:
            return None, None
        return example, self.read_file(example.path)
