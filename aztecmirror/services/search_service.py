"""
Search service for aztecmirror.

Searches the checked-out tree directly; there is no index. ripgrep is
the fast path. When it cannot run, a manual walk-and-regex scan produces
the same result shape.
"""

import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from rapidfuzz import fuzz, process

from ..config import Settings
from ..domain import SearchResult, FileInfo, FileCategory, repository_of
from ..infra.search_client import RipgrepClient, SearchToolError
from .. import registry

logger = logging.getLogger(__name__)

# Directories never scanned by the manual fallback
SKIP_DIRECTORIES = {".git", "node_modules"}

EXAMPLE_ENTRY_POINT = ("src", "main.nr")
DOCS_PATTERN = "*.{md,mdx}"

# path:line:content
_RG_LINE = re.compile(r'^(.+?):(\d+):(.*)$')
_BRACES = re.compile(r'\{([^{}]*)\}')


def expand_braces(pattern: str) -> List[str]:
    """Expand `{a,b}` alternatives: '*.{md,mdx}' -> ['*.md', '*.mdx']."""
    match = _BRACES.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def compile_query(query: str, case_sensitive: bool = False) -> re.Pattern:
    """Compile a query as a regex, or as a literal when it is not valid regex."""
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(query, flags)
    except re.error:
        logger.debug(f"Query is not a valid regex, matching literally: {query!r}")
        return re.compile(re.escape(query), flags)


class SearchService:
    """
    Code, documentation and example search over the mirror root.

    Example:
        service = SearchService(settings)
        for match in service.search_code("PrivateSet", file_pattern="*.nr", max_results=5):
            print(match.file, match.line)
    """

    def __init__(self, settings: Settings, search_client: Optional[RipgrepClient] = None):
        self.settings = settings
        self.rg = search_client or RipgrepClient(
            timeout=settings.search_timeout,
            max_output_bytes=settings.search_max_output_bytes,
        )

    @property
    def root(self) -> Path:
        return self.settings.repos_dir

    def _relative(self, path: str) -> str:
        return Path(os.path.relpath(path, self.root)).as_posix()

    # === CODE SEARCH ===

    def search_code(
        self,
        query: str,
        file_pattern: str = "*.nr",
        repo: Optional[str] = None,
        max_results: int = 50,
        case_sensitive: bool = False,
    ) -> List[SearchResult]:
        """
        Search for a regex in files matching a glob.

        Args:
            query: Regex (used literally by the fallback if invalid)
            file_pattern: Glob such as '*.nr' or '*.{md,mdx}'
            repo: Repository name or sub-path under the mirror root
            max_results: Upper bound on returned results
            case_sensitive: Match case exactly

        Returns:
            At most max_results SearchResult objects; empty if the scope is missing
        """
        scope = self.root / repo if repo else self.root
        if not scope.exists():
            return []

        try:
            output = self.rg.search(
                query, str(scope), glob=file_pattern,
                max_count=max_results * 2, case_sensitive=case_sensitive,
            )
        except SearchToolError as e:
            logger.debug(f"ripgrep unavailable ({e}), using manual search")
            return self.manual_search(query, scope, file_pattern, max_results, case_sensitive)

        return self.parse_rg_output(output, max_results)

    def parse_rg_output(self, output: str, max_results: int) -> List[SearchResult]:
        results: List[SearchResult] = []
        for line in output.splitlines():
            if len(results) >= max_results:
                break
            if not line:
                continue

            match = _RG_LINE.match(line)
            if not match:
                continue

            file_path, line_number, content = match.groups()
            relative = self._relative(file_path)
            results.append(SearchResult(
                file=relative,
                line=int(line_number),
                content=content.strip(),
                repo=repository_of(relative),
            ))

        return results

    def iter_files(self, scope: Path, file_pattern: str) -> Iterator[Path]:
        """
        Files under scope matching the glob, skipping VCS and dependency dirs.

        Patterns without a '/' match the file name; others match the path
        relative to scope.
        """
        patterns = expand_braces(file_pattern)
        for dirpath, dirnames, filenames in os.walk(scope):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRECTORIES)
            for filename in sorted(filenames):
                full = Path(dirpath) / filename
                for pattern in patterns:
                    if "/" in pattern:
                        candidate = full.relative_to(scope).as_posix()
                        pattern = pattern.lstrip("/").replace("**/", "*")
                    else:
                        candidate = filename
                    if fnmatch.fnmatch(candidate, pattern):
                        yield full
                        break

    def manual_search(
        self,
        query: str,
        scope: Path,
        file_pattern: str,
        max_results: int,
        case_sensitive: bool = False,
    ) -> List[SearchResult]:
        """Line-by-line regex scan used when ripgrep cannot run."""
        results: List[SearchResult] = []
        regex = compile_query(query, case_sensitive)

        for file_path in self.iter_files(scope, file_pattern):
            if len(results) >= max_results:
                break

            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue

            relative = self._relative(str(file_path))
            for index, line in enumerate(content.split("\n")):
                if len(results) >= max_results:
                    break
                if regex.search(line):
                    results.append(SearchResult(
                        file=relative,
                        line=index + 1,
                        content=line.strip(),
                        repo=repository_of(relative),
                    ))

        return results

    # === DOCUMENTATION ===

    def search_docs(
        self,
        query: str,
        section: Optional[str] = None,
        max_results: int = 30,
    ) -> List[SearchResult]:
        """
        Search markdown documentation in the monorepo.

        A section that does not exist on disk widens the search back to
        the whole monorepo.
        """
        scope = registry.MONOREPO_NAME
        if section:
            docs_root = Path(registry.MONOREPO_NAME, *registry.DOCS_SUBTREE)
            if (self.root / docs_root / section).exists():
                scope = (docs_root / section).as_posix()
            else:
                logger.debug(f"Docs section '{section}' not found, searching all docs")

        return self.search_code(query, file_pattern=DOCS_PATTERN, repo=scope, max_results=max_results)

    # === EXAMPLES ===

    def example_sources(self) -> List[Tuple[Path, str]]:
        """(directory, owning repo) pairs scanned for contract examples."""
        return [
            (self.root / registry.EXAMPLES_REPO_NAME, registry.EXAMPLES_REPO_NAME),
            (self.root.joinpath(registry.MONOREPO_NAME, *registry.CONTRACTS_SUBTREE),
             registry.MONOREPO_NAME),
        ]

    def _find_contracts(self, base: Path, repo_name: str) -> List[FileInfo]:
        contracts = []
        for file_path in self.iter_files(base, EXAMPLE_ENTRY_POINT[-1]):
            if file_path.parent.name != EXAMPLE_ENTRY_POINT[0]:
                continue
            relative = self._relative(str(file_path))
            contracts.append(FileInfo(
                path=relative,
                name=file_path.parent.parent.name,
                repo=repo_name,
                category=FileCategory.CONTRACT,
            ))
        return sorted(contracts, key=lambda info: info.path)

    def list_examples(self, category: Optional[str] = None) -> List[FileInfo]:
        """
        Discover contract examples (every src/main.nr) in the examples repo
        and the monorepo's reference contracts.

        Args:
            category: Case-insensitive substring filter on name or path
        """
        examples: List[FileInfo] = []
        for base, repo_name in self.example_sources():
            if base.exists():
                examples.extend(self._find_contracts(base, repo_name))

        if category:
            needle = category.lower()
            examples = [
                e for e in examples
                if needle in e.name.lower() or needle in e.path.lower()
            ]
        return examples

    def find_example(self, name: str) -> Optional[FileInfo]:
        """Exact (case-insensitive) name first, then the first substring match."""
        examples = self.list_examples()
        needle = name.lower()

        for example in examples:
            if example.name.lower() == needle:
                return example

        for example in examples:
            if needle in example.name.lower() or needle in example.path.lower():
                return example

        return None

    def suggest_examples(self, name: str, limit: int = 3, threshold: float = 60.0) -> List[str]:
        """Closest example names, for 'not found' messages."""
        names = sorted({e.name for e in self.list_examples()})
        if not names:
            return []
        matches = process.extract(name, names, scorer=fuzz.WRatio, limit=limit)
        return [match for match, score, _ in matches if score >= threshold]
