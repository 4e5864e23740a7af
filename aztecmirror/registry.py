"""
Static registry of the repositories aztecmirror keeps locally.

Only repositories owned by the primary organization are versioned by
release tag. Companion and tooling repositories follow a branch unless a
commit pin is discovered at sync time (see services.sync_service).
"""

from typing import List, Optional

from .config import DEFAULT_VERSION
from .domain import RepositoryDescriptor, SearchPatterns

PRIMARY_NAMESPACE = "AztecProtocol"
COMPANION_NAMESPACE = "noir-lang"

MONOREPO_NAME = "aztec-packages"
COMPANION_INTERPRETER_NAME = "noir"
# Submodule inside the monorepo that records the compatible noir commit
COMPANION_PIN_PATH = "noir/noir-repo"

EXAMPLES_REPO_NAME = "aztec-examples"
CONTRACTS_SUBTREE = ("noir-projects", "noir-contracts")
DOCS_SUBTREE = ("docs", "docs")


BASE_REPOS: List[RepositoryDescriptor] = [
    RepositoryDescriptor(
        name="aztec-packages",
        url="https://github.com/AztecProtocol/aztec-packages",
        sparse=(
            "docs/docs",
            "noir-projects/aztec-nr",
            "noir-projects/noir-contracts",
            "yarn-project",
            "barretenberg/ts/src",
        ),
        description="Main Aztec monorepo - documentation, aztec-nr framework, and reference contracts",
        search_patterns=SearchPatterns(code=("*.nr", "*.ts"), docs=("*.md", "*.mdx")),
    ),
    RepositoryDescriptor(
        name="aztec-examples",
        url="https://github.com/AztecProtocol/aztec-examples",
        description="Official Aztec contract examples and sample applications",
        search_patterns=SearchPatterns(code=("*.nr", "*.ts"), docs=("*.md",)),
    ),
    RepositoryDescriptor(
        name="aztec-starter",
        url="https://github.com/AztecProtocol/aztec-starter",
        description="Aztec starter template with deployment scripts and TypeScript integration",
        search_patterns=SearchPatterns(code=("*.nr", "*.ts"), docs=("*.md",)),
    ),
    RepositoryDescriptor(
        name="noir",
        url="https://github.com/noir-lang/noir",
        branch="master",
        sparse=("docs", "noir_stdlib", "tooling"),
        description="Noir language compiler, standard library, and tooling",
        search_patterns=SearchPatterns(code=("*.nr", "*.rs"), docs=("*.md",)),
    ),
    RepositoryDescriptor(
        name="noir-examples",
        url="https://github.com/noir-lang/noir-examples",
        branch="master",
        description="Official Noir language examples and tutorials",
        search_patterns=SearchPatterns(code=("*.nr", "*.ts"), docs=("*.md",)),
    ),
    RepositoryDescriptor(
        name="aztec-otc-desk",
        url="https://github.com/aztec-pioneers/aztec-otc-desk",
        description="Community OTC trading desk built on Aztec private contracts",
        search_patterns=SearchPatterns(code=("*.nr", "*.ts"), docs=("*.md",)),
    ),
    RepositoryDescriptor(
        name="aztec-pay",
        url="https://github.com/aztec-pioneers/aztec-pay",
        description="Community private payments application built on Aztec",
        search_patterns=SearchPatterns(code=("*.nr", "*.ts"), docs=("*.md",)),
    ),
]


def list_descriptors(version: Optional[str] = None) -> List[RepositoryDescriptor]:
    """
    Get the repositories configured for a specific version.

    Every primary-namespace descriptor gets ``tag=version`` (the default
    version when None). All others are returned without a tag.
    Always builds new descriptors; BASE_REPOS is never modified.
    """
    tag = version or DEFAULT_VERSION
    return [
        repo.with_tag(tag if repo.belongs_to(PRIMARY_NAMESPACE) else None)
        for repo in BASE_REPOS
    ]


def lookup_by_name(name: str, version: Optional[str] = None) -> Optional[RepositoryDescriptor]:
    """Get a descriptor by name."""
    for repo in list_descriptors(version):
        if repo.name == name:
            return repo
    return None


def list_names() -> List[str]:
    """All configured names, in registry order, without duplicates."""
    seen = set()
    names = []
    for repo in BASE_REPOS:
        if repo.name not in seen:
            seen.add(repo.name)
            names.append(repo.name)
    return names
