"""
Shared fixtures: settings rooted in tmp_path and a fake git that
creates checkouts on disk without touching the network.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from aztecmirror.config import Settings
from aztecmirror.infra.git_client import GitClient, GitCommit

FULL_HASH = "0123456789abcdef0123456789abcdef01234567"


@pytest.fixture
def settings(tmp_path):
    return Settings(repos_dir=tmp_path / "repos", default_version="v9.9.9")


def make_checkout(root: Path, name: str) -> Path:
    """Create <root>/<name>/.git so the checkout counts as cloned."""
    path = root / name
    (path / ".git").mkdir(parents=True, exist_ok=True)
    return path


def write_file(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def fake_git():
    """GitClient double: clone creates <path>/.git, HEAD is FULL_HASH."""
    git = MagicMock(spec=GitClient)
    git.is_git_repo.side_effect = lambda path: (Path(path) / ".git").exists()

    def clone(url, path, flags=()):
        (Path(path) / ".git").mkdir(parents=True)

    git.clone.side_effect = clone
    git.head_commit.return_value = GitCommit(hash=FULL_HASH)
    git.exact_tag.return_value = None
    git.ls_tree.return_value = ""
    return git
