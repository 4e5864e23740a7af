"""
Git client infrastructure for aztecmirror.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Commands are passed to subprocess as argument lists; nothing goes
through a shell.
"""

import subprocess
from dataclasses import dataclass
from typing import Optional, List, Sequence
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git invocation failed, timed out, or could not be started."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"{' '.join(self.command)}: {detail}")


@dataclass
class GitCommit:
    """A git commit hash, with a display form."""
    hash: str

    @property
    def short(self) -> str:
        return self.hash[:7]


class GitClient:
    """
    Abstraction over git commands.

    Every method blocks until git exits or the timeout expires.
    Failures raise GitCommandError; callers decide how to recover.

    Example:
        client = GitClient()
        client.clone(url, "/tmp/repos/noir", ["--depth=1", "-b", "master"])
        commit = client.head_commit("/tmp/repos/noir")
    """

    def __init__(self, timeout: int = 600, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 600)
            executable: git binary to invoke
        """
        self.timeout = timeout
        self.executable = executable

    def _run(self, args: List[str], cwd: Optional[str] = None, quiet: bool = False) -> str:
        """
        Run a git command.

        Args:
            args: git arguments (without the executable)
            cwd: Working directory
            quiet: Log failures at DEBUG (for lookups expected to fail)

        Returns:
            Stripped stdout

        Raises:
            GitCommandError: on non-zero exit, timeout, or launch failure
        """
        cmd = [self.executable, *args]
        log_failure = logger.debug if quiet else logger.warning
        logger.debug(f"Running: {' '.join(cmd)} (cwd={cwd})")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            log_failure(f"Git command timed out after {self.timeout}s: {' '.join(cmd)}")
            raise GitCommandError(cmd, -1, f"timed out after {self.timeout}s")
        except OSError as e:
            log_failure(f"Git command could not start: {' '.join(cmd)} - {e}")
            raise GitCommandError(cmd, -1, str(e))

        if result.returncode != 0:
            log_failure(f"Git command failed ({result.returncode}): {' '.join(cmd)}")
            raise GitCommandError(cmd, result.returncode, result.stderr)

        return result.stdout.strip() if result.stdout else ""

    def is_git_repo(self, path: str) -> bool:
        """Check if path is a git repository."""
        git_dir = Path(path) / ".git"
        return git_dir.exists()

    def clone(self, url: str, path: str, flags: Sequence[str] = ()) -> None:
        """Clone url into path with extra clone flags."""
        self._run(["clone", *flags, url, str(path)])

    def fetch(self, path: str, args: Sequence[str] = ()) -> None:
        """Run git fetch with the given arguments (remote spec, depth, refspecs)."""
        self._run(["fetch", *args], cwd=path)

    def reset(self, path: str, mode: str = "--hard", target: str = "origin/HEAD") -> None:
        self._run(["reset", mode, target], cwd=path)

    def pull(self, path: str) -> None:
        self._run(["pull"], cwd=path)

    def checkout(self, path: str, ref: str) -> None:
        self._run(["checkout", ref], cwd=path)

    def raw(self, path: str, args: Sequence[str]) -> str:
        """Run an arbitrary git subcommand and return its stdout."""
        return self._run(list(args), cwd=path)

    def sparse_checkout_set(self, path: str, paths: Sequence[str]) -> None:
        self.raw(path, ["sparse-checkout", "set", *paths])

    def head_commit(self, path: str) -> Optional[GitCommit]:
        """
        Get the commit at HEAD.

        Returns:
            GitCommit, or None if the log is empty
        """
        output = self._run(["log", "-1", "--format=%H"], cwd=path)
        if not output:
            return None
        return GitCommit(hash=output.splitlines()[0].strip())

    def exact_tag(self, path: str) -> Optional[str]:
        """Tag pointing exactly at HEAD, or None."""
        try:
            output = self._run(["describe", "--tags", "--exact-match", "HEAD"], cwd=path, quiet=True)
        except GitCommandError:
            return None
        return output.strip() or None

    def ls_tree(self, path: str, pathspec: str, treeish: str = "HEAD") -> str:
        """Raw `git ls-tree <treeish> <pathspec>` output."""
        return self._run(["ls-tree", treeish, pathspec], cwd=path, quiet=True)
