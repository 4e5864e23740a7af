"""
Ripgrep client infrastructure for aztecmirror.

Wraps one blocking `rg` invocation. Zero matches is a normal, empty
result; only a failure to run rg (missing binary, error exit, timeout,
oversized output) raises SearchToolError.
"""

import re
import shlex
import subprocess
import tempfile
import threading
import logging
from typing import List, Sequence

logger = logging.getLogger(__name__)

# rg exits 1 when nothing matched
RG_NO_MATCHES = 1

READ_CHUNK_BYTES = 64 * 1024

_SHELL_SPECIAL = re.compile(r'(["$`\\!])')


class SearchToolError(Exception):
    """The primary search process could not produce a result."""


def escape_shell_query(query: str) -> str:
    """
    Escape characters that are special inside a double-quoted shell word.

    Regex syntax (|, *, +, ., ?, brackets) is left untouched.
    """
    return _SHELL_SPECIAL.sub(r'\\\1', query)


class RipgrepClient:
    """
    Abstraction over the ripgrep binary.

    Example:
        client = RipgrepClient(timeout=30)
        output = client.search("PrivateSet", "/root/repos", glob="*.nr", max_count=60)
    """

    def __init__(self, timeout: int = 30, max_output_bytes: int = 10 * 1024 * 1024,
                 executable: str = "rg"):
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self.executable = executable

    def build_args(self, query: str, path: str, glob: str, max_count: int,
                   case_sensitive: bool = False) -> List[str]:
        """Argument list for one search; the query is passed verbatim."""
        args = [self.executable]
        if not case_sensitive:
            args.append("-i")
        args.extend([
            "-n",
            "--no-heading",
            "--color", "never",
            "-g", glob,
            "-m", str(max_count),
            "-e", query,
            str(path),
        ])
        return args

    def command_line(self, args: Sequence[str]) -> str:
        """Shell-equivalent rendering of an invocation, for logs."""
        parts = [shlex.quote(a) for a in args[:-2]]
        parts.append(f'"{escape_shell_query(args[-2])}"')
        parts.append(shlex.quote(args[-1]))
        return " ".join(parts)

    def search(self, query: str, path: str, glob: str, max_count: int,
               case_sensitive: bool = False) -> str:
        """
        Run rg and return its stdout (`path:line:content` lines).

        Output is read incrementally; rg is killed as soon as it writes
        more than max_output_bytes or runs past the timeout.

        Raises:
            SearchToolError: rg missing, errored, timed out, or overflowed
        """
        args = self.build_args(query, path, glob, max_count, case_sensitive)
        logger.debug(f"Running: {self.command_line(args)}")

        with tempfile.TemporaryFile() as errfile:
            try:
                proc = subprocess.Popen(args, stdout=subprocess.PIPE, stderr=errfile)
            except FileNotFoundError as e:
                raise SearchToolError(f"{self.executable} not found") from e
            except (OSError, ValueError) as e:
                # ValueError: the query or path holds a NUL byte
                raise SearchToolError(str(e)) from e

            expired = threading.Event()

            def _expire():
                expired.set()
                proc.kill()

            timer = threading.Timer(self.timeout, _expire)
            timer.start()
            try:
                output = self._read_capped(proc)
                returncode = proc.wait()
            finally:
                timer.cancel()
                proc.stdout.close()

            if expired.is_set() and returncode != 0:
                raise SearchToolError(f"{self.executable} timed out after {self.timeout}s")
            if returncode == RG_NO_MATCHES and not output:
                return ""
            if returncode != 0:
                errfile.seek(0)
                stderr = errfile.read().decode("utf-8", errors="replace").strip()
                raise SearchToolError(f"{self.executable} exited {returncode}: {stderr}")

        return output.decode("utf-8", errors="replace")

    def _read_capped(self, proc) -> bytes:
        """Read stdout until EOF, killing rg once it passes the byte cap."""
        chunks = []
        size = 0
        while True:
            chunk = proc.stdout.read(min(READ_CHUNK_BYTES, self.max_output_bytes + 1 - size))
            if not chunk:
                break
            chunks.append(chunk)
            size += len(chunk)
            if size > self.max_output_bytes:
                proc.kill()
                proc.wait()
                raise SearchToolError(
                    f"{self.executable} output exceeded {self.max_output_bytes} bytes"
                )
        return b"".join(chunks)
