"""
Exit codes for aztecmirror commands.

0-2 keep their usual shell meaning; the rest sit in the 64-113 range
left free for applications.
"""

SUCCESS = 0
GENERAL_ERROR = 1        # unknown example, missing file, unexpected failure
USAGE_ERROR = 2          # click reports bad arguments with this code

NO_REPOS_FOUND = 64      # nothing cloned yet, or no repository name matched
CONFIG_ERROR = 66        # unreadable or invalid settings
PERMISSION_ERROR = 67    # mirror root not writable
NETWORK_ERROR = 68       # git or rg timed out
DATA_ERROR = 70
PARTIAL_SUCCESS = 71     # sync finished with at least one failed repository
INTERRUPTED = 130        # Ctrl+C

# Keyed by exception class name so callers need not import every type
EXCEPTION_EXIT_CODES = {
    'PermissionError': PERMISSION_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'TimeoutExpired': NETWORK_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'ConfigError': CONFIG_ERROR,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    return EXCEPTION_EXIT_CODES.get(exc.__class__.__name__, GENERAL_ERROR)


class CommandError(Exception):
    """A failure a command reports with a specific exit code."""

    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoReposFoundError(CommandError):
    """Nothing is cloned yet, or the name filter matched no repository."""

    def __init__(self, message: str = "No repositories are cloned"):
        super().__init__(message, NO_REPOS_FOUND)


class ConfigError(CommandError):
    """Settings could not be built from the config file and environment."""

    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class PartialSuccessError(CommandError):
    """A sync where some repositories failed; carries both counts."""

    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed
