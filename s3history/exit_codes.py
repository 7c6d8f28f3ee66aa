"""
Standard exit codes for s3history commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
API_ERROR = 65           # Storage backend call failed (S3 listing, etc.)
CONFIG_ERROR = 66        # Configuration, credentials or repository setup
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Network connection failed
AUTH_ERROR = 69          # Authentication/authorization failed
DATA_ERROR = 70          # Data format or validation error
PARTIAL_SUCCESS = 71     # Replay finished but some objects were skipped
REPLAY_ERROR = 72        # Download, staging or commit failed mid-replay
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'EndpointConnectionError': NETWORK_ERROR,
    'NoCredentialsError': AUTH_ERROR,
    'ProfileNotFound': CONFIG_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised for bad configuration, credentials, or repository setup."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class StorageError(CommandError):
    """Raised when a storage backend call fails."""
    def __init__(self, message: str):
        super().__init__(message, API_ERROR)


class MaterializeError(CommandError):
    """Raised when an object version cannot be written to disk."""
    def __init__(self, message: str):
        super().__init__(message, REPLAY_ERROR)


class ReplayError(CommandError):
    """Raised when staging or committing a changeset fails."""
    def __init__(self, message: str):
        super().__init__(message, REPLAY_ERROR)


class PartialSuccessError(CommandError):
    """Raised when some operations succeed and some fail."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed
