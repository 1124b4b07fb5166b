"""
Standard exit codes for xbrew.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes
FETCH_ERROR = 3          # Download failed or produced an empty file
DEPENDENCY_MISSING = 4   # brew or git not found in PATH
TEMPFILE_ERROR = 5       # Could not create a temporary file
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': GENERAL_ERROR,
    'ConnectionError': FETCH_ERROR,
    'TimeoutError': FETCH_ERROR,
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


class UsageError(CommandError):
    """Raised when the command line is malformed. Help text is shown."""
    show_help = True

    def __init__(self, message: str):
        super().__init__(message, USAGE_ERROR)


class MissingArgumentError(UsageError):
    """Raised when the formula or its commit/URL is missing."""
    def __init__(self, message: str = "missing arguments."):
        super().__init__(message)


class InvalidActionError(UsageError):
    """Raised when the action is neither 'install' nor 'reinstall'."""
    def __init__(self, action: str):
        super().__init__("action must be 'install' or 'reinstall'.")
        self.action = action


class UnresolvableSourceError(CommandError):
    """Raised when no formula name or source URL can be determined."""
    show_help = True

    def __init__(self, message: str = "could not determine formula name or source URL."):
        super().__init__(message, USAGE_ERROR)


class DependencyMissingError(CommandError):
    """Raised when a required external tool is not installed."""
    def __init__(self, tool: str):
        super().__init__(f"{tool} not found in PATH.", DEPENDENCY_MISSING)
        self.tool = tool


class FetchError(CommandError):
    """Raised when the formula download fails or is empty."""
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, FETCH_ERROR)
        self.url = url


class TempFileError(CommandError):
    """Raised when a temporary file cannot be created."""
    def __init__(self, message: str = "mktemp failed; cannot create temporary file."):
        super().__init__(message, TEMPFILE_ERROR)


class CommitError(CommandError):
    """Raised when the formula cannot be committed into the tap."""
    def __init__(self, message: str):
        super().__init__(message, GENERAL_ERROR)


class InstallError(CommandError):
    """Raised when brew itself fails. Carries brew's exit code."""
    def __init__(self, message: str, exit_code: int):
        super().__init__(message, exit_code if exit_code > 0 else GENERAL_ERROR)
