"""
Custom exception hierarchy for vc-msg.

All exceptions inherit from VcMsgError for easy catching.
Each exception type maps to a specific error category for
structured error responses (MCP clients) and process exit codes (CLI).
"""

from __future__ import annotations


class VcMsgError(Exception):
    """Base exception for all vc-msg errors.

    All custom exceptions should inherit from this class.
    Provides a consistent interface for error handling.
    """

    exit_code = 1

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert exception to structured error response dict."""
        return {
            "error": True,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details if self.details else None,
        }


class ValidationError(VcMsgError):
    """Input validation failed.

    Raised when:
    - File/directory not found
    - Invalid line numbers
    - Unknown VCS kind or action
    - Malformed revision string
    """

    exit_code = 2


class VcsNotFoundError(VcMsgError):
    """No version-control system manages the given path.

    Raised when:
    - No .git/.svn/.hg marker above the path
    - Perforce probe disabled, unavailable or negative
    """

    exit_code = 3


class CommandError(VcMsgError):
    """A VCS command could not be run or exited non-zero.

    Raised when:
    - The VCS executable is not installed
    - The command timed out
    - The command failed (line past end of file, unknown revision, ...)
    """

    exit_code = 4


class ParseError(VcMsgError):
    """VCS output did not have the expected shape."""

    exit_code = 5


def format_error(error: Exception) -> dict:
    """Format any exception as a structured error response.

    Args:
        error: Any exception (VcMsgError or built-in)

    Returns:
        Structured error dict suitable for MCP or JSON output
    """
    if isinstance(error, VcMsgError):
        return error.to_dict()

    error_type = error.__class__.__name__
    message = str(error) or f"An error of type {error_type} occurred"

    return {
        "error": True,
        "error_type": error_type,
        "message": message,
        "details": None,
    }
