"""
Input validation for vc-msg commands and tools.

Provides validation functions for all user-supplied parameters with
clear error messages.  Revisions end up on a VCS command line, so they
are checked against a conservative character set.
"""

from __future__ import annotations

import re
from pathlib import Path

from errors import ValidationError

VCS_KINDS = ["git", "svn", "hg", "p4"]

# Covers git refs/ranges, svn numbers/keywords, hg revsets like wdir() or .^,
# and p4 change numbers or labels
_REVISION_RE = re.compile(r"^[A-Za-z0-9_./@#~^:=+(){}-]+$")


def validate_path(path: str, must_exist: bool = True) -> Path:
    """Validate a file or directory path.

    Args:
        path: Path to validate
        must_exist: If True, path must exist

    Returns:
        Resolved Path object

    Raises:
        ValidationError: If path is empty or missing
    """
    if not path or not str(path).strip():
        raise ValidationError("Path cannot be empty")

    try:
        resolved = Path(path).expanduser().resolve()
    except Exception as e:
        raise ValidationError(f"Invalid path: {path}", {"exception": str(e)})

    if must_exist and not resolved.exists():
        raise ValidationError(f"Path not found: {path}")

    return resolved


def validate_file(path: str, must_exist: bool = True) -> Path:
    """Validate that path exists and is a file.

    Args:
        path: File path to validate
        must_exist: If True, file must exist

    Returns:
        Resolved Path object

    Raises:
        ValidationError: If path is invalid or not a file
    """
    if not path or not str(path).strip():
        raise ValidationError("File path cannot be empty")

    resolved = validate_path(path, must_exist=must_exist)

    if must_exist and not resolved.is_file():
        raise ValidationError(f"Path is not a file: {path}")

    return resolved


def validate_line_number(value: int | None, name: str = "line", min_val: int = 1) -> int | None:
    """Validate a line number parameter.

    Args:
        value: Line number to validate (None is allowed)
        name: Parameter name for error messages
        min_val: Minimum allowed value

    Returns:
        Validated line number or None

    Raises:
        ValidationError: If line number is invalid
    """
    if value is None:
        return None

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{name} must be an integer",
            {"provided_type": type(value).__name__}
        )

    if value < min_val:
        raise ValidationError(
            f"{name} must be >= {min_val}",
            {"provided": value, "minimum": min_val}
        )

    return value


def validate_revision(revision: str | None) -> str | None:
    """Validate an optional revision/commit identifier.

    Returns:
        Stripped revision, or None when not provided

    Raises:
        ValidationError: If the revision could be mistaken for an option
            or contains characters no VCS uses in revisions
    """
    if revision is None:
        return None

    sanitized = revision.strip()
    if not sanitized:
        return None

    if sanitized.startswith("-"):
        raise ValidationError(
            f"Revision cannot start with '-': {revision}",
            {"provided": revision}
        )

    if not _REVISION_RE.match(sanitized):
        raise ValidationError(
            f"Invalid revision: {revision}",
            {"provided": revision}
        )

    return sanitized


def validate_choice(value: str | None, allowed: list[str], name: str) -> str:
    """Validate that *value* is one of *allowed*.

    Raises:
        ValidationError: If value is missing or not allowed
    """
    if not value:
        raise ValidationError(
            f"{name} is required",
            {"allowed_values": allowed}
        )

    if value not in allowed:
        raise ValidationError(
            f"Invalid {name}: '{value}'",
            {"allowed_values": allowed, "provided": value}
        )

    return value


def validate_vcs_kind(kind: str | None) -> str | None:
    """Validate an optional forced VCS kind (git, svn, hg, p4)."""
    if kind is None:
        return None
    return validate_choice(kind.strip().lower(), VCS_KINDS, "vcs")


def validate_max_count(value: int | None, default: int, max_val: int = 1000) -> int:
    """Validate the number of log entries to return.

    Args:
        value: Requested count (None or 0 means default)
        default: Default value if not provided
        max_val: Maximum allowed value

    Raises:
        ValidationError: If value is out of range
    """
    if value is None or value == 0:
        return default

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            "max_count must be an integer",
            {"provided_type": type(value).__name__}
        )

    if value < 1:
        raise ValidationError(
            "max_count must be >= 1",
            {"provided": value, "minimum": 1}
        )

    if value > max_val:
        raise ValidationError(
            f"max_count must be <= {max_val}",
            {"provided": value, "maximum": max_val}
        )

    return value
