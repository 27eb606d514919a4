"""
TypedDict definitions for the commit record and all MCP tool responses.

These types provide:
- IDE autocompletion support
- Static type checking via mypy
- Documentation of API contracts
"""

from __future__ import annotations

from typing import Literal

from typing_extensions import NotRequired, TypedDict

# ---------------------------------------------------------------------------
# Commit record
# ---------------------------------------------------------------------------


class CommitRecord(TypedDict):
    """The commit that last touched a line (or a commit looked up by id)."""

    vcs: str
    id: str
    short_id: str
    author: str
    author_email: str
    timestamp: int | None
    timezone: str
    date: str
    summary: str
    message: str
    file: str
    line: int | None
    uncommitted: bool
    diff: NotRequired[str | None]


# ---------------------------------------------------------------------------
# Error Response
# ---------------------------------------------------------------------------


class ErrorResponse(TypedDict):
    """Standard error response returned by all tools on failure."""

    error: Literal[True]
    error_type: str
    message: str
    details: str | dict | None


# ---------------------------------------------------------------------------
# detect_vcs Tool
# ---------------------------------------------------------------------------


class DetectResponse(TypedDict):
    """Response from the detect_vcs tool."""

    status: Literal["ok"]
    path: str
    vcs: str | None
    root: str | None


# ---------------------------------------------------------------------------
# show_line_commit / show_commit Tools
# ---------------------------------------------------------------------------


class ShowLineCommitResponse(TypedDict):
    """Response from the show_line_commit tool."""

    status: Literal["ok"]
    result: CommitRecord
    text: str


class ShowCommitResponse(TypedDict):
    """Response from the show_commit tool (record includes the diff)."""

    status: Literal["ok"]
    result: CommitRecord
    text: str


# ---------------------------------------------------------------------------
# blame_file Tool
# ---------------------------------------------------------------------------


class BlameFileResponse(TypedDict):
    """Response from the blame_file tool."""

    status: Literal["ok"]
    file: str
    vcs: str
    blame: str


# ---------------------------------------------------------------------------
# file_log Tool
# ---------------------------------------------------------------------------


class FileLogResponse(TypedDict):
    """Response from the file_log tool."""

    status: Literal["ok"]
    file: str
    results: list[CommitRecord]
    text: str
