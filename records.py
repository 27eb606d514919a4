"""
Construction helpers for ``CommitRecord`` dicts.

Backends parse wildly different VCS output but all hand back the same
flat record, built here.  Time zones travel as ``+HHMM`` strings next to
the epoch timestamp so the formatter can show the author's local time.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import cast

import config
from api_types import CommitRecord

NOT_COMMITTED_AUTHOR = "Not Committed Yet"

_TZ_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")
_HEX_RE = re.compile(r"^[0-9a-f]+$")


def parse_tz(text: str | None) -> int:
    """Convert ``+0800`` / ``-05:30`` to seconds east of UTC (0 if unparsable)."""
    m = _TZ_RE.match((text or "").strip())
    if not m:
        return 0
    seconds = int(m.group(2)) * 3600 + int(m.group(3)) * 60
    return -seconds if m.group(1) == "-" else seconds


def tz_string(offset_east: int) -> str:
    """Convert seconds east of UTC to ``+HHMM``."""
    sign = "-" if offset_east < 0 else "+"
    minutes = abs(offset_east) // 60
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def to_datetime(timestamp: int | None, tz: str = "+0000") -> datetime | None:
    """Epoch seconds rendered in the commit's own zone."""
    if timestamp is None:
        return None
    zone = timezone(timedelta(seconds=parse_tz(tz)))
    return datetime.fromtimestamp(timestamp, tz=zone)


def short_id(commit_id: str) -> str:
    """Abbreviate long hex hashes; revision numbers are left alone."""
    if len(commit_id) >= 12 and _HEX_RE.match(commit_id):
        return commit_id[: config.SHORT_ID_LENGTH]
    return commit_id


def first_line(message: str) -> str:
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    return ""


def make_record(
    vcs: str,
    commit_id: str,
    *,
    author: str = "",
    author_email: str = "",
    timestamp: int | None = None,
    tz: str = "+0000",
    message: str = "",
    file: str = "",
    line: int | None = None,
    display_id: str | None = None,
) -> CommitRecord:
    """Build a committed ``CommitRecord``."""
    message = message.strip("\n")
    dt = to_datetime(timestamp, tz)
    return cast(CommitRecord, {
        "vcs": vcs,
        "id": commit_id,
        "short_id": display_id or short_id(commit_id),
        "author": author.strip(),
        "author_email": author_email.strip().strip("<>"),
        "timestamp": timestamp,
        "timezone": tz,
        "date": dt.isoformat() if dt else "",
        "summary": first_line(message),
        "message": message,
        "file": file,
        "line": line,
        "uncommitted": False,
    })


def uncommitted_record(vcs: str, file: str, line: int | None, commit_id: str = "") -> CommitRecord:
    """Record for a line that only exists in the working copy."""
    return cast(CommitRecord, {
        "vcs": vcs,
        "id": commit_id,
        "short_id": short_id(commit_id) if commit_id else "",
        "author": NOT_COMMITTED_AUTHOR,
        "author_email": "",
        "timestamp": None,
        "timezone": "+0000",
        "date": "",
        "summary": NOT_COMMITTED_AUTHOR,
        "message": "",
        "file": file,
        "line": line,
        "uncommitted": True,
    })
