"""
Perforce backend for vc-msg.

Shells out to ``p4``.  ``p4 annotate -c`` attributes lines to change
numbers; ``p4 change -o`` returns the change spec with user, date and
description.  Perforce reports dates in server-local time without a
zone; they are interpreted in the local zone of this machine.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Any

import config
import logging_config
import records
import runner
from api_types import CommitRecord
from errors import CommandError, ParseError

logger = logging_config.get_vcs_logger("p4")

_ANNOTATE_RE = re.compile(r"^(?P<change>\d+): ?(?P<content>.*)$")
_FIELD_RE = re.compile(r"^(?P<key>[A-Za-z]+):\s*(?P<value>.*)$")
_CHANGES_RE = re.compile(
    r"^Change (?P<change>\d+) on (?P<date>\d{4}/\d{2}/\d{2})(?: (?P<time>\d{2}:\d{2}:\d{2}))?"
    r" by (?P<user>[^@\s]+)@\S+"
)


def _p4(*args: str) -> list[str]:
    return [config.P4_EXECUTABLE, *args]


def _file_spec(file: str | Path, revision: str | None) -> str:
    if not revision:
        return str(file)
    if revision[0] in "@#":
        return f"{file}{revision}"
    return f"{file}@{revision}"


def _local_time(date: str, time: str | None) -> tuple[int, str]:
    dt = datetime.strptime(f"{date} {time or '00:00:00'}", "%Y/%m/%d %H:%M:%S").astimezone()
    return int(dt.timestamp()), dt.strftime("%z")


def parse_annotate_line(text: str, line: int) -> dict[str, Any]:
    """Pick line *line* (1-based) out of ``p4 annotate -c -q`` output."""
    lines = text.replace("\r\n", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    # Without -q the first line is a "//depot/...#N - ..." header
    if lines and lines[0].startswith("//"):
        lines = lines[1:]
    if line > len(lines):
        raise CommandError(f"File has only {len(lines)} lines", {"line": line})
    m = _ANNOTATE_RE.match(lines[line - 1])
    if not m:
        raise ParseError(f"Unexpected p4 annotate line: {lines[line - 1]!r}")
    return {"change": m.group("change"), "content": m.group("content")}


def parse_change_spec(text: str) -> dict[str, Any]:
    """Parse ``p4 change -o`` output into change, user, date and description."""
    fields: dict[str, str] = {}
    description: list[str] = []
    in_description = False
    for raw in text.replace("\r\n", "\n").split("\n"):
        if raw.startswith("#"):
            continue
        if in_description:
            if raw.startswith("\t"):
                description.append(raw[1:])
                continue
            if not raw.strip():
                description.append("")
                continue
            in_description = False
        m = _FIELD_RE.match(raw)
        if not m:
            continue
        key, value = m.group("key"), m.group("value").strip()
        if key == "Description":
            in_description = True
            if value:
                description.append(value)
        else:
            fields[key] = value

    if "Change" not in fields:
        raise ParseError("p4 change output has no Change field")

    timestamp = None
    tz = "+0000"
    date_parts = fields.get("Date", "").split()
    if date_parts:
        try:
            timestamp, tz = _local_time(date_parts[0], date_parts[1] if len(date_parts) > 1 else None)
        except ValueError:
            raise ParseError(f"Unexpected p4 date: {fields['Date']!r}")

    return {
        "change": fields["Change"],
        "user": fields.get("User", ""),
        "client": fields.get("Client", ""),
        "status": fields.get("Status", ""),
        "timestamp": timestamp,
        "tz": tz,
        "message": "\n".join(description).strip("\n"),
    }


def parse_changes(text: str) -> list[dict[str, Any]]:
    """Parse ``p4 changes -l -t`` output into entries."""
    entries: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None
    for raw in text.replace("\r\n", "\n").split("\n"):
        m = _CHANGES_RE.match(raw)
        if m:
            timestamp, tz = _local_time(m.group("date"), m.group("time"))
            current = {
                "change": m.group("change"),
                "user": m.group("user"),
                "timestamp": timestamp,
                "tz": tz,
                "lines": [],
            }
            entries.append(current)
        elif current is not None and raw.startswith("\t"):
            current["lines"].append(raw[1:])
    for entry in entries:
        entry["message"] = "\n".join(entry.pop("lines")).strip("\n")
    return entries


def _entry_to_record(entry: dict[str, Any], file: str = "", line: int | None = None) -> CommitRecord:
    return records.make_record(
        "p4",
        entry["change"],
        author=entry["user"],
        timestamp=entry["timestamp"],
        tz=entry["tz"],
        message=entry["message"],
        file=file,
        line=line,
    )


def _rel(root: Path, file: str | Path) -> str:
    try:
        return Path(file).resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return str(file)


def blame_line(root: str | Path, file: str | Path, line: int, revision: str | None = None) -> CommitRecord:
    """Return the change that last touched *line* of *file*."""
    out = runner.check_output(_p4("annotate", "-c", "-q", _file_spec(file, revision)), cwd=root)
    change = parse_annotate_line(out, line)["change"]

    spec = parse_change_spec(runner.check_output(_p4("change", "-o", change), cwd=root))
    return _entry_to_record(spec, _rel(Path(root), file), line)


def commit_detail(root: str | Path, commit_id: str, file: str | Path | None = None) -> CommitRecord:
    """Return the change spec and ``p4 describe -du`` output for *commit_id*."""
    change = commit_id.lstrip("@")
    spec = parse_change_spec(runner.check_output(_p4("change", "-o", change), cwd=root))
    if spec["status"] == "new":
        raise CommandError(f"Could not resolve change '{commit_id}'")

    diff_text = runner.check_output(_p4("describe", "-du", change), cwd=root)
    record = _entry_to_record(spec, _rel(Path(root), file) if file else "")
    record["diff"] = diff_text
    return record


def blame_file(root: str | Path, file: str | Path, revision: str | None = None) -> str:
    """Return plain ``p4 annotate -c`` output for the whole file."""
    return runner.check_output(_p4("annotate", "-c", _file_spec(file, revision)), cwd=root)


def file_log(root: str | Path, file: str | Path, max_count: int, revision: str | None = None) -> list[CommitRecord]:
    """Return submitted changes touching *file*, most-recent-first."""
    out = runner.check_output(
        _p4("changes", "-l", "-t", "-s", "submitted", "-m", str(max_count), _file_spec(file, revision)),
        cwd=root,
    )
    rel = _rel(Path(root), file)
    return [_entry_to_record(entry, rel) for entry in parse_changes(out)]
