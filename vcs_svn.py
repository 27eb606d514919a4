"""
Subversion backend for vc-msg.

Shells out to the ``svn`` client.  ``svn blame`` gives the revision and
author per line; ``svn log`` gives date and message.  Locally modified
lines show ``-`` instead of a revision number.
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

logger = logging_config.get_vcs_logger("svn")

_BLAME_RE = re.compile(r"^\s*(?P<rev>\d+|-)\s+(?P<author>\S+) ?(?P<content>.*)$")
_LOG_HEADER_RE = re.compile(
    r"^r(?P<rev>\d+) \| (?P<author>.*?) \| "
    r"(?P<date>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4})?.*? \| "
    r"(?P<count>\d+) lines?$"
)


def _svn(*args: str) -> list[str]:
    return [config.SVN_EXECUTABLE, "--non-interactive", *args]


def _split_lines(text: str) -> list[str]:
    # Only "\n" separates lines; content may legitimately hold \f or \v
    lines = text.replace("\r\n", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_blame_line(text: str, line: int) -> dict[str, Any]:
    """Pick line *line* (1-based) out of ``svn blame`` output.

    Raises:
        CommandError: When the file has fewer lines.
        ParseError: When the line does not look like blame output.
    """
    lines = _split_lines(text)
    if line > len(lines):
        raise CommandError(f"File has only {len(lines)} lines", {"line": line})
    m = _BLAME_RE.match(lines[line - 1])
    if not m:
        raise ParseError(f"Unexpected svn blame line: {lines[line - 1]!r}")
    return {"rev": m.group("rev"), "author": m.group("author"), "content": m.group("content")}


def parse_log(text: str) -> list[dict[str, Any]]:
    """Parse ``svn log`` (optionally ``-v``) output into entries.

    The message is taken by the line count in each header, so messages
    containing the dashed separator do not break parsing.
    """
    lines = _split_lines(text)
    entries: list[dict[str, Any]] = []
    i = 0
    while i < len(lines):
        m = _LOG_HEADER_RE.match(lines[i])
        if not m:
            i += 1
            continue
        i += 1

        changed: list[str] = []
        if i < len(lines) and lines[i] == "Changed paths:":
            i += 1
            while i < len(lines) and lines[i].strip():
                changed.append(lines[i].strip())
                i += 1
        if i < len(lines) and lines[i] == "":
            i += 1

        count = int(m.group("count"))
        message = "\n".join(lines[i:i + count])
        i += count

        timestamp = None
        tz = "+0000"
        if m.group("date"):
            dt = datetime.strptime(m.group("date"), "%Y-%m-%d %H:%M:%S %z")
            timestamp = int(dt.timestamp())
            tz = m.group("date")[-5:]

        author = m.group("author")
        entries.append({
            "rev": m.group("rev"),
            "author": "" if author == "(no author)" else author,
            "timestamp": timestamp,
            "tz": tz,
            "message": message,
            "changed_paths": changed,
        })
    return entries


def _entry_to_record(entry: dict[str, Any], file: str = "", line: int | None = None) -> CommitRecord:
    return records.make_record(
        "svn",
        entry["rev"],
        author=entry["author"],
        timestamp=entry["timestamp"],
        tz=entry["tz"],
        message=entry["message"],
        file=file,
        line=line,
        display_id=f"r{entry['rev']}",
    )


def _rel(root: Path, file: str | Path) -> str:
    try:
        return Path(file).resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return str(file)


def blame_line(root: str | Path, file: str | Path, line: int, revision: str | None = None) -> CommitRecord:
    """Return the revision that last touched *line* of *file*."""
    args = ["blame"]
    if revision:
        args.extend(["-r", revision])
    args.append(str(file))
    out = runner.check_output(_svn(*args), cwd=root)

    rel = _rel(Path(root), file)
    blamed = parse_blame_line(out, line)
    if blamed["rev"] == "-":
        logger.debug(f"{rel}:{line} is locally modified")
        return records.uncommitted_record("svn", rel, line)

    log_out = runner.check_output(_svn("log", "-r", blamed["rev"], str(file)), cwd=root)
    entries = parse_log(log_out)
    if not entries:
        raise ParseError(f"svn log returned no entry for r{blamed['rev']}")
    return _entry_to_record(entries[0], rel, line)


def commit_detail(root: str | Path, commit_id: str, file: str | Path | None = None) -> CommitRecord:
    """Return metadata, changed paths and the diff of revision *commit_id*."""
    rev = commit_id.lstrip("r")
    # Metadata comes from the repository root; only the diff is limited to *file*
    log_out = runner.check_output(_svn("log", "-v", "-r", rev, "^/"), cwd=root)
    entries = parse_log(log_out)
    if not entries:
        raise CommandError(f"Could not resolve revision 'r{rev}'")

    target = str(file) if file else "^/"
    diff_text = runner.check_output(_svn("diff", "-c", rev, target), cwd=root)
    entry = entries[0]
    record = _entry_to_record(entry, _rel(Path(root), file) if file else "")
    changed = "\n".join(f"   {p}" for p in entry["changed_paths"])
    record["diff"] = f"Changed paths:\n{changed}\n\n{diff_text}" if changed else diff_text
    return record


def blame_file(root: str | Path, file: str | Path, revision: str | None = None) -> str:
    """Return plain ``svn blame`` output for the whole file."""
    args = ["blame"]
    if revision:
        args.extend(["-r", revision])
    args.append(str(file))
    return runner.check_output(_svn(*args), cwd=root)


def file_log(root: str | Path, file: str | Path, max_count: int, revision: str | None = None) -> list[CommitRecord]:
    """Return revisions touching *file*, most-recent-first."""
    args = ["log", "-l", str(max_count)]
    if revision:
        args.extend(["-r", f"{revision}:1"])
    args.append(str(file))
    out = runner.check_output(_svn(*args), cwd=root)
    rel = _rel(Path(root), file)
    return [_entry_to_record(entry, rel) for entry in parse_log(out)]
