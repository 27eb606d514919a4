"""
Mercurial backend for vc-msg.

Shells out to ``hg``.  The working directory is annotated by default
(``-r 'wdir()'``) so line numbers match the file on disk; lines that only
exist there carry a changeset with a trailing ``+``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import config
import logging_config
import records
import runner
from api_types import CommitRecord
from errors import CommandError, ParseError

logger = logging_config.get_vcs_logger("hg")

WORKING_DIR_REV = "wdir()"

# Field and record separators for --template output
FS = "\x1f"
RS = "\x1e"
LOG_TEMPLATE = FS.join(["{node}", "{author|person}", "{author|email}", "{date|hgdate}", "{desc}"]) + RS

_ANNOTATE_RE = re.compile(
    r"^\s*(?P<user>.+?)\s+(?P<node>[0-9a-f]{12,40}\+?):\s*(?P<line>\d+):\s?(?P<content>.*)$"
)


def _hg(*args: str) -> list[str]:
    return [config.HG_EXECUTABLE, "--noninteractive", *args]


def is_working_node(node: str) -> bool:
    return node.endswith("+") or set(node) == {"f"}


def parse_annotate_line(text: str, line: int) -> dict[str, Any]:
    """Pick line *line* (1-based) out of ``hg annotate -u -c -l`` output."""
    lines = text.replace("\r\n", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    if line > len(lines):
        raise CommandError(f"File has only {len(lines)} lines", {"line": line})
    m = _ANNOTATE_RE.match(lines[line - 1])
    if not m:
        raise ParseError(f"Unexpected hg annotate line: {lines[line - 1]!r}")
    return {"user": m.group("user"), "node": m.group("node"), "content": m.group("content")}


def parse_log(text: str) -> list[dict[str, Any]]:
    """Parse output produced with ``LOG_TEMPLATE``."""
    entries: list[dict[str, Any]] = []
    for chunk in text.split(RS):
        if not chunk.strip():
            continue
        fields = chunk.lstrip("\n").split(FS)
        if len(fields) != 5:
            raise ParseError(f"Unexpected hg log record: {chunk[:80]!r}")
        node, person, email, hgdate, desc = fields
        try:
            when, offset_west = hgdate.split()
            timestamp = int(float(when))
            tz = records.tz_string(-int(offset_west))
        except ValueError:
            raise ParseError(f"Unexpected hg date: {hgdate!r}")
        entries.append({
            "node": node,
            "author": person,
            "email": email,
            "timestamp": timestamp,
            "tz": tz,
            "message": desc,
        })
    return entries


def _entry_to_record(entry: dict[str, Any], file: str = "", line: int | None = None) -> CommitRecord:
    return records.make_record(
        "hg",
        entry["node"],
        author=entry["author"],
        author_email=entry["email"],
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


def _log_entries(root: str | Path, *args: str) -> list[dict[str, Any]]:
    out = runner.check_output(_hg("log", "--template", LOG_TEMPLATE, *args), cwd=root)
    return parse_log(out)


def blame_line(root: str | Path, file: str | Path, line: int, revision: str | None = None) -> CommitRecord:
    """Return the changeset that last touched *line* of *file*."""
    out = runner.check_output(
        _hg("annotate", "--user", "--changeset", "--line-number",
            "-r", revision or WORKING_DIR_REV, "--", str(file)),
        cwd=root,
    )
    rel = _rel(Path(root), file)
    annotated = parse_annotate_line(out, line)
    if is_working_node(annotated["node"]):
        logger.debug(f"{rel}:{line} is not committed yet")
        return records.uncommitted_record("hg", rel, line)

    entries = _log_entries(root, "-r", annotated["node"])
    if not entries:
        raise ParseError(f"hg log returned no entry for {annotated['node']}")
    return _entry_to_record(entries[0], rel, line)


def commit_detail(root: str | Path, commit_id: str, file: str | Path | None = None) -> CommitRecord:
    """Return metadata and ``hg diff -c`` output for *commit_id*."""
    entries = _log_entries(root, "-r", commit_id)
    if not entries:
        raise CommandError(f"Could not resolve changeset '{commit_id}'")

    diff_args = ["diff", "--git", "-c", commit_id]
    if file:
        diff_args.extend(["--", str(file)])
    diff_text = runner.check_output(_hg(*diff_args), cwd=root)

    record = _entry_to_record(entries[0], _rel(Path(root), file) if file else "")
    record["diff"] = diff_text
    return record


def blame_file(root: str | Path, file: str | Path, revision: str | None = None) -> str:
    """Return plain ``hg annotate`` output for the whole file."""
    return runner.check_output(
        _hg("annotate", "--user", "--changeset", "-r", revision or WORKING_DIR_REV, "--", str(file)),
        cwd=root,
    )


def file_log(root: str | Path, file: str | Path, max_count: int, revision: str | None = None) -> list[CommitRecord]:
    """Return changesets touching *file*, most-recent-first."""
    args = ["-l", str(max_count)]
    if revision:
        args.extend(["-r", f"reverse(::{revision})"])
    args.extend(["--", str(file)])
    rel = _rel(Path(root), file)
    return [_entry_to_record(entry, rel) for entry in _log_entries(root, *args)]
