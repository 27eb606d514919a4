"""
Render commit records as text for the terminal or an editor tooltip.
"""

from __future__ import annotations

import json
import shlex
from typing import Any

import config
import records
from api_types import CommitRecord
from errors import ValidationError

NOT_COMMITTED_BANNER = "* Not Committed Yet *"


def format_date(record: CommitRecord, date_format: str | None = None) -> str:
    """Author date in the commit's own zone, or "" when unknown."""
    dt = records.to_datetime(record["timestamp"], record["timezone"])
    if dt is None:
        return ""
    return dt.strftime(date_format or config.DATE_FORMAT)


def _author(record: CommitRecord) -> str:
    if record["author_email"]:
        return f"{record['author']} <{record['author_email']}>"
    return record["author"]


def _location(record: CommitRecord) -> str:
    if record["line"] is None:
        return record["file"]
    return f"{record['file']}:{record['line']}"


def format_commit(record: CommitRecord, template: str | None = None, date_format: str | None = None) -> str:
    """Render one commit as a block of text.

    Args:
        template: ``str.format`` template over the record fields; ``{date}``
            is the formatted author date.

    Raises:
        ValidationError: If the template names an unknown field.
    """
    date = format_date(record, date_format)
    if template:
        fields: dict[str, Any] = {**record, "date": date, "iso_date": record["date"]}
        try:
            return template.format_map(fields)
        except (KeyError, IndexError, ValueError) as exc:
            raise ValidationError(f"Invalid template: {exc}", {"template": template})

    if record["uncommitted"]:
        return f"{NOT_COMMITTED_BANNER}\n\n{_location(record)}"

    lines = [
        f"Commit: {record['short_id']}",
        f"Author: {_author(record)}",
    ]
    if date:
        lines.append(f"Date: {date}")
    body = record["message"] or record["summary"]
    if body:
        lines.extend(["", body])
    return "\n".join(lines)


def format_detail(record: CommitRecord, date_format: str | None = None) -> str:
    """The commit block followed by its diff."""
    text = format_commit(record, date_format=date_format)
    diff = record.get("diff")
    if diff:
        text = f"{text}\n\n{diff.rstrip()}"
    return text


def format_log(entries: list[CommitRecord]) -> str:
    """One line per commit: short id, date, author, summary."""
    if not entries:
        return ""
    id_width = max(len(e["short_id"]) for e in entries)
    author_width = max(len(e["author"]) for e in entries)
    rows = []
    for e in entries:
        day = format_date(e, "%Y-%m-%d") or "----------"
        rows.append(f"{e['short_id']:<{id_width}}  {day}  {e['author']:<{author_width}}  {e['summary']}".rstrip())
    return "\n".join(rows)


def format_actions(record: CommitRecord, file: str) -> str:
    """Follow-up commands available for this record."""
    quoted = shlex.quote(file)
    line = record["line"] if record["line"] is not None else 1
    rows = []
    if not record["uncommitted"]:
        rows.append((f"vc-msg copy {quoted} {line}", "copy the commit id"))
        rows.append((f"vc-msg commit {quoted} --id {shlex.quote(record['id'])}", "show the full commit"))
    rows.append((f"vc-msg blame {quoted}", "blame the whole file"))
    rows.append((f"vc-msg log {quoted}", "history of the file"))

    width = max(len(cmd) for cmd, _ in rows)
    return "\n".join(["Follow-up:"] + [f"  {cmd:<{width}}  {what}" for cmd, what in rows])


def to_json(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)
