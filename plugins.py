"""
Flat registry of VCS backends and the detector → adapter dispatch.

Each plugin bundles the four backend operations.  The dispatch functions
validate their inputs, detect (or accept a forced) VCS kind, and call
into the matching backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import config
import detect
import formatter
import logging_config
import validation as val
import vcs_git
import vcs_hg
import vcs_p4
import vcs_svn
from api_types import CommitRecord
from errors import ValidationError

logger = logging_config.get_logger("plugins")

COPY_FIELDS = ["id", "summary", "message", "all"]


@dataclass(frozen=True)
class Plugin:
    kind: str
    marker: str | None
    blame_line: Callable[..., CommitRecord]
    commit_detail: Callable[..., CommitRecord]
    blame_file: Callable[..., str]
    file_log: Callable[..., list[CommitRecord]]


def _plugin(kind: str, marker: str | None, module) -> Plugin:
    return Plugin(
        kind=kind,
        marker=marker,
        blame_line=module.blame_line,
        commit_detail=module.commit_detail,
        blame_file=module.blame_file,
        file_log=module.file_log,
    )


PLUGINS: dict[str, Plugin] = {
    "git": _plugin("git", ".git", vcs_git),
    "svn": _plugin("svn", ".svn", vcs_svn),
    "hg": _plugin("hg", ".hg", vcs_hg),
    "p4": _plugin("p4", None, vcs_p4),
}


def get_plugin(kind: str) -> Plugin:
    """Return the plugin registered for *kind*.

    Raises:
        ValidationError: For an unknown kind.
    """
    try:
        return PLUGINS[kind]
    except KeyError:
        raise ValidationError(f"Unknown vcs: '{kind}'", {"allowed_values": list(PLUGINS)})


def resolve(path: str | Path, vcs: str | None = None) -> tuple[Plugin, Path]:
    """Detect the VCS for *path* and return its plugin and root."""
    found = detect.require_vcs(path, val.validate_vcs_kind(vcs))
    logger.info(f"Using {found.kind} backend rooted at {found.root}")
    return get_plugin(found.kind), found.root


def _blame_line(
    file: str, line: int | None, revision: str | None, vcs: str | None
) -> tuple[CommitRecord, Plugin, Path]:
    path = val.validate_file(file)
    line = val.validate_line_number(line, "line")
    if line is None:
        raise ValidationError("line is required")
    revision = val.validate_revision(revision)

    plugin, root = resolve(path, vcs)
    return plugin.blame_line(root, path, line, revision), plugin, root


def show_line(file: str, line: int, revision: str | None = None, vcs: str | None = None) -> CommitRecord:
    """Commit that last touched *line* of *file*."""
    return _blame_line(file, line, revision, vcs)[0]


def show_commit(
    path: str,
    commit_id: str | None = None,
    line: int | None = None,
    revision: str | None = None,
    vcs: str | None = None,
) -> CommitRecord:
    """Full commit (metadata and diff), by id or by the line it touched."""
    resolved = val.validate_path(path)
    commit_id = val.validate_revision(commit_id)
    line = val.validate_line_number(line, "line")

    if commit_id is None:
        if line is None:
            raise ValidationError("Either a commit id or a line number is required")
        record, plugin, root = _blame_line(str(resolved), line, revision, vcs)
        if record["uncommitted"]:
            raise ValidationError(
                f"Line {line} of {record['file']} is not committed yet",
                {"file": record["file"], "line": line},
            )
        commit_id = record["id"]
    else:
        plugin, root = resolve(resolved, vcs)

    target = resolved if resolved.is_file() else None
    return plugin.commit_detail(root, commit_id, target)


def blame(file: str, revision: str | None = None, vcs: str | None = None) -> tuple[str, str]:
    """Raw whole-file blame; returns ``(vcs_kind, text)``."""
    path = val.validate_file(file)
    revision = val.validate_revision(revision)
    plugin, root = resolve(path, vcs)
    return plugin.kind, plugin.blame_file(root, path, revision)


def log(
    file: str,
    max_count: int | None = None,
    revision: str | None = None,
    vcs: str | None = None,
) -> list[CommitRecord]:
    """History of *file*, most-recent-first."""
    path = val.validate_file(file)
    max_count = val.validate_max_count(max_count, config.LOG_MAX_COUNT)
    revision = val.validate_revision(revision)
    plugin, root = resolve(path, vcs)
    return plugin.file_log(root, path, max_count, revision)


def copy_text(record: CommitRecord, field: str = "id") -> str:
    """Text placed on the clipboard by the copy action."""
    field = val.validate_choice(field, COPY_FIELDS, "field")
    if field == "all":
        return formatter.format_commit(record)
    if record["uncommitted"] and field == "id":
        raise ValidationError("Line is not committed yet; there is no commit id to copy")
    return record[field]
