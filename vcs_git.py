"""
Git backend for vc-msg.

Uses the ``gitpython`` library: ``git.Repo`` for commit metadata and the
``repo.git`` command wrapper for ``blame``/``show`` so their fixed-format
output can be parsed directly.

Design rules
------------
- Line attribution comes from ``git blame --porcelain`` on one line.
- The all-zero sha marks a line that is not committed yet.
- GitPython exceptions are translated to vc-msg errors at this boundary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import git
from git.exc import CommandError as GitExecError
from git.exc import InvalidGitRepositoryError, NoSuchPathError, ODBError

import logging_config
import records
from api_types import CommitRecord
from errors import CommandError, ParseError, VcsNotFoundError

logger = logging_config.get_vcs_logger("git")

NULL_SHA = "0" * 40

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_repo(root: str | Path) -> git.Repo:
    """Open the Git repository that contains *root*.

    Raises:
        VcsNotFoundError: When no repository can be opened.
    """
    try:
        return git.Repo(str(Path(root).resolve()), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise VcsNotFoundError(f"Git repository not found: {exc}") from exc


def _relpath(repo: git.Repo, file: str | Path) -> str:
    """Path of *file* relative to the work tree, with forward slashes."""
    top = Path(repo.working_tree_dir).resolve()
    try:
        return Path(file).resolve().relative_to(top).as_posix()
    except ValueError:
        raise CommandError(f"{file} is outside the Git work tree {top}")


def _git_failure(operation: str, exc: GitExecError) -> CommandError:
    stderr = exc.stderr.strip() if isinstance(exc.stderr, str) else ""
    # GitPython wraps stderr as "  stderr: '...'"
    stderr = stderr.removeprefix("stderr:").strip().strip("'").strip()
    return CommandError(
        f"git {operation} failed: {stderr or exc}",
        {"command": [str(c) for c in exc.command] if isinstance(exc.command, list) else str(exc.command),
         "exit_code": exc.status},
    )


def _commit_to_record(commit: git.Commit, file: str = "", line: int | None = None) -> CommitRecord:
    """Convert a ``git.Commit`` to a ``CommitRecord`` (author time and zone)."""
    # GitPython stores offsets as seconds *west* of UTC
    return records.make_record(
        "git",
        commit.hexsha,
        author=str(commit.author.name or ""),
        author_email=str(commit.author.email or ""),
        timestamp=int(commit.authored_date),
        tz=records.tz_string(-commit.author_tz_offset),
        message=commit.message if isinstance(commit.message, str) else commit.message.decode("utf-8", "replace"),
        file=file,
        line=line,
    )


# ---------------------------------------------------------------------------
# 1. Porcelain parsing
# ---------------------------------------------------------------------------


def parse_blame_porcelain(text: str) -> dict[str, Any]:
    """Parse ``git blame --porcelain`` output for a single line.

    Returns:
        Dict with ``id``, ``author``, ``author_mail``, ``author_time``,
        ``author_tz``, ``summary``, ``filename`` and ``content``.

    Raises:
        ParseError: When the header line is missing.
    """
    lines = text.splitlines()
    if not lines:
        raise ParseError("git blame produced no output")

    header = lines[0].split()
    if not header or len(header[0]) not in (40, 64) or not all(c in "0123456789abcdef" for c in header[0]):
        raise ParseError(f"Unexpected git blame header: {lines[0]!r}")

    entry: dict[str, Any] = {
        "id": header[0],
        "author": "",
        "author_mail": "",
        "author_time": None,
        "author_tz": "+0000",
        "summary": "",
        "filename": "",
        "content": "",
    }
    for raw in lines[1:]:
        if raw.startswith("\t"):
            entry["content"] = raw[1:]
            break
        key, _, value = raw.partition(" ")
        if key == "author":
            entry["author"] = value
        elif key == "author-mail":
            entry["author_mail"] = value.strip("<>")
        elif key == "author-time":
            try:
                entry["author_time"] = int(value)
            except ValueError:
                raise ParseError(f"Bad author-time in git blame output: {value!r}")
        elif key == "author-tz":
            entry["author_tz"] = value
        elif key == "summary":
            entry["summary"] = value
        elif key == "filename":
            entry["filename"] = value
    return entry


# ---------------------------------------------------------------------------
# 2. Line attribution
# ---------------------------------------------------------------------------


def blame_line(root: str | Path, file: str | Path, line: int, revision: str | None = None) -> CommitRecord:
    """Return the commit that last touched *line* of *file*.

    Without *revision* the work-tree version of the file is blamed, so
    uncommitted edits come back as an uncommitted record.
    """
    repo = get_repo(root)
    rel = _relpath(repo, file)

    args: list[str] = ["-w", "-L", f"{line},+1", "--porcelain"]
    if revision:
        args.append(revision)
    args.extend(["--", rel])

    try:
        out = repo.git.blame(*args)
    except GitExecError as exc:
        raise _git_failure("blame", exc) from exc

    entry = parse_blame_porcelain(out)
    if entry["id"].strip("0") == "":
        logger.debug(f"{rel}:{line} is not committed yet")
        return records.uncommitted_record("git", rel, line)

    try:
        commit = repo.commit(entry["id"])
    except (ValueError, ODBError, GitExecError) as exc:
        # Metadata lookup failed; fall back to what blame already told us
        logger.warning(f"Could not load commit {entry['id']}: {exc}")
        return records.make_record(
            "git",
            entry["id"],
            author=entry["author"],
            author_email=entry["author_mail"],
            timestamp=entry["author_time"],
            tz=entry["author_tz"],
            message=entry["summary"],
            file=rel,
            line=line,
        )
    return _commit_to_record(commit, rel, line)


# ---------------------------------------------------------------------------
# 3. Commit detail (metadata + diff)
# ---------------------------------------------------------------------------


def commit_detail(root: str | Path, commit_id: str, file: str | Path | None = None) -> CommitRecord:
    """Return full metadata and the ``git show`` patch for *commit_id*.

    Args:
        file: If given, limit the patch to this file.
    """
    repo = get_repo(root)
    try:
        commit = repo.commit(commit_id)
    except (ValueError, ODBError, GitExecError) as exc:
        raise CommandError(f"Could not resolve commit '{commit_id}': {exc}") from exc

    rel = _relpath(repo, file) if file else ""
    args = ["--pretty=fuller", "--no-color", commit.hexsha]
    if rel:
        args.extend(["--", rel])
    try:
        diff_text = repo.git.show(*args)
    except GitExecError as exc:
        raise _git_failure("show", exc) from exc

    record = _commit_to_record(commit, rel)
    record["diff"] = diff_text
    return record


# ---------------------------------------------------------------------------
# 4. Whole-file blame
# ---------------------------------------------------------------------------


def blame_file(root: str | Path, file: str | Path, revision: str | None = None) -> str:
    """Return plain ``git blame`` output for the whole file."""
    repo = get_repo(root)
    rel = _relpath(repo, file)
    args = ["-w"]
    if revision:
        args.append(revision)
    args.extend(["--", rel])
    try:
        return repo.git.blame(*args)
    except GitExecError as exc:
        raise _git_failure("blame", exc) from exc


# ---------------------------------------------------------------------------
# 5. File history
# ---------------------------------------------------------------------------


def file_log(root: str | Path, file: str | Path, max_count: int, revision: str | None = None) -> list[CommitRecord]:
    """Return the commits touching *file*, most-recent-first."""
    repo = get_repo(root)
    rel = _relpath(repo, file)
    try:
        return [
            _commit_to_record(commit, rel)
            for commit in repo.iter_commits(revision or "HEAD", paths=rel, max_count=max_count)
        ]
    except ValueError as exc:
        raise CommandError(f"git log failed: {exc}") from exc
    except GitExecError as exc:
        raise _git_failure("log", exc) from exc
