"""
vc-msg MCP Server

Exposes line-level commit lookup to editors and agents over the Model
Context Protocol (MCP).  The host supplies the file and line it is
showing; vc-msg detects the VCS, runs its blame command, and returns
both the structured commit record and ready-to-display text.

    1. "Which VCS?"          → detect_vcs
    2. "Who changed this?"   → show_line_commit
    3. "What else changed?"  → show_commit
    4. "Whole file?"         → blame_file / file_log
"""

from __future__ import annotations

from typing import Literal, cast

from mcp.server.fastmcp import FastMCP

import api_types
import detect
import errors
import formatter
import logging_config
import plugins
import validation as val

# ── Initialize logging ───────────────────────────────────────────────────
logging_config.setup_logging()
logger = logging_config.get_server_logger()

VcsKind = Literal["git", "svn", "hg", "p4"]

# ── Initialize the FastMCP server ────────────────────────────────────────
mcp = FastMCP(
    "vc-msg",
    instructions="""
Use these tools to answer "who last changed this line, when, and why?"
for files under Git, Subversion, Mercurial or Perforce.

1. show_line_commit(file, line) is the main entry point: it returns the commit
   that last touched the line, plus a formatted text block to show the user.
2. show_commit(path, commit_id=... or line=...) adds the full diff.
3. blame_file(file) and file_log(file) give whole-file context.
4. detect_vcs(path) reports which VCS (if any) manages a path.

Line numbers are 1-based. A result with "uncommitted": true means the line
only exists in the working copy.
"""
)


# ── Tool 1: detect_vcs ────────────────────────────────────────────────────
@mcp.tool()
def detect_vcs(path: str) -> api_types.DetectResponse | api_types.ErrorResponse:
    """Report which version-control system manages *path*.

    Args:
        path: A file or directory.

    Returns:
        Dictionary with vcs ("git", "svn", "hg", "p4" or null) and root.
    """
    with logging_config.ToolLogger("detect_vcs", path=path):
        try:
            resolved = val.validate_path(path)
            found = detect.detect_vcs(resolved)
            return cast(api_types.DetectResponse, {
                "status": "ok",
                "path": str(resolved),
                "vcs": found.kind if found else None,
                "root": str(found.root) if found else None,
            })
        except errors.VcMsgError as e:
            return e.to_dict()
        except Exception as e:
            return errors.format_error(e)


# ── Tool 2: show_line_commit ──────────────────────────────────────────────
@mcp.tool()
def show_line_commit(
    file: str,
    line: int,
    revision: str | None = None,
    vcs: VcsKind | None = None,
) -> api_types.ShowLineCommitResponse | api_types.ErrorResponse:
    """USE THIS TOOL when the user asks "who wrote this line?", "why is this here?"
    or "when did this change?" about a specific line of a file.

    Args:
        file: Path to the file.
        line: 1-based line number.
        revision: Blame the file as of this revision instead of the working copy.
        vcs: Skip detection and force a backend.

    Returns:
        Dictionary with the commit record (result) and display text.
    """
    with logging_config.ToolLogger("show_line_commit", file=file, line=line, revision=revision) as log:
        try:
            record = plugins.show_line(file, line, revision, vcs)
            log.set_result_count(1)
            return cast(api_types.ShowLineCommitResponse, {
                "status": "ok",
                "result": record,
                "text": formatter.format_commit(record),
            })
        except errors.VcMsgError as e:
            return e.to_dict()
        except Exception as e:
            return errors.format_error(e)


# ── Tool 3: show_commit ───────────────────────────────────────────────────
@mcp.tool()
def show_commit(
    path: str,
    commit_id: str | None = None,
    line: int | None = None,
    revision: str | None = None,
    vcs: VcsKind | None = None,
) -> api_types.ShowCommitResponse | api_types.ErrorResponse:
    """Show a full commit including its diff.

    Give either commit_id, or line (the commit that last touched that line
    of *path* is shown).

    Args:
        path: File or directory inside the working copy.
        commit_id: Commit hash, revision or change number.
        line: 1-based line number, used when commit_id is not given.
        revision: Revision to blame at when resolving *line*.
        vcs: Skip detection and force a backend.
    """
    with logging_config.ToolLogger("show_commit", path=path, commit_id=commit_id, line=line):
        try:
            record = plugins.show_commit(path, commit_id, line, revision, vcs)
            return cast(api_types.ShowCommitResponse, {
                "status": "ok",
                "result": record,
                "text": formatter.format_detail(record),
            })
        except errors.VcMsgError as e:
            return e.to_dict()
        except Exception as e:
            return errors.format_error(e)


# ── Tool 4: blame_file ────────────────────────────────────────────────────
@mcp.tool()
def blame_file(
    file: str,
    revision: str | None = None,
    vcs: VcsKind | None = None,
) -> api_types.BlameFileResponse | api_types.ErrorResponse:
    """Return the VCS's own blame/annotate output for a whole file."""
    with logging_config.ToolLogger("blame_file", file=file, revision=revision):
        try:
            kind, text = plugins.blame(file, revision, vcs)
            return cast(api_types.BlameFileResponse, {
                "status": "ok",
                "file": file,
                "vcs": kind,
                "blame": text,
            })
        except errors.VcMsgError as e:
            return e.to_dict()
        except Exception as e:
            return errors.format_error(e)


# ── Tool 5: file_log ──────────────────────────────────────────────────────
@mcp.tool()
def file_log(
    file: str,
    max_count: int = 0,
    revision: str | None = None,
    vcs: VcsKind | None = None,
) -> api_types.FileLogResponse | api_types.ErrorResponse:
    """Return the commit history of a file, most recent first.

    Args:
        file: Path to the file.
        max_count: Maximum commits (0 means the configured default).
        revision: Start the history at this revision.
        vcs: Skip detection and force a backend.
    """
    with logging_config.ToolLogger("file_log", file=file, max_count=max_count) as log:
        try:
            entries = plugins.log(file, max_count, revision, vcs)
            log.set_result_count(len(entries))
            return cast(api_types.FileLogResponse, {
                "status": "ok",
                "file": file,
                "results": entries,
                "text": formatter.format_log(entries),
            })
        except errors.VcMsgError as e:
            return e.to_dict()
        except Exception as e:
            return errors.format_error(e)


# ── Entrypoint ────────────────────────────────────────────────────────────
def main():
    """Entry point for the MCP server when installed as a package."""
    logger.info("Starting vc-msg MCP server")
    mcp.run()


if __name__ == "__main__":
    main()
