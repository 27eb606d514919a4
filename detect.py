"""
Detect which version-control system manages a path.

Git, Subversion and Mercurial are recognised by a marker entry in the
directory or one of its parents; the nearest marker wins.  Perforce keeps
no marker in the workspace, so it is probed with ``p4 client -o`` only
when no marker was found.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import config
import logging_config
import runner
from errors import CommandError, VcsNotFoundError

logger = logging_config.get_detect_logger()

# Checked in this order inside each directory
MARKERS: tuple[tuple[str, str], ...] = (
    ("git", ".git"),
    ("svn", ".svn"),
    ("hg", ".hg"),
)

_P4_ROOT_RE = re.compile(r"^Root:\s+(.+?)\s*$", re.MULTILINE)


@dataclass(frozen=True)
class Detection:
    kind: str
    root: Path


def _start_dir(path: str | Path) -> Path:
    p = Path(path).expanduser().resolve()
    return p if p.is_dir() else p.parent


def find_marker_root(start: str | Path, marker: str) -> Path | None:
    """Walk upward from *start* and return the first directory holding *marker*."""
    current = _start_dir(start)
    for directory in (current, *current.parents):
        if (directory / marker).exists():
            return directory
    return None


def parse_p4_client_root(spec_text: str) -> Path | None:
    """Extract the ``Root:`` field from ``p4 client -o`` output."""
    m = _P4_ROOT_RE.search(spec_text)
    if not m:
        return None
    root = m.group(1)
    if root.lower() == "null":
        return None
    return Path(root).expanduser()


def probe_p4(path: str | Path) -> Path | None:
    """Return the Perforce client root when *path* lies inside it."""
    if not config.P4_PROBE:
        return None

    start = _start_dir(path)
    try:
        res = runner.run([config.P4_EXECUTABLE, "client", "-o"], cwd=start)
    except CommandError as exc:
        logger.debug(f"p4 probe unavailable: {exc.message}")
        return None
    if res.code != 0:
        return None

    root = parse_p4_client_root(res.stdout)
    if root is None:
        return None
    try:
        root = root.resolve()
        Path(path).expanduser().resolve().relative_to(root)
    except ValueError:
        logger.debug(f"{path} is outside p4 client root {root}")
        return None
    return root


def detect_vcs(path: str | Path) -> Detection | None:
    """Return the VCS managing *path*, or None."""
    current = _start_dir(path)
    for directory in (current, *current.parents):
        for kind, marker in MARKERS:
            if (directory / marker).exists():
                logger.debug(f"Detected {kind} at {directory}")
                return Detection(kind, directory)

    p4_root = probe_p4(path)
    if p4_root is not None:
        logger.debug(f"Detected p4 client root {p4_root}")
        return Detection("p4", p4_root)
    return None


def require_vcs(path: str | Path, kind: str | None = None) -> Detection:
    """Like ``detect_vcs`` but raise when nothing is found.

    With an explicit *kind* only that VCS is looked for.

    Raises:
        VcsNotFoundError: When no (matching) VCS manages *path*.
    """
    if kind is None:
        found = detect_vcs(path)
        if found is None:
            raise VcsNotFoundError(
                f"No version control system found for {path}",
                {"checked": [m for _, m in MARKERS] + ["p4"]},
            )
        return found

    if kind == "p4":
        root = probe_p4(path)
        if root is None:
            root = _start_dir(path)
            logger.debug(f"No p4 client root found; using {root}")
        return Detection("p4", root)

    marker = dict(MARKERS).get(kind)
    root = find_marker_root(path, marker) if marker else None
    if root is None:
        raise VcsNotFoundError(f"{path} is not inside a {kind} repository", {"marker": marker})
    return Detection(kind, root)
