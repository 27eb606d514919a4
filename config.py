"""
Runtime configuration for vc-msg.

Every setting is read once from the environment at import time.  Callers
read the module attributes at call time (``config.COMMAND_TIMEOUT``), so
tests can monkeypatch them.
"""

from __future__ import annotations

import os
import shlex

# Seconds before a VCS command is abandoned
COMMAND_TIMEOUT = float(os.environ.get("VC_MSG_TIMEOUT", "30"))

# Executables for the CLI-driven backends.  Git goes through GitPython,
# which honours GIT_PYTHON_GIT_EXECUTABLE instead.
SVN_EXECUTABLE = os.environ.get("VC_MSG_SVN", "svn")
HG_EXECUTABLE = os.environ.get("VC_MSG_HG", "hg")
P4_EXECUTABLE = os.environ.get("VC_MSG_P4", "p4")

# Set VC_MSG_P4_PROBE=0 to skip the `p4 client -o` probe entirely
P4_PROBE = os.environ.get("VC_MSG_P4_PROBE", "1").strip() != "0"

# strftime format for the Date: line
DATE_FORMAT = os.environ.get("VC_MSG_DATE_FORMAT", "%Y-%m-%d %H:%M:%S %z")

SHORT_ID_LENGTH = int(os.environ.get("VC_MSG_SHORT_ID_LENGTH", "8"))

# Default number of entries for the log action
LOG_MAX_COUNT = int(os.environ.get("VC_MSG_LOG_MAX_COUNT", "20"))

# e.g. "xclip -selection clipboard", "pbcopy", "wl-copy"
CLIPBOARD_COMMAND = os.environ.get("VC_MSG_CLIPBOARD_COMMAND", "")


def clipboard_argv() -> list[str]:
    """Split the configured clipboard command into an argv list."""
    return shlex.split(CLIPBOARD_COMMAND) if CLIPBOARD_COMMAND.strip() else []
