"""
Subprocess shell-out for the CLI-driven backends (svn, hg, p4).

``run`` never raises for a non-zero exit; it only raises when the command
could not be run at all.  ``check_output`` is the strict variant.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

import config
import logging_config
from errors import CommandError

logger = logging_config.get_runner_logger()


@dataclass(frozen=True)
class CmdResult:
    code: int
    stdout: str
    stderr: str


def run(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    input_text: str | None = None,
) -> CmdResult:
    """Run *cmd* and capture its output as text.

    Raises:
        CommandError: When the executable is missing or the command times out.
    """
    timeout = config.COMMAND_TIMEOUT if timeout is None else timeout
    with logging_config.log_timing(" ".join(cmd), logger):
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                input=input_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CommandError(
                f"Executable not found: {cmd[0]}",
                {"command": cmd, "exception": str(exc)},
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandError(
                f"Command timed out after {timeout:g}s: {' '.join(cmd)}",
                {"command": cmd, "timeout": timeout},
            ) from exc
    if proc.returncode != 0:
        logger.debug(f"{cmd[0]} exited {proc.returncode}: {proc.stderr.strip()}")
    return CmdResult(proc.returncode, proc.stdout, proc.stderr)


def check_output(cmd: list[str], cwd: str | Path | None = None) -> str:
    """Run *cmd* and return stdout, raising ``CommandError`` on failure."""
    res = run(cmd, cwd=cwd)
    if res.code != 0:
        message = res.stderr.strip() or f"{cmd[0]} exited with status {res.code}"
        raise CommandError(
            message,
            {"command": cmd, "exit_code": res.code},
        )
    return res.stdout
