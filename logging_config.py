"""
Structured logging configuration for vc-msg.

Provides configurable logging with environment variable control.
Log level can be set via VC_MSG_LOG_LEVEL environment variable.
Logs always go to stderr so stdout stays reserved for command output.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from typing import TextIO

# Default log level from environment or WARNING
LOG_LEVEL = os.environ.get("VC_MSG_LOG_LEVEL", "WARNING").upper()

# Log format with timestamp, module, level, and message
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Track if logging has been initialized
_initialized = False


@contextmanager
def log_timing(operation_name: str, logger: logging.Logger):
    """Context manager to log operation timing.

    Args:
        operation_name: Name of the operation being timed.
        logger: Logger instance to use for logging.

    Example:
        with log_timing("git blame", logger):
            # ... run the command ...
    """
    start = time.perf_counter()
    logger.debug(f"{operation_name} started")
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug(f"{operation_name} completed in {elapsed:.2f}s")


def setup_logging(level: str = LOG_LEVEL, stream: TextIO = sys.stderr, force: bool = False) -> logging.Logger:
    """Configure structured logging for vc-msg.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream for logs (default: stderr)
        force: Reconfigure even if logging was already set up

    Returns:
        Configured root logger for vc_msg
    """
    global _initialized

    logger = logging.getLogger("vc_msg")

    # Avoid adding duplicate handlers
    if _initialized and logger.handlers and not force:
        return logger

    level_value = getattr(logging, level.upper(), logging.WARNING)
    logger.setLevel(level_value)

    handler = logging.StreamHandler(stream)
    handler.setLevel(level_value)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger.handlers.clear()
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    _initialized = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (e.g., "cli", "detect", "git")

    Returns:
        Logger instance for the module
    """
    if not _initialized:
        setup_logging()

    return logging.getLogger(f"vc_msg.{name}")


class ToolLogger:
    """Context manager for logging tool and command invocations with timing.

    Usage:
        with ToolLogger("show_line_commit", file="a.py", line=3) as log:
            record = plugins.show_line(...)
            log.set_result_count(1)
    """

    def __init__(self, tool_name: str, failure_level: int = logging.ERROR, **params):
        self.tool_name = tool_name
        self.failure_level = failure_level
        self.params = params
        self.logger = get_logger("tools")
        self.start_time: datetime | None = None
        self.result_count: int | None = None
        self.error: str | None = None

    def __enter__(self) -> ToolLogger:
        self.start_time = datetime.now()
        safe_params = {k: v for k, v in self.params.items() if v is not None}
        self.logger.info(f"Tool invoked: {self.tool_name} params={safe_params}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000 if self.start_time else 0

        if exc_type is not None:
            self.error = str(exc_val)
            self.logger.log(
                self.failure_level,
                f"Tool failed: {self.tool_name} error={self.error} duration={duration_ms:.1f}ms"
            )
        else:
            count_str = f" count={self.result_count}" if self.result_count is not None else ""
            self.logger.info(
                f"Tool completed: {self.tool_name}{count_str} duration={duration_ms:.1f}ms"
            )

        return False  # Don't suppress exceptions

    def set_result_count(self, count: int) -> None:
        """Set the number of results returned by the tool."""
        self.result_count = count


def get_cli_logger() -> logging.Logger:
    """Get logger for the command-line shell."""
    return get_logger("cli")


def get_server_logger() -> logging.Logger:
    """Get logger for the MCP server."""
    return get_logger("server")


def get_detect_logger() -> logging.Logger:
    """Get logger for VCS detection."""
    return get_logger("detect")


def get_runner_logger() -> logging.Logger:
    """Get logger for subprocess invocations."""
    return get_logger("runner")


def get_vcs_logger(kind: str) -> logging.Logger:
    """Get logger for one VCS backend (git, svn, hg, p4)."""
    return get_logger(f"vcs.{kind}")
