"""
Shared test fixtures for vc-msg tests.
"""

from __future__ import annotations

import subprocess
import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

import config
import runner


@pytest.fixture(autouse=True)
def no_p4_probe(monkeypatch):
    """Keep a locally installed p4 client from influencing detection."""
    monkeypatch.setattr(config, "P4_PROBE", False)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for file tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def temp_git_repo(temp_dir):
    """Provide a temporary git repository with two commits.

    test.py after both commits::

        1  # Test file               (Initial commit, Test User)
        2  print('goodbye')          (Say goodbye, Other Dev)
    """
    _git(temp_dir, "init")
    _git(temp_dir, "config", "user.email", "test@test.com")
    _git(temp_dir, "config", "user.name", "Test User")
    _git(temp_dir, "config", "commit.gpgsign", "false")

    test_file = temp_dir / "test.py"
    test_file.write_text("# Test file\nprint('hello')\n")
    _git(temp_dir, "add", ".")
    _git(temp_dir, "commit", "-m", "Initial commit")

    test_file.write_text("# Test file\nprint('goodbye')\n")
    _git(temp_dir, "add", ".")
    _git(
        temp_dir,
        "-c", "user.name=Other Dev",
        "-c", "user.email=other@test.com",
        "commit", "-m", "Say goodbye\n\nThe greeting was wrong.",
        "--date", "2021-03-04 05:06:07 +0200",
    )

    yield temp_dir


class FakeRunner:
    """Stand-in for ``runner.run`` that answers by command prefix.

    ``responses`` maps a tuple of leading argv items (after the executable)
    to a ``CmdResult``; the longest matching prefix wins.
    """

    def __init__(self, responses: dict[tuple[str, ...], runner.CmdResult]):
        self.responses = responses
        self.calls: list[list[str]] = []

    def __call__(self, cmd, cwd=None, timeout=None, input_text=None):
        self.calls.append(list(cmd))
        args = [a for a in cmd[1:] if a not in ("--non-interactive", "--noninteractive")]
        best = None
        for prefix, result in self.responses.items():
            if tuple(args[:len(prefix)]) == prefix and (best is None or len(prefix) > len(best[0])):
                best = (prefix, result)
        if best is None:
            return runner.CmdResult(1, "", f"unexpected command: {cmd}")
        return best[1]


@pytest.fixture
def fake_runner(monkeypatch):
    """Install a FakeRunner; call the fixture with the response table."""

    def install(responses: dict[tuple[str, ...], str | runner.CmdResult]) -> FakeRunner:
        table = {
            k: v if isinstance(v, runner.CmdResult) else runner.CmdResult(0, v, "")
            for k, v in responses.items()
        }
        fake = FakeRunner(table)
        monkeypatch.setattr(runner, "run", fake)
        return fake

    return install


@pytest.fixture
def sample_file(temp_dir):
    """A three-line file inside a bare temporary directory."""
    path = temp_dir / "sample.c"
    path.write_text("int a;\nint b;\nint c;\n")
    return path
