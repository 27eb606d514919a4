"""Tests for the subprocess runner."""

from __future__ import annotations

import sys

import pytest

import config
import runner
from errors import CommandError


class TestRun:
    """Tests for run()."""

    def test_captures_stdout(self):
        res = runner.run([sys.executable, "-c", "print('hi')"])
        assert res.code == 0
        assert res.stdout.strip() == "hi"

    def test_nonzero_exit_does_not_raise(self):
        res = runner.run([sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])
        assert res.code == 3
        assert res.stderr == "bad"

    def test_passes_stdin(self):
        res = runner.run([sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"], input_text="abc")
        assert res.stdout.strip() == "ABC"

    def test_runs_in_cwd(self, temp_dir):
        res = runner.run([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=temp_dir)
        assert res.stdout.strip() == str(temp_dir)

    def test_missing_executable(self):
        with pytest.raises(CommandError) as exc_info:
            runner.run(["vc-msg-no-such-binary"])
        assert "not found" in exc_info.value.message

    def test_timeout(self, monkeypatch):
        monkeypatch.setattr(config, "COMMAND_TIMEOUT", 0.2)
        with pytest.raises(CommandError) as exc_info:
            runner.run([sys.executable, "-c", "import time; time.sleep(5)"])
        assert "timed out" in exc_info.value.message


class TestCheckOutput:
    """Tests for check_output()."""

    def test_returns_stdout(self):
        assert runner.check_output([sys.executable, "-c", "print('ok')"]).strip() == "ok"

    def test_failure_carries_stderr(self):
        with pytest.raises(CommandError) as exc_info:
            runner.check_output([sys.executable, "-c", "import sys; sys.stderr.write('no such revision'); sys.exit(1)"])
        assert exc_info.value.message == "no such revision"
        assert exc_info.value.details["exit_code"] == 1
