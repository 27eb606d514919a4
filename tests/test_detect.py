"""Tests for VCS detection."""

from __future__ import annotations

import pytest

import config
import detect
import runner
from errors import VcsNotFoundError

P4_CLIENT_SPEC = """# A Perforce Client Specification.
#
#  Root:        The base directory of the client workspace.

Client:\tdev-ws

Owner:\talice

Root:\t{root}

Options:\tnoallwrite noclobber nocompress unlocked nomodtime normdir
"""


class TestMarkers:
    """Tests for marker-based detection."""

    def test_no_vcs(self, temp_dir):
        assert detect.detect_vcs(temp_dir) is None

    @pytest.mark.parametrize("kind, marker", detect.MARKERS)
    def test_each_marker(self, temp_dir, kind, marker):
        (temp_dir / marker).mkdir()
        nested = temp_dir / "src" / "pkg"
        nested.mkdir(parents=True)
        target = nested / "mod.py"
        target.write_text("x = 1\n")

        found = detect.detect_vcs(target)
        assert found == detect.Detection(kind, temp_dir)

    def test_git_file_marker(self, temp_dir):
        """A .git file (worktree/submodule) counts as a marker."""
        (temp_dir / ".git").write_text("gitdir: /elsewhere/.git/worktrees/x\n")
        assert detect.detect_vcs(temp_dir).kind == "git"

    def test_nearest_marker_wins(self, temp_dir):
        (temp_dir / ".hg").mkdir()
        inner = temp_dir / "vendor" / "lib"
        inner.mkdir(parents=True)
        (inner / ".git").mkdir()

        assert detect.detect_vcs(inner) == detect.Detection("git", inner)
        assert detect.detect_vcs(temp_dir / "vendor") == detect.Detection("hg", temp_dir)

    def test_same_directory_order(self, temp_dir):
        (temp_dir / ".svn").mkdir()
        (temp_dir / ".git").mkdir()
        assert detect.detect_vcs(temp_dir).kind == "git"

    def test_find_marker_root(self, temp_dir):
        (temp_dir / ".svn").mkdir()
        deep = temp_dir / "a" / "b"
        deep.mkdir(parents=True)
        assert detect.find_marker_root(deep, ".svn") == temp_dir
        assert detect.find_marker_root(deep, ".hg") is None


class TestPerforceProbe:
    """Tests for the p4 client probe."""

    def test_parse_client_root(self):
        assert detect.parse_p4_client_root(P4_CLIENT_SPEC.format(root="/ws/dev")).as_posix() == "/ws/dev"

    def test_parse_null_root(self):
        assert detect.parse_p4_client_root("Root:\tnull\n") is None

    def test_probe_inside_client(self, monkeypatch, fake_runner, sample_file):
        monkeypatch.setattr(config, "P4_PROBE", True)
        fake_runner({("client", "-o"): P4_CLIENT_SPEC.format(root=sample_file.parent)})
        assert detect.detect_vcs(sample_file) == detect.Detection("p4", sample_file.parent)

    def test_probe_outside_client(self, monkeypatch, fake_runner, sample_file):
        monkeypatch.setattr(config, "P4_PROBE", True)
        fake_runner({("client", "-o"): P4_CLIENT_SPEC.format(root="/definitely/not/here")})
        assert detect.detect_vcs(sample_file) is None

    def test_probe_failure_means_not_p4(self, monkeypatch, fake_runner, sample_file):
        monkeypatch.setattr(config, "P4_PROBE", True)
        fake_runner({("client", "-o"): runner.CmdResult(1, "", "Perforce client error")})
        assert detect.probe_p4(sample_file) is None

    def test_missing_p4_binary(self, monkeypatch, sample_file):
        monkeypatch.setattr(config, "P4_PROBE", True)
        monkeypatch.setattr(config, "P4_EXECUTABLE", "p4-binary-that-does-not-exist")
        assert detect.probe_p4(sample_file) is None

    def test_probe_disabled(self, fake_runner, sample_file):
        fake = fake_runner({("client", "-o"): P4_CLIENT_SPEC.format(root=sample_file.parent)})
        assert detect.probe_p4(sample_file) is None
        assert fake.calls == []

    def test_markers_checked_before_probe(self, monkeypatch, fake_runner, temp_dir):
        monkeypatch.setattr(config, "P4_PROBE", True)
        (temp_dir / ".git").mkdir()
        fake = fake_runner({("client", "-o"): P4_CLIENT_SPEC.format(root=temp_dir)})
        assert detect.detect_vcs(temp_dir).kind == "git"
        assert fake.calls == []


class TestRequireVcs:
    """Tests for require_vcs."""

    def test_raises_when_nothing_found(self, temp_dir):
        with pytest.raises(VcsNotFoundError):
            detect.require_vcs(temp_dir)

    def test_forced_kind_only_looks_for_its_marker(self, temp_dir):
        (temp_dir / ".git").mkdir()
        with pytest.raises(VcsNotFoundError):
            detect.require_vcs(temp_dir, "hg")
        assert detect.require_vcs(temp_dir, "git").root == temp_dir

    def test_forced_p4_without_probe_uses_file_directory(self, sample_file):
        found = detect.require_vcs(sample_file, "p4")
        assert found == detect.Detection("p4", sample_file.parent)

    def test_forced_p4_with_failing_probe_uses_file_directory(self, monkeypatch, fake_runner, sample_file):
        monkeypatch.setattr(config, "P4_PROBE", True)
        fake = fake_runner({("client", "-o"): runner.CmdResult(1, "", "Perforce client error")})
        found = detect.require_vcs(sample_file, "p4")
        assert found == detect.Detection("p4", sample_file.parent)
        assert len(fake.calls) == 1

    def test_forced_p4_uses_client_root(self, monkeypatch, fake_runner, temp_dir, sample_file):
        monkeypatch.setattr(config, "P4_PROBE", True)
        fake_runner({("client", "-o"): P4_CLIENT_SPEC.format(root=temp_dir)})
        assert detect.require_vcs(sample_file, "p4").root == temp_dir
