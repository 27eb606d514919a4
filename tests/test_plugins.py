"""Tests for the plugin registry and dispatch."""

from __future__ import annotations

import pytest

import config
import plugins
import records
from errors import ValidationError, VcsNotFoundError


class TestRegistry:
    """Tests for PLUGINS and get_plugin."""

    def test_four_backends(self):
        assert set(plugins.PLUGINS) == {"git", "svn", "hg", "p4"}

    def test_markers(self):
        assert plugins.get_plugin("git").marker == ".git"
        assert plugins.get_plugin("p4").marker is None

    def test_unknown(self):
        with pytest.raises(ValidationError):
            plugins.get_plugin("cvs")


class TestDispatch:
    """Tests for detector → adapter dispatch."""

    def test_show_line_git(self, temp_git_repo):
        record = plugins.show_line(str(temp_git_repo / "test.py"), 2)
        assert record["vcs"] == "git"
        assert record["summary"] == "Say goodbye"

    def test_show_line_no_vcs(self, sample_file):
        with pytest.raises(VcsNotFoundError):
            plugins.show_line(str(sample_file), 1)

    def test_show_line_requires_line(self, temp_git_repo):
        with pytest.raises(ValidationError):
            plugins.show_line(str(temp_git_repo / "test.py"), None)

    def test_show_line_rejects_bad_revision(self, temp_git_repo):
        with pytest.raises(ValidationError):
            plugins.show_line(str(temp_git_repo / "test.py"), 1, revision="--all")

    def test_forced_vcs_routes_to_backend(self, fake_runner, sample_file):
        (sample_file.parent / ".svn").mkdir()
        fake_runner({
            ("blame",): "    12      carol int a;\n",
            ("log", "-r", "12"): "r12 | carol | 2020-01-01 00:00:00 +0000 (Wed, 01 Jan 2020) | 1 line\n\nAdd a\n",
        })
        record = plugins.show_line(str(sample_file), 1, vcs="svn")
        assert record["short_id"] == "r12"

    def test_show_commit_by_line(self, temp_git_repo):
        record = plugins.show_commit(str(temp_git_repo / "test.py"), line=1)
        assert record["summary"] == "Initial commit"
        assert "+# Test file" in record["diff"]

    def test_show_commit_by_id_from_directory(self, temp_git_repo):
        record = plugins.show_commit(str(temp_git_repo), commit_id="HEAD")
        assert record["summary"] == "Say goodbye"

    def test_show_commit_needs_id_or_line(self, temp_git_repo):
        with pytest.raises(ValidationError):
            plugins.show_commit(str(temp_git_repo / "test.py"))

    def test_show_commit_uncommitted_line(self, temp_git_repo):
        path = temp_git_repo / "test.py"
        path.write_text(path.read_text() + "extra\n")
        with pytest.raises(ValidationError) as exc_info:
            plugins.show_commit(str(path), line=3)
        assert "not committed" in exc_info.value.message

    def test_show_commit_by_line_detects_once(self, monkeypatch, fake_runner, sample_file):
        monkeypatch.setattr(config, "P4_PROBE", True)
        change = "Change:\t42\n\nUser:\tbob\n\nStatus:\tsubmitted\n\nDescription:\n\tAdd a\n"
        fake = fake_runner({
            ("client", "-o"): f"Client:\tws\n\nRoot:\t{sample_file.parent}\n",
            ("annotate",): "42: int a;\n",
            ("change", "-o", "42"): change,
            ("describe", "-du", "42"): "Change 42 by bob\n",
        })
        record = plugins.show_commit(str(sample_file), line=1)
        assert record["id"] == "42"
        assert [c[1] for c in fake.calls].count("client") == 1

    def test_blame_returns_kind(self, temp_git_repo):
        kind, text = plugins.blame(str(temp_git_repo / "test.py"))
        assert kind == "git"
        assert "Other Dev" in text

    def test_log_default_count(self, temp_git_repo):
        assert len(plugins.log(str(temp_git_repo / "test.py"))) == 2


class TestCopyText:
    """Tests for copy_text."""

    @pytest.fixture
    def record(self):
        return records.make_record("git", "c" * 40, author="A", message="Subject\n\nBody")

    def test_fields(self, record):
        assert plugins.copy_text(record, "id") == "c" * 40
        assert plugins.copy_text(record, "summary") == "Subject"
        assert plugins.copy_text(record, "message") == "Subject\n\nBody"
        assert plugins.copy_text(record, "all").startswith("Commit: cccccccc")

    def test_unknown_field(self, record):
        with pytest.raises(ValidationError):
            plugins.copy_text(record, "author")

    def test_uncommitted_has_no_id(self):
        with pytest.raises(ValidationError):
            plugins.copy_text(records.uncommitted_record("git", "a.py", 1), "id")
