"""Tests for the text formatter."""

from __future__ import annotations

import json

import pytest

import formatter
import records
from errors import ValidationError


@pytest.fixture
def record():
    return records.make_record(
        "git",
        "4b825dc642cb6eb9a060e54bf8d69288fbee4904",
        author="Jane Doe",
        author_email="jane@example.com",
        timestamp=1614827167,
        tz="+0200",
        message="Say goodbye\n\nThe greeting was wrong.",
        file="test.py",
        line=2,
    )


class TestFormatCommit:
    """Tests for format_commit."""

    def test_default_block(self, record):
        assert formatter.format_commit(record) == (
            "Commit: 4b825dc6\n"
            "Author: Jane Doe <jane@example.com>\n"
            "Date: 2021-03-04 05:06:07 +0200\n"
            "\n"
            "Say goodbye\n"
            "\n"
            "The greeting was wrong."
        )

    def test_author_without_email(self, record):
        record["author_email"] = ""
        assert "Author: Jane Doe\n" in formatter.format_commit(record)

    def test_custom_date_format(self, record):
        assert "Date: 04/03/2021" in formatter.format_commit(record, date_format="%d/%m/%Y")

    def test_missing_date_omits_line(self, record):
        record["timestamp"] = None
        assert "Date:" not in formatter.format_commit(record)

    def test_uncommitted(self):
        text = formatter.format_commit(records.uncommitted_record("svn", "a.c", 7))
        assert text == f"{formatter.NOT_COMMITTED_BANNER}\n\na.c:7"

    def test_template(self, record):
        text = formatter.format_commit(record, template="{short_id} {author} {date} {summary}", date_format="%Y-%m-%d")
        assert text == "4b825dc6 Jane Doe 2021-03-04 Say goodbye"

    def test_template_unknown_field(self, record):
        with pytest.raises(ValidationError):
            formatter.format_commit(record, template="{nope}")


class TestFormatDetailAndLog:
    """Tests for format_detail, format_log and format_actions."""

    def test_detail_appends_diff(self, record):
        record["diff"] = "diff --git a/test.py b/test.py\n+print('goodbye')\n"
        text = formatter.format_detail(record)
        assert text.endswith("+print('goodbye')")
        assert text.startswith("Commit: 4b825dc6")

    def test_detail_without_diff(self, record):
        assert formatter.format_detail(record) == formatter.format_commit(record)

    def test_log_rows_aligned(self, record):
        other = records.make_record("git", "b" * 40, author="Al", timestamp=0, message="First")
        rows = formatter.format_log([record, other]).splitlines()
        assert rows[0] == "4b825dc6  2021-03-04  Jane Doe  Say goodbye"
        assert rows[1] == "bbbbbbbb  1970-01-01  Al        First"

    def test_log_empty(self):
        assert formatter.format_log([]) == ""

    def test_actions_for_commit(self, record):
        text = formatter.format_actions(record, "src/my file.py")
        assert text.startswith("Follow-up:")
        assert "vc-msg copy 'src/my file.py' 2" in text
        assert f"--id {record['id']}" in text

    def test_actions_for_uncommitted(self):
        text = formatter.format_actions(records.uncommitted_record("git", "a.py", 1), "a.py")
        assert "copy" not in text
        assert "vc-msg blame a.py" in text

    def test_to_json(self, record):
        assert json.loads(formatter.to_json(record))["author"] == "Jane Doe"
