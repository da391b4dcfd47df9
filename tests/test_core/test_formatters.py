"""
Tests for core formatters module.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone

from mcp_server_aw.core.formatters import (
    CHARACTER_LIMIT,
    Formatter,
    JSONFormatter,
    MarkdownFormatter,
    ResponseFormat,
    truncate_response,
)
from mcp_server_aw.core.models import Bucket, Event


class TestFormatter:
    """Tests for base Formatter class."""

    def test_format_datetime_human_readable(self):
        dt = datetime(2024, 1, 15, 10, 30, 45)
        assert Formatter.format_datetime(dt) == "2024-01-15 10:30:45"

    def test_format_datetime_iso(self):
        dt = datetime(2024, 1, 15, 10, 30, 45, tzinfo=timezone.utc)
        assert Formatter.format_datetime(dt, human_readable=False) == "2024-01-15T10:30:45+00:00"

    def test_format_datetime_string_input(self):
        assert Formatter.format_datetime("2024-01-15T10:30:45Z") == "2024-01-15 10:30:45"

    def test_format_datetime_unparseable_string(self):
        assert Formatter.format_datetime("yesterday") == "yesterday"

    def test_format_datetime_none(self):
        assert Formatter.format_datetime(None) == "—"

    def test_format_duration(self):
        assert Formatter.format_duration(30) == "30.0s"
        assert Formatter.format_duration(90) == "1.5m"
        assert Formatter.format_duration(5400) == "1.5h"
        assert Formatter.format_duration(172800) == "2.0d"

    def test_truncate(self):
        assert Formatter.truncate("short", 10) == "short"
        assert Formatter.truncate("abcdefghijkl", 10) == "abcdefg..."
        assert len(Formatter.truncate("x" * 200, 80)) == 80


class TestMarkdownFormatter:
    """Tests for MarkdownFormatter class."""

    def test_header(self):
        assert MarkdownFormatter.header("Title", 2) == "## Title\n\n"

    def test_table(self):
        result = MarkdownFormatter.table(["A", "B"], [[1, None], ["x", "y"]])

        assert result == "| A | B |\n| --- | --- |\n| 1 |  |\n| x | y |\n"

    def test_table_empty(self):
        assert MarkdownFormatter.table(["A"], []) == ""

    def test_table_escapes_pipes_and_newlines(self):
        result = MarkdownFormatter.table(["Title"], [["a | b\nc"]])
        assert "| a \\| b c |" in result

    def test_key_value(self):
        assert MarkdownFormatter.key_value("Type", "afkstatus") == "- **Type:** afkstatus"

    def test_bullet_list(self):
        assert MarkdownFormatter.bullet_list(["a", "b"]) == "- a\n- b\n"


class TestJSONFormatter:
    """Tests for JSONFormatter class."""

    def test_models_use_aliases_and_drop_none(self):
        bucket = Bucket(
            id="b",
            type="afkstatus",
            client="aw-watcher-afk",
            hostname="h",
            created="2024-01-01T00:00:00Z",
        )

        data = json.loads(JSONFormatter.format(bucket))

        assert data == {
            "id": "b",
            "type": "afkstatus",
            "client": "aw-watcher-afk",
            "hostname": "h",
            "created": "2024-01-01T00:00:00Z",
        }

    def test_nested_collections(self):
        event = Event(timestamp="2024-01-01T12:00:00+00:00", duration=1.5, data={"app": "x"})

        data = json.loads(JSONFormatter.format({"events": [event]}))

        assert data["events"][0]["duration"] == 1.5
        assert "id" not in data["events"][0]

    def test_integer(self):
        assert JSONFormatter.format(3) == "3"

    def test_indentation(self):
        assert JSONFormatter.format({"a": 1}) == '{\n  "a": 1\n}'


class TestTruncateResponse:
    """Tests for truncate_response."""

    def test_short_response_untouched(self):
        assert truncate_response("hello") == "hello"

    def test_long_response_truncated(self):
        text = "x" * (CHARACTER_LIMIT + 100)
        result = truncate_response(text)

        assert result.startswith("x" * CHARACTER_LIMIT)
        assert "x" * (CHARACTER_LIMIT + 1) not in result
        assert "Response truncated" in result

    def test_custom_limit(self):
        assert truncate_response("abcdef", limit=3).startswith("abc\n\n_Response truncated at 3")


class TestResponseFormat:
    """Tests for ResponseFormat enum."""

    def test_values(self):
        assert ResponseFormat.MARKDOWN.value == "markdown"
        assert ResponseFormat.JSON.value == "json"

    def test_from_string(self):
        assert ResponseFormat("json") == ResponseFormat.JSON
