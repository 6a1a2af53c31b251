"""Tests for claude_usage_analytics.services.exporter."""

import csv
import io
from datetime import datetime, timezone

import orjson
import pytest

from claude_usage_analytics.services.exporter import (
    ExportFormat,
    export_session,
    session_detail_from_json,
    to_csv,
    to_json,
    to_markdown,
)
from claude_usage_analytics.services.jsonl_parser import parse_session_file
from claude_usage_analytics.services.session_builder import build_session_detail
from claude_usage_analytics.utils.pricing import PricingTable

PROJECT = "-home-wiz-projects-myapp"


@pytest.fixture
def simple_detail(simple_session_path):
    entries = parse_session_file(simple_session_path)
    return build_session_detail(entries, "3f2a9c1e-1111-2222", PROJECT, PricingTable())


@pytest.fixture
def tools_detail(tools_session_path):
    entries = parse_session_file(tools_session_path)
    return build_session_detail(entries, "tools-session", PROJECT, PricingTable())


class TestExportFormat:
    @pytest.mark.parametrize("value, expected", [
        ("json", ExportFormat.JSON),
        ("JSON", ExportFormat.JSON),
        ("markdown", ExportFormat.MARKDOWN),
        ("md", ExportFormat.MARKDOWN),
        ("csv", ExportFormat.CSV),
    ])
    def test_parse(self, value, expected):
        assert ExportFormat.parse(value) == expected

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported export format"):
            ExportFormat.parse("xml")


class TestExportSession:
    @pytest.mark.parametrize("fmt, content_type, filename", [
        ("json", "application/json", "claude-session-3f2a9c1e.json"),
        ("markdown", "text/markdown", "claude-session-3f2a9c1e.md"),
        ("csv", "text/csv", "claude-session-3f2a9c1e.csv"),
    ])
    def test_metadata(self, simple_detail, fmt, content_type, filename):
        result = export_session(simple_detail, fmt)
        assert result.content_type == content_type
        assert result.filename == filename
        assert result.content

    def test_unknown_format_exports_json(self, simple_detail):
        result = export_session(simple_detail, "pdf")
        assert result.content_type == "application/json"
        assert result.filename == "claude-session-3f2a9c1e.json"
        assert orjson.loads(result.content)["id"] == "3f2a9c1e-1111-2222"


class TestJsonExport:
    def test_round_trip(self, tools_detail):
        restored = session_detail_from_json(to_json(tools_detail))
        assert restored == tools_detail

    def test_round_trip_simple(self, simple_detail):
        restored = session_detail_from_json(to_json(simple_detail))
        assert restored == simple_detail
        assert restored.token_stats.total == 855

    def test_shape(self, simple_detail):
        data = orjson.loads(to_json(simple_detail))

        assert data["id"] == "3f2a9c1e-1111-2222"
        assert data["projectName"] == "myapp"
        assert data["startTime"] == "2026-01-05T10:00:00Z"
        assert data["tokenStats"] == {
            "input": 450, "output": 105, "cacheCreation": 200, "cacheRead": 100, "total": 855,
        }
        assert len(data["messages"]) == 6
        assert data["messages"][2]["parentUuid"] == "msg-001"
        assert data["messages"][2]["message"]["usage"]["input_tokens"] == 150

    def test_unknown_blocks_preserved(self, tools_detail):
        data = orjson.loads(to_json(tools_detail))
        block = data["messages"][5]["message"]["content"][1]
        assert block == {"type": "server_tool_use", "id": "srv_001", "name": "web_search"}


class TestCsvExport:
    def _rows(self, detail):
        return list(csv.reader(io.StringIO(to_csv(detail))))

    def test_header_and_rows(self, simple_detail):
        rows = self._rows(simple_detail)
        assert rows[0] == ["Timestamp", "Role", "Content", "Tokens", "Model"]
        # Summary entry has no row
        assert len(rows) == 6

    def test_assistant_row(self, simple_detail):
        row = self._rows(simple_detail)[2]
        assert row == [
            "2026-01-05T10:00:30Z", "assistant", "Of course! What do you need?", "175",
            "claude-sonnet-4-5-20250929",
        ]

    def test_newlines_flattened(self, simple_detail):
        row = self._rows(simple_detail)[4]
        assert row[2] == "Use the csv module: import csv"

    def test_user_row_has_no_tokens(self, simple_detail):
        row = self._rows(simple_detail)[1]
        assert row[3] == "0"
        assert row[4] == ""

    def test_content_truncated(self, simple_detail):
        simple_detail.entries[1].message.content = "y" * 900
        row = self._rows(simple_detail)[1]
        assert len(row[2]) == 500

    def test_tool_only_entries_have_empty_content(self, tools_detail):
        rows = self._rows(tools_detail)
        # msg-t03: tool_result only
        assert rows[3][1] == "user"
        assert rows[3][2] == ""


class TestMarkdownExport:
    def test_header_and_stats(self, simple_detail):
        exported = datetime(2026, 1, 6, 9, 0, tzinfo=timezone.utc)
        md = to_markdown(simple_detail, exported_at=exported)

        assert md.startswith("# Fix login bug\n")
        assert "**Project:** myapp" in md
        assert "**Session ID:** 3f2a9c1e-1111-2222" in md
        assert "**Date:** Jan 5, 2026, 10:00 AM - Jan 5, 2026, 10:20 AM" in md
        assert "**Duration:** 20 minutes" in md
        assert "| Total Tokens | 855 |" in md
        assert "| Cost | $0.0062 |" in md
        assert "| Model | claude-opus-4-5-20251101 |" in md
        assert md.endswith("*Exported on 2026-01-06T09:00:00Z*")

    def test_conversation(self, simple_detail):
        md = to_markdown(simple_detail)
        assert md.count("### User") == 3
        assert md.count("### Assistant") == 2
        assert "*Jan 5, 2026, 10:00 AM*" in md
        assert "Hello, can you help me with a Python script?" in md

    def test_blocks(self, tools_detail):
        md = to_markdown(tools_detail)

        assert "> *Thinking*\n>\n> Let me look at the file." in md
        assert "```tool: Read\n" in md
        assert '"file_path": "/home/wiz/projects/myapp/main.py"' in md
        assert "```tool-result\ndef main():\n    return 1\n```" in md
        assert "```tool-error\nEdit failed\n```" in md
        assert "server_tool_use" not in md
        assert "web_search" not in md
