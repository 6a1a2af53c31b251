"""Tests for claude_usage_analytics.utils.content_text."""

from datetime import date

from claude_usage_analytics.services.jsonl_parser import parse_session_file
from claude_usage_analytics.types.messages import (
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
)
from claude_usage_analytics.utils.content_text import (
    format_tool_input,
    get_message_text,
    render_block_as_text,
    render_conversation_as_text,
    tool_result_text,
)


class TestGetMessageText:
    def test_plain_string(self):
        assert get_message_text("hello") == "hello"

    def test_only_text_blocks(self):
        content = [
            ThinkingBlock("hmm"),
            TextBlock("first"),
            ToolUseBlock("t1", "Read", {"file_path": "a.py"}),
            TextBlock("second"),
        ]
        assert get_message_text(content) == "first\nsecond"

    def test_no_text_blocks(self):
        assert get_message_text([ToolResultBlock("t1", "output")]) == ""

    def test_not_content(self):
        assert get_message_text(None) == ""


class TestToolResultText:
    def test_string(self):
        assert tool_result_text("done") == "done"

    def test_list_of_text_items(self):
        content = [
            {"type": "text", "text": "line one"},
            {"type": "image", "source": {}},
            {"type": "text", "text": "line two"},
        ]
        assert tool_result_text(content) == "line one\nline two"

    def test_other(self):
        assert tool_result_text(42) == ""


class TestRenderBlock:
    def test_text(self):
        assert render_block_as_text(TextBlock("hi")) == "hi"

    def test_tool_use(self):
        text = render_block_as_text(ToolUseBlock("t1", "Bash", {"command": "ls"}))
        assert text.startswith("[Tool: Bash]\n")
        assert '"command": "ls"' in text

    def test_tool_result(self):
        assert render_block_as_text(ToolResultBlock("t1", "ok")) == "[Tool Result]\nok"

    def test_tool_error(self):
        block = ToolResultBlock("t1", [{"type": "text", "text": "boom"}], is_error=True)
        assert render_block_as_text(block) == "[Tool Error]\nboom"

    def test_thinking(self):
        assert render_block_as_text(ThinkingBlock("plan")) == "[Thinking]\nplan"

    def test_unknown_is_empty(self):
        assert render_block_as_text(UnknownBlock("server_tool_use", {"type": "server_tool_use"})) == ""


class TestRenderConversation:
    def test_string_content(self):
        assert render_conversation_as_text("plain") == "plain"

    def test_all_block_kinds(self, tools_session_path):
        entries = parse_session_file(tools_session_path)
        text = render_conversation_as_text(entries[1].message.content)

        assert text.split("\n\n")[0] == "[Thinking]\nLet me look at the file."
        assert "I'll read it." in text
        assert "[Tool: Read]" in text

    def test_unknown_blocks_leave_no_gap(self, tools_session_path):
        entries = parse_session_file(tools_session_path)
        assert render_conversation_as_text(entries[5].message.content) == "Done."

    def test_format_tool_input_non_json_values(self):
        assert "2026-01-05" in format_tool_input({"when": date(2026, 1, 5)})
