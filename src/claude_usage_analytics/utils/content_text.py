"""Flatten message content into plain text."""

import orjson

from claude_usage_analytics.types.messages import (
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
)


def get_message_text(content) -> str:
    """Return only the text blocks of a message, newline-joined."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    return "\n".join(block.text for block in content if isinstance(block, TextBlock))


def tool_result_text(content) -> str:
    """Text of a tool_result payload (a string or a list of sub-blocks)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text" and item.get("text"):
                parts.append(str(item["text"]))
        return "\n".join(parts)
    return ""


def format_tool_input(tool_input: dict) -> str:
    return orjson.dumps(tool_input, option=orjson.OPT_INDENT_2, default=str).decode()


def render_block_as_text(block) -> str:
    if isinstance(block, TextBlock):
        return block.text
    elif isinstance(block, ToolUseBlock):
        return f"[Tool: {block.name}]\n{format_tool_input(block.input)}"
    elif isinstance(block, ToolResultBlock):
        label = "[Tool Error]" if block.is_error else "[Tool Result]"
        return f"{label}\n{tool_result_text(block.content)}"
    elif isinstance(block, ThinkingBlock):
        return f"[Thinking]\n{block.thinking}"
    elif isinstance(block, UnknownBlock):
        return ""
    return ""


def render_conversation_as_text(content) -> str:
    """Flatten every block of a message (all tags) into one string for search/export."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    parts = [render_block_as_text(block) for block in content]
    return "\n\n".join(p for p in parts if p)
