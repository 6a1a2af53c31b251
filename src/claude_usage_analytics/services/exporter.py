"""Export a session as JSON, CSV or Markdown."""

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

import orjson

from claude_usage_analytics.services.jsonl_parser import parse_entry, parse_timestamp
from claude_usage_analytics.types.messages import (
    EntryKind,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
    format_timestamp,
)
from claude_usage_analytics.types.sessions import SessionDetail, TokenStats
from claude_usage_analytics.utils.content_text import (
    format_tool_input,
    get_message_text,
    tool_result_text,
)
from claude_usage_analytics.utils.pricing import format_cost, format_date, format_tokens

logger = logging.getLogger(__name__)

CSV_CONTENT_CHARS = 500


class ExportFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"
    CSV = "csv"

    @classmethod
    def parse(cls, value: str) -> "ExportFormat":
        value = value.lower()
        if value == "md":
            return cls.MARKDOWN
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported export format: {value!r}") from None


_CONTENT_TYPES = {
    ExportFormat.JSON: ("application/json", "json"),
    ExportFormat.MARKDOWN: ("text/markdown", "md"),
    ExportFormat.CSV: ("text/csv", "csv"),
}


@dataclass
class ExportResult:
    content: str
    content_type: str
    filename: str


def export_session(detail: SessionDetail, fmt: str | ExportFormat) -> ExportResult:
    """Render a session for download; unknown formats export as JSON."""
    if isinstance(fmt, ExportFormat):
        export_format = fmt
    else:
        try:
            export_format = ExportFormat.parse(fmt)
        except ValueError:
            logger.warning("Unsupported export format %r, exporting as JSON", fmt)
            export_format = ExportFormat.JSON
    if export_format == ExportFormat.MARKDOWN:
        content = to_markdown(detail)
    elif export_format == ExportFormat.CSV:
        content = to_csv(detail)
    else:
        content = to_json(detail)
    content_type, extension = _CONTENT_TYPES[export_format]
    return ExportResult(
        content=content,
        content_type=content_type,
        filename=f"claude-session-{detail.id[:8]}.{extension}",
    )


# ----------------------------------------------------------------------
# JSON
# ----------------------------------------------------------------------

def to_json(detail: SessionDetail) -> str:
    return orjson.dumps(detail.to_dict(), option=orjson.OPT_INDENT_2).decode()


def session_detail_from_json(text: str | bytes) -> SessionDetail:
    """Parse a JSON export back into a SessionDetail."""
    return session_detail_from_dict(orjson.loads(text))


def session_detail_from_dict(data: dict) -> SessionDetail:
    start_time = parse_timestamp(data.get("startTime")) or datetime.now(timezone.utc)
    entries = []
    for raw in data.get("messages", []):
        if isinstance(raw, dict):
            entry = parse_entry(raw)
            if entry is not None:
                entries.append(entry)
    return SessionDetail(
        id=data["id"],
        project_dir=data.get("projectDir", ""),
        project_name=data.get("projectName", ""),
        title=data.get("title", ""),
        first_message=data.get("firstMessage", ""),
        start_time=start_time,
        end_time=parse_timestamp(data.get("endTime")) or start_time,
        duration=int(data.get("duration", 0)),
        message_count=int(data.get("messageCount", 0)),
        token_stats=TokenStats.from_dict(data.get("tokenStats", {})),
        cost=float(data.get("cost", 0.0)),
        model=data.get("model", ""),
        is_agent=bool(data.get("isAgent", False)),
        entries=entries,
    )


# ----------------------------------------------------------------------
# CSV
# ----------------------------------------------------------------------

def to_csv(detail: SessionDetail) -> str:
    """One row per user/assistant entry: timestamp, role, text, tokens, model."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Timestamp", "Role", "Content", "Tokens", "Model"])
    for entry in detail.entries:
        if entry.kind not in (EntryKind.USER, EntryKind.ASSISTANT):
            continue
        text = get_message_text(entry.message.content) if entry.message else ""
        usage = entry.usage
        tokens = usage.input_tokens + usage.output_tokens if usage else 0
        writer.writerow([
            format_timestamp(entry.timestamp) if entry.timestamp else "",
            entry.kind.value,
            text.replace("\n", " ")[:CSV_CONTENT_CHARS],
            tokens,
            entry.model,
        ])
    return buf.getvalue()


# ----------------------------------------------------------------------
# Markdown
# ----------------------------------------------------------------------

def to_markdown(detail: SessionDetail, exported_at: datetime | None = None) -> str:
    stats = detail.token_stats
    lines = [
        f"# {detail.title}",
        "",
        f"**Project:** {detail.project_name}",
        f"**Session ID:** {detail.id}",
        f"**Date:** {format_date(detail.start_time)} - {format_date(detail.end_time)}",
        f"**Duration:** {detail.duration} minutes",
        f"**Messages:** {detail.message_count}",
        "",
        "## Statistics",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Input Tokens | {format_tokens(stats.input)} |",
        f"| Output Tokens | {format_tokens(stats.output)} |",
        f"| Cache Creation | {format_tokens(stats.cache_creation)} |",
        f"| Cache Read | {format_tokens(stats.cache_read)} |",
        f"| Total Tokens | {format_tokens(stats.total)} |",
        f"| Cost | {format_cost(detail.cost)} |",
        f"| Model | {detail.model} |",
        "",
        "---",
        "",
        "## Conversation",
        "",
    ]

    for entry in detail.entries:
        if entry.kind not in (EntryKind.USER, EntryKind.ASSISTANT):
            continue
        lines.append("### User" if entry.kind == EntryKind.USER else "### Assistant")
        if entry.timestamp:
            lines.append(f"*{format_date(entry.timestamp)}*")
        lines.append("")

        if entry.message is not None:
            content = entry.message.content
            if isinstance(content, str):
                lines.append(content)
            else:
                for block in content:
                    lines.extend(_markdown_block(block))

        lines.extend(["", "---", ""])

    exported_at = exported_at or datetime.now(timezone.utc)
    lines.extend(["", "---", f"*Exported on {format_timestamp(exported_at)}*"])
    return "\n".join(lines)


def _markdown_block(block) -> list[str]:
    if isinstance(block, TextBlock):
        return [block.text]
    elif isinstance(block, ToolUseBlock):
        return [f"```tool: {block.name}", format_tool_input(block.input), "```"]
    elif isinstance(block, ToolResultBlock):
        label = "tool-error" if block.is_error else "tool-result"
        return [f"```{label}", tool_result_text(block.content), "```"]
    elif isinstance(block, ThinkingBlock):
        return ["> *Thinking*", ">"] + [f"> {line}" for line in block.thinking.splitlines()]
    elif isinstance(block, UnknownBlock):
        return []
    return []
