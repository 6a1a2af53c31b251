"""Streaming JSONL decoder for Claude Code session logs."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator

import orjson

from claude_usage_analytics.types.messages import (
    ContentBlock,
    EntryKind,
    LogEntry,
    Message,
    TextBlock,
    ThinkingBlock,
    TokenUsage,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
)

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024


def parse_session_file(file_path: str | Path) -> list[LogEntry]:
    """Parse an entire JSONL session file into a list of LogEntry objects."""
    return list(stream_session_file(file_path))


def parse_session_text(text: str) -> list[LogEntry]:
    """Parse raw file content that has already been read into memory."""
    return list(_decode_lines(text.split("\n"), "<memory>"))


def stream_session_file(file_path: str | Path) -> Iterator[LogEntry]:
    """Stream-parse a JSONL session file, yielding LogEntry objects.

    Malformed lines are logged and skipped. A missing or unreadable file
    yields nothing.
    """
    path = Path(file_path)
    if not path.exists():
        logger.warning("Session file not found: %s", path)
        return

    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            yield from _decode_lines(f, path.name)
    except OSError as e:
        logger.warning("Could not read session file %s: %s", path, e)


def _decode_lines(lines: Iterable[str], source: str) -> Iterator[LogEntry]:
    line_num = 0
    for line in lines:
        line_num += 1
        line = line.strip()
        if not line:
            continue

        if len(line) > MAX_LINE_SIZE:
            logger.warning(
                "Line %d in %s exceeds %dMB, skipping",
                line_num, source, MAX_LINE_SIZE // (1024 * 1024),
            )
            continue

        try:
            raw = orjson.loads(line)
        except orjson.JSONDecodeError as e:
            logger.debug("Malformed JSON at line %d in %s: %s", line_num, source, e)
            continue

        if not isinstance(raw, dict):
            continue

        entry = parse_entry(raw)
        if entry is not None:
            yield entry


def parse_entry(raw: dict) -> LogEntry | None:
    """Decode one raw JSON object into a LogEntry."""
    try:
        kind = EntryKind(raw.get("type", ""))
    except ValueError:
        kind = EntryKind.SYSTEM

    message = None
    raw_message = raw.get("message")
    if isinstance(raw_message, dict):
        message = _parse_message(raw_message)

    summary = raw.get("summary")
    parent_uuid = raw.get("parentUuid")

    return LogEntry(
        kind=kind,
        uuid=_as_str(raw.get("uuid")),
        parent_uuid=str(parent_uuid) if parent_uuid is not None else None,
        session_id=_as_str(raw.get("sessionId")),
        timestamp=parse_timestamp(raw.get("timestamp")),
        message=message,
        summary=summary if isinstance(summary, str) else None,
        cwd=_as_str(raw.get("cwd")),
        git_branch=_as_str(raw.get("gitBranch")),
        version=_as_str(raw.get("version")),
    )


def _parse_message(raw: dict) -> Message:
    content = raw.get("content", "")
    if isinstance(content, list):
        content = [_parse_block(block) for block in content
                   if isinstance(block, (dict, str))]
    elif not isinstance(content, str):
        content = ""

    usage = None
    raw_usage = raw.get("usage")
    if isinstance(raw_usage, dict):
        usage = TokenUsage(
            input_tokens=_as_count(raw_usage.get("input_tokens")),
            output_tokens=_as_count(raw_usage.get("output_tokens")),
            cache_creation_input_tokens=_as_count(raw_usage.get("cache_creation_input_tokens")),
            cache_read_input_tokens=_as_count(raw_usage.get("cache_read_input_tokens")),
        )

    return Message(
        role=_as_str(raw.get("role")),
        content=content,
        model=_as_str(raw.get("model")),
        usage=usage,
    )


def _parse_block(block: Any) -> ContentBlock:
    if isinstance(block, str):
        return TextBlock(text=block)

    block_type = block.get("type", "")
    if block_type == "text":
        return TextBlock(text=_as_str(block.get("text")))
    if block_type == "tool_use":
        tool_input = block.get("input", {})
        return ToolUseBlock(
            id=_as_str(block.get("id")),
            name=_as_str(block.get("name")),
            input=tool_input if isinstance(tool_input, dict) else {},
        )
    if block_type == "tool_result":
        result_content = block.get("content", "")
        if not isinstance(result_content, (str, list)):
            result_content = ""
        return ToolResultBlock(
            tool_use_id=_as_str(block.get("tool_use_id")),
            content=result_content,
            is_error=bool(block.get("is_error", False)),
        )
    if block_type == "thinking":
        return ThinkingBlock(thinking=_as_str(block.get("thinking")))
    return UnknownBlock(type=_as_str(block_type), data=dict(block))


def parse_timestamp(ts_value) -> datetime | None:
    """Parse a timestamp from ISO strings or epoch seconds/milliseconds.

    Naive values are taken as UTC. Returns None when nothing usable is found.
    """
    if isinstance(ts_value, bool):
        return None
    if isinstance(ts_value, (int, float)):
        try:
            return datetime.fromtimestamp(
                ts_value / 1000 if ts_value > 1e12 else ts_value, tz=timezone.utc,
            )
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(ts_value, str) and ts_value:
        try:
            # ISO 8601 format: "2026-02-13T12:00:00.000Z"
            parsed = datetime.fromisoformat(ts_value.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=timezone.utc)
            # Offsets near the calendar edges cannot be moved to UTC
            return parsed.astimezone(timezone.utc)
        except (ValueError, OverflowError):
            return None
    return None


def _as_str(value) -> str:
    return value if isinstance(value, str) else ""


def _as_count(value) -> int:
    """Coerce a token count to a non-negative int."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, int(value))
