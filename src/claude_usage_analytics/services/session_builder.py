"""Reconstruct session summaries from decoded log entries."""

from datetime import datetime, timezone

from claude_usage_analytics.types.messages import EntryKind, LogEntry
from claude_usage_analytics.types.sessions import SessionDetail, SessionSummary, TokenStats
from claude_usage_analytics.utils.content_text import get_message_text
from claude_usage_analytics.utils.path_codec import extract_project_name, is_agent_session
from claude_usage_analytics.utils.pricing import PricingTable, format_day

UNKNOWN_MODEL = "unknown"
FIRST_MESSAGE_CHARS = 200
TITLE_CHARS = 50


def build_session_summary(
    entries: list[LogEntry],
    session_id: str,
    project_dir: str,
    pricing: PricingTable,
) -> SessionSummary | None:
    """Build a SessionSummary for one session file.

    Returns None when the file decoded to no entries.
    """
    if not entries:
        return None

    timestamps = sorted(e.timestamp for e in entries if e.timestamp is not None)
    start_time = timestamps[0] if timestamps else datetime.now(timezone.utc)
    end_time = timestamps[-1] if timestamps else start_time
    duration = 0
    if len(timestamps) >= 2:
        minutes = (end_time - start_time).total_seconds() / 60
        duration = max(0, int(minutes + 0.5))

    first_message = _first_user_text(entries)[:FIRST_MESSAGE_CHARS]
    title = _resolve_title(entries, first_message, start_time)

    message_count = sum(
        1 for e in entries if e.kind in (EntryKind.USER, EntryKind.ASSISTANT)
    )
    stats, model = calculate_token_stats(entries)

    return SessionSummary(
        id=session_id,
        project_dir=project_dir,
        project_name=extract_project_name(project_dir),
        title=title,
        first_message=first_message,
        start_time=start_time,
        end_time=end_time,
        duration=duration,
        message_count=message_count,
        token_stats=stats,
        cost=pricing.cost_from_stats(stats, model),
        model=model,
        is_agent=is_agent_session(session_id),
    )


def build_session_detail(
    entries: list[LogEntry],
    session_id: str,
    project_dir: str,
    pricing: PricingTable,
) -> SessionDetail | None:
    summary = build_session_summary(entries, session_id, project_dir, pricing)
    if summary is None:
        return None
    return SessionDetail(**vars(summary), entries=list(entries))


def calculate_token_stats(entries: list[LogEntry]) -> tuple[TokenStats, str]:
    """Sum assistant usage in file order.

    The billing model is the last non-empty model id seen on an assistant
    entry, not the first or the most frequent.
    """
    stats = TokenStats()
    model = UNKNOWN_MODEL
    for entry in entries:
        if entry.kind != EntryKind.ASSISTANT or entry.usage is None:
            continue
        stats.add_usage(entry.usage)
        if entry.model:
            model = entry.model
    return stats, model


def _first_user_text(entries: list[LogEntry]) -> str:
    for entry in entries:
        if entry.kind != EntryKind.USER or entry.message is None:
            continue
        text = get_message_text(entry.message.content)
        if text:
            return text
    return ""


def _resolve_title(entries: list[LogEntry], first_message: str, start_time: datetime) -> str:
    title = ""
    for entry in entries:
        if entry.kind == EntryKind.SUMMARY:
            title = (entry.summary or "").replace('"', "")
            break

    if title and title != "Untitled":
        return title
    if first_message:
        suffix = "..." if len(first_message) > TITLE_CHARS else ""
        return first_message[:TITLE_CHARS] + suffix
    return f"Session - {format_day(start_time)}"
