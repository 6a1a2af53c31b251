"""Fold session collections into daily, project and model summaries."""

from datetime import timezone

from claude_usage_analytics.types.analytics import (
    AnalyticsData,
    DailyStats,
    DashboardStats,
    ModelStats,
    ProjectGroup,
    ProjectStats,
    Totals,
)
from claude_usage_analytics.types.sessions import SessionSummary

RECENT_SESSIONS_LIMIT = 5
TOP_PROJECTS_LIMIT = 10


def summarize_totals(sessions: list[SessionSummary]) -> Totals:
    return Totals(
        sessions=len(sessions),
        tokens=sum(s.token_stats.total for s in sessions),
        cost=sum(s.cost for s in sessions),
        duration=sum(s.duration for s in sessions),
    )


def session_day(session: SessionSummary) -> str:
    """UTC calendar day of the session start, YYYY-MM-DD."""
    return session.start_time.astimezone(timezone.utc).date().isoformat()


def build_daily_stats(sessions: list[SessionSummary]) -> list[DailyStats]:
    """Per-day stats, chronological."""
    days: dict[str, DailyStats] = {}
    for session in sessions:
        key = session_day(session)
        stats = days.get(key)
        if stats is None:
            stats = days[key] = DailyStats(date=key)
        stats.sessions += 1
        stats.tokens.add(session.token_stats)
        stats.cost += session.cost
        stats.duration += session.duration
    return sorted(days.values(), key=lambda d: d.date)


def build_project_stats(
    sessions: list[SessionSummary],
    limit: int | None = None,
) -> list[ProjectStats]:
    """Per-project stats, most expensive first."""
    projects: dict[str, ProjectStats] = {}
    for session in sessions:
        stats = projects.get(session.project_name)
        if stats is None:
            stats = projects[session.project_name] = ProjectStats(name=session.project_name)
        stats.sessions += 1
        stats.tokens += session.token_stats.total
        stats.cost += session.cost
        stats.duration += session.duration

    ranked = sorted(projects.values(), key=lambda p: p.cost, reverse=True)
    return ranked[:limit] if limit is not None else ranked


def build_model_stats(sessions: list[SessionSummary]) -> list[ModelStats]:
    """Per-billing-model stats, most expensive first."""
    models: dict[str, ModelStats] = {}
    for session in sessions:
        stats = models.get(session.model)
        if stats is None:
            stats = models[session.model] = ModelStats(model=session.model)
        stats.sessions += 1
        stats.tokens.add(session.token_stats)
        stats.cost += session.cost
    return sorted(models.values(), key=lambda m: m.cost, reverse=True)


def select_active_sessions(
    sessions: list[SessionSummary],
    limit: int | None = RECENT_SESSIONS_LIMIT,
) -> list[SessionSummary]:
    """Drop empty or aborted sessions: need a reply and some token usage.

    Input order is kept, so a start-time-descending list yields the most recent.
    """
    active = [s for s in sessions if s.message_count >= 2 and s.token_stats.total > 0]
    return active[:limit] if limit is not None else active


def group_sessions_by_project(sessions: list[SessionSummary]) -> list[ProjectGroup]:
    groups: dict[str, ProjectGroup] = {}
    for session in sessions:
        group = groups.get(session.project_name)
        if group is None:
            group = groups[session.project_name] = ProjectGroup(project_name=session.project_name)
        group.sessions.append(session)
        group.total_cost += session.cost
    return sorted(groups.values(), key=lambda g: g.total_cost, reverse=True)


def build_analytics(sessions: list[SessionSummary]) -> AnalyticsData:
    return AnalyticsData(
        totals=summarize_totals(sessions),
        daily_stats=build_daily_stats(sessions),
        project_stats=build_project_stats(sessions),
        model_stats=build_model_stats(sessions),
    )


def build_dashboard(
    sessions: list[SessionSummary],
    recent_limit: int = RECENT_SESSIONS_LIMIT,
    top_projects: int = TOP_PROJECTS_LIMIT,
) -> DashboardStats:
    return DashboardStats(
        totals=summarize_totals(sessions),
        recent_sessions=select_active_sessions(sessions, recent_limit),
        project_stats=build_project_stats(sessions, top_projects),
    )
