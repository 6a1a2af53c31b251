"""Aggregated statistics types."""

from dataclasses import dataclass, field

from claude_usage_analytics.types.sessions import SessionSummary, TokenStats


@dataclass
class DailyStats:
    date: str  # YYYY-MM-DD, UTC
    sessions: int = 0
    tokens: TokenStats = field(default_factory=TokenStats)
    cost: float = 0.0
    duration: int = 0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "sessions": self.sessions,
            "tokens": self.tokens.to_dict(),
            "cost": self.cost,
            "duration": self.duration,
        }


@dataclass
class ProjectStats:
    name: str
    sessions: int = 0
    tokens: int = 0  # flattened total
    cost: float = 0.0
    duration: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "sessions": self.sessions,
            "tokens": self.tokens,
            "cost": self.cost,
            "duration": self.duration,
        }


@dataclass
class ModelStats:
    model: str
    sessions: int = 0
    tokens: TokenStats = field(default_factory=TokenStats)
    cost: float = 0.0

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "sessions": self.sessions,
            "tokens": self.tokens.to_dict(),
            "cost": self.cost,
        }


@dataclass
class Totals:
    sessions: int = 0
    tokens: int = 0
    cost: float = 0.0
    duration: int = 0

    def to_dict(self) -> dict:
        return {
            "totalSessions": self.sessions,
            "totalTokens": self.tokens,
            "totalCost": self.cost,
            "totalDuration": self.duration,
        }


@dataclass
class AnalyticsData:
    totals: Totals
    daily_stats: list[DailyStats] = field(default_factory=list)
    project_stats: list[ProjectStats] = field(default_factory=list)
    model_stats: list[ModelStats] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = self.totals.to_dict()
        result["dailyStats"] = [d.to_dict() for d in self.daily_stats]
        result["projectStats"] = [p.to_dict() for p in self.project_stats]
        result["modelStats"] = [m.to_dict() for m in self.model_stats]
        return result


@dataclass
class DashboardStats:
    totals: Totals
    recent_sessions: list[SessionSummary] = field(default_factory=list)
    project_stats: list[ProjectStats] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = self.totals.to_dict()
        result["recentSessions"] = [s.to_dict() for s in self.recent_sessions]
        result["projectStats"] = [p.to_dict() for p in self.project_stats]
        return result


@dataclass
class ProjectGroup:
    project_name: str
    sessions: list[SessionSummary] = field(default_factory=list)
    total_cost: float = 0.0

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    def to_dict(self) -> dict:
        return {
            "projectName": self.project_name,
            "sessionCount": self.session_count,
            "totalCost": self.total_cost,
            "sessions": [s.to_dict() for s in self.sessions],
        }
