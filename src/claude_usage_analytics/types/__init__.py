"""Type definitions for Claude Usage Analytics."""

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
from claude_usage_analytics.types.sessions import (
    SessionDetail,
    SessionFilters,
    SessionPage,
    SessionSummary,
    TokenStats,
)
from claude_usage_analytics.types.analytics import (
    AnalyticsData,
    DailyStats,
    DashboardStats,
    ModelStats,
    ProjectGroup,
    ProjectStats,
    Totals,
)
from claude_usage_analytics.types.optimization import (
    CacheAnalysis,
    ModelSuggestion,
    ModelUsage,
    OptimizationAnalysis,
    OptimizationSuggestion,
    Priority,
    PromptPattern,
    SuggestionCategory,
)

__all__ = [
    "ContentBlock",
    "EntryKind",
    "LogEntry",
    "Message",
    "TextBlock",
    "ThinkingBlock",
    "TokenUsage",
    "ToolResultBlock",
    "ToolUseBlock",
    "UnknownBlock",
    "SessionDetail",
    "SessionFilters",
    "SessionPage",
    "SessionSummary",
    "TokenStats",
    "AnalyticsData",
    "DailyStats",
    "DashboardStats",
    "ModelStats",
    "ProjectGroup",
    "ProjectStats",
    "Totals",
    "CacheAnalysis",
    "ModelSuggestion",
    "ModelUsage",
    "OptimizationAnalysis",
    "OptimizationSuggestion",
    "Priority",
    "PromptPattern",
    "SuggestionCategory",
]
