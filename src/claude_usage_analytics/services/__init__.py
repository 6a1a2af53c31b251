"""Services for Claude Usage Analytics."""

from claude_usage_analytics.services.analytics_service import AnalyticsService
from claude_usage_analytics.services.config_manager import ConfigManager
from claude_usage_analytics.services.corpus_scanner import SessionScanner
from claude_usage_analytics.services.entry_cache import EntryCache
from claude_usage_analytics.services.optimizer import OptimizationAnalyzer

__all__ = [
    "AnalyticsService",
    "ConfigManager",
    "SessionScanner",
    "EntryCache",
    "OptimizationAnalyzer",
]
