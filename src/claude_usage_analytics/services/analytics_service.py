"""Analytics service: the entry point the presentation layer calls."""

import logging
from datetime import datetime
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot, Property, QThread

from claude_usage_analytics.services import aggregator
from claude_usage_analytics.services.config_manager import ConfigManager, resolve_claude_dir
from claude_usage_analytics.services.corpus_scanner import SessionScanner
from claude_usage_analytics.services.entry_cache import EntryCache
from claude_usage_analytics.services.exporter import ExportResult, export_session
from claude_usage_analytics.services.jsonl_parser import parse_timestamp
from claude_usage_analytics.services.optimizer import OptimizationAnalyzer
from claude_usage_analytics.types.analytics import (
    AnalyticsData,
    DashboardStats,
    ProjectGroup,
)
from claude_usage_analytics.types.optimization import OptimizationAnalysis
from claude_usage_analytics.types.sessions import SessionDetail, SessionFilters, SessionPage
from claude_usage_analytics.utils.content_text import render_conversation_as_text
from claude_usage_analytics.utils.pricing import PricingTable

logger = logging.getLogger(__name__)


class _ReportWorker(QThread):
    """Background thread for the full-corpus optimization scan."""

    report_finished = Signal(int, object)  # request_id, OptimizationAnalysis | None

    def __init__(self, request_id: int, scanner: SessionScanner,
                 analyzer: OptimizationAnalyzer, parent=None):
        super().__init__(parent)
        self._request_id = request_id
        self._scanner = scanner
        self._analyzer = analyzer

    def run(self):
        try:
            report = self._analyzer.analyze(self._scanner.iter_session_entries())
        except Exception:
            logger.exception("Worker failed to build optimization report")
            report = None
        self.report_finished.emit(self._request_id, report)


class AnalyticsService(QObject):
    """Request-scoped analytics over the session corpus.

    Every query re-scans the projects root; no state is kept between calls
    apart from the optional entry cache.
    """

    session_deleted = Signal(str)      # session_id
    report_ready = Signal(object)      # OptimizationAnalysis | None
    loading_changed = Signal()

    def __init__(
        self,
        parent=None,
        projects_root: str | None = None,
        pricing: PricingTable | None = None,
        config: ConfigManager | None = None,
    ):
        super().__init__(parent)
        self._recent_limit = aggregator.RECENT_SESSIONS_LIMIT
        self._top_projects = aggregator.TOP_PROJECTS_LIMIT
        cache = None

        if config is not None:
            root = Path(projects_root) if projects_root else config.projects_root()
            if pricing is None and config.pricing_file() is not None:
                pricing = PricingTable.from_file(config.pricing_file())
            if config.get_bool("scan/cacheEntries"):
                cache = EntryCache()
            self._recent_limit = config.get_int("dashboard/recentSessions")
            self._top_projects = config.get_int("dashboard/topProjects")
        else:
            root = Path(projects_root) if projects_root else resolve_claude_dir() / "projects"

        self._pricing = pricing or PricingTable()
        self._scanner = SessionScanner(root, self._pricing, cache)
        self._analyzer = OptimizationAnalyzer(self._pricing)
        self._worker: _ReportWorker | None = None
        self._request_id = 0
        self._loading = False

    def _get_loading(self) -> bool:
        return self._loading

    def _set_loading(self, value: bool):
        if self._loading != value:
            self._loading = value
            self.loading_changed.emit()

    loading = Property(bool, _get_loading, notify=loading_changed)

    @property
    def scanner(self) -> SessionScanner:
        return self._scanner

    @property
    def pricing(self) -> PricingTable:
        return self._pricing

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def list_sessions(
        self,
        filters: SessionFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> SessionPage:
        return self._scanner.list_sessions(filters, page, limit)

    def get_session(self, session_id: str) -> SessionDetail | None:
        return self._scanner.get_session(session_id)

    @Slot(str, result=bool)
    def delete_session(self, session_id: str) -> bool:
        deleted = self._scanner.delete_session(session_id)
        if deleted:
            self.session_deleted.emit(session_id)
        return deleted

    @Slot(result=list)
    def list_project_names(self) -> list[str]:
        return self._scanner.list_project_names()

    def list_project_groups(self, filters: SessionFilters | None = None) -> list[ProjectGroup]:
        return aggregator.group_sessions_by_project(self.list_sessions(filters).sessions)

    def export_session(self, session_id: str, fmt: str = "json") -> ExportResult | None:
        detail = self._scanner.get_session(session_id)
        if detail is None:
            return None
        return export_session(detail, fmt)

    @staticmethod
    def render_conversation_as_text(content) -> str:
        return render_conversation_as_text(content)

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def get_dashboard_summary(self) -> DashboardStats:
        sessions = self._scanner.load_summaries()
        return aggregator.build_dashboard(sessions, self._recent_limit, self._top_projects)

    def get_analytics(
        self,
        start_date: datetime | str | None = None,
        end_date: datetime | str | None = None,
    ) -> AnalyticsData:
        filters = SessionFilters(
            start_date=_coerce_date(start_date),
            end_date=_coerce_date(end_date),
        )
        return aggregator.build_analytics(self.list_sessions(filters).sessions)

    def get_optimization_report(self) -> OptimizationAnalysis:
        return self._analyzer.analyze(self._scanner.iter_session_entries())

    @Slot()
    def request_optimization_report(self):
        """Build the optimization report in a background thread; emits report_ready."""
        self._cancel_worker()
        self._request_id += 1
        self._set_loading(True)
        worker = _ReportWorker(self._request_id, self._scanner, self._analyzer, self)
        worker.report_finished.connect(self._on_report_finished)
        worker.finished.connect(worker.deleteLater)
        self._worker = worker
        worker.start()

    def _on_report_finished(self, request_id: int, report):
        # A superseded worker may deliver after its replacement started
        if request_id != self._request_id:
            return
        self._worker = None
        self._set_loading(False)
        self.report_ready.emit(report)

    def _cancel_worker(self):
        """Drop any in-flight report; a scan has no side effects to undo."""
        if self._worker is not None and self._worker.isRunning():
            self._worker.report_finished.disconnect(self._on_report_finished)
            self._worker.quit()
            self._worker.wait(2000)
        self._worker = None

    def cleanup(self):
        self._cancel_worker()


def _coerce_date(value: datetime | str | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed
