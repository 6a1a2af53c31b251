"""Tests for claude_usage_analytics.services.analytics_service."""

import pytest

from claude_usage_analytics.services.analytics_service import AnalyticsService
from claude_usage_analytics.services.config_manager import CLAUDE_DIR_ENV, ConfigManager
from claude_usage_analytics.types.messages import TextBlock, ToolUseBlock
from claude_usage_analytics.types.optimization import OptimizationAnalysis
from claude_usage_analytics.types.sessions import SessionFilters

from helpers import assistant_entry, user_entry, wait_for_worker

OTHER_PROJECT = "-home-wiz-AI-LLM"


@pytest.fixture
def populated(tmp_session_dir, tmp_session_file, write_session):
    """The simple fixture session plus two generated ones in another project."""
    write_session("llm-1", [
        user_entry("Train the tokenizer", "2026-01-06T08:00:00Z"),
        assistant_entry("2026-01-06T08:30:00Z", input_tokens=1000, output_tokens=100),
    ], project=OTHER_PROJECT)
    write_session("llm-2", [
        user_entry("Evaluate the checkpoint", "2026-01-07T08:00:00Z"),
        assistant_entry("2026-01-07T08:10:00Z", input_tokens=2000, output_tokens=50),
    ], project=OTHER_PROJECT)
    write_session("agent-bg", [
        user_entry("Agent housekeeping", "2026-01-08T08:00:00Z"),
        assistant_entry("2026-01-08T08:10:00Z", input_tokens=5000),
    ])
    return tmp_session_dir


@pytest.fixture
def service(qapp, populated):
    svc = AnalyticsService(projects_root=str(populated))
    yield svc
    svc.cleanup()


@pytest.fixture
def isolated_config(qapp, tmp_path, monkeypatch):
    from PySide6.QtCore import QSettings
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path / "config"))
    monkeypatch.delenv(CLAUDE_DIR_ENV, raising=False)
    return ConfigManager()


class TestSessions:
    def test_list_sessions(self, service):
        page = service.list_sessions()
        assert page.total == 3
        assert [s.id for s in page.sessions] == ["llm-2", "llm-1", "test-session"]

    def test_list_sessions_filtered_and_paged(self, service):
        page = service.list_sessions(SessionFilters(project="LLM"), page=1, limit=1)
        assert page.total == 2
        assert page.total_pages == 2
        assert [s.id for s in page.sessions] == ["llm-2"]

    def test_get_session(self, service):
        detail = service.get_session("test-session")
        assert detail.title == "Fix login bug"
        assert len(detail.entries) == 6

    def test_get_missing_session(self, service):
        assert service.get_session("missing") is None

    def test_delete_emits_signal(self, service, populated):
        deleted = []
        service.session_deleted.connect(deleted.append)

        assert service.delete_session("llm-1") is True
        assert deleted == ["llm-1"]
        assert service.list_sessions().total == 2

    def test_failed_delete_is_silent(self, service):
        deleted = []
        service.session_deleted.connect(deleted.append)
        assert service.delete_session("missing") is False
        assert deleted == []

    def test_project_names(self, service):
        assert service.list_project_names() == ["LLM", "myapp"]

    def test_project_groups(self, service):
        groups = service.list_project_groups()
        assert {g.project_name: g.session_count for g in groups} == {"LLM": 2, "myapp": 1}

    def test_export(self, service):
        result = service.export_session("test-session", "md")
        assert result.filename == "claude-session-test-ses.md"
        assert result.content.startswith("# Fix login bug")

    def test_export_missing(self, service):
        assert service.export_session("missing", "json") is None

    def test_export_unknown_format_falls_back_to_json(self, service):
        result = service.export_session("test-session", "docx")
        assert result.filename == "claude-session-test-ses.json"

    def test_render_conversation_as_text(self):
        text = AnalyticsService.render_conversation_as_text([
            TextBlock("Running it"),
            ToolUseBlock("t1", "Bash", {"command": "pytest"}),
        ])
        assert text.startswith("Running it\n\n[Tool: Bash]\n")


class TestSummaries:
    def test_dashboard(self, service):
        dashboard = service.get_dashboard_summary()
        assert dashboard.totals.sessions == 3
        assert [s.id for s in dashboard.recent_sessions] == ["llm-2", "llm-1", "test-session"]
        assert [p.name for p in dashboard.project_stats][0] == "LLM"

    def test_analytics_with_string_dates(self, service):
        analytics = service.get_analytics("2026-01-06", "2026-01-06T23:59:59Z")
        assert analytics.totals.sessions == 1
        assert [d.date for d in analytics.daily_stats] == ["2026-01-06"]

    def test_analytics_unbounded(self, service):
        analytics = service.get_analytics()
        assert analytics.totals.sessions == 3
        assert analytics.totals.tokens == 855 + 1100 + 2050

    def test_analytics_invalid_date(self, service):
        with pytest.raises(ValueError, match="Invalid date"):
            service.get_analytics("last tuesday")

    def test_optimization_report(self, service):
        report = service.get_optimization_report()
        assert isinstance(report, OptimizationAnalysis)
        assert report.total_current_cost == pytest.approx(
            sum(s.cost for s in service.list_sessions().sessions)
        )


class TestBackgroundReport:
    def test_report_ready_signal(self, service):
        reports = []
        loading_states = []
        service.report_ready.connect(reports.append)
        service.loading_changed.connect(lambda: loading_states.append(service.loading))

        service.request_optimization_report()
        assert service.loading is True
        wait_for_worker(service)

        assert len(reports) == 1
        assert isinstance(reports[0], OptimizationAnalysis)
        assert service.loading is False
        assert loading_states == [True, False]

    def test_second_request_replaces_first(self, service):
        reports = []
        service.report_ready.connect(reports.append)

        service.request_optimization_report()
        service.request_optimization_report()
        wait_for_worker(service)

        assert len(reports) == 1
        assert service.loading is False


class TestConfiguration:
    def test_default_root_from_config(self, isolated_config, populated, monkeypatch):
        monkeypatch.setenv(CLAUDE_DIR_ENV, str(populated.parent))
        svc = AnalyticsService(config=isolated_config)
        assert svc.scanner.projects_root == populated
        assert svc.list_sessions().total == 3

    def test_env_root_without_config(self, qapp, populated, monkeypatch):
        monkeypatch.setenv(CLAUDE_DIR_ENV, str(populated.parent))
        svc = AnalyticsService()
        assert svc.scanner.projects_root == populated
        assert svc.list_sessions().total == 3

    def test_explicit_root_beats_config(self, isolated_config, populated, tmp_path):
        isolated_config.set_string("general/claudeDir", str(tmp_path / "elsewhere"))
        svc = AnalyticsService(projects_root=str(populated), config=isolated_config)
        assert svc.list_sessions().total == 3

    def test_dashboard_limits_from_config(self, isolated_config, populated):
        isolated_config.set_int("dashboard/recentSessions", 1)
        isolated_config.set_int("dashboard/topProjects", 1)
        svc = AnalyticsService(projects_root=str(populated), config=isolated_config)

        dashboard = svc.get_dashboard_summary()
        assert len(dashboard.recent_sessions) == 1
        assert len(dashboard.project_stats) == 1

    def test_pricing_file_from_config(self, isolated_config, populated, tmp_path):
        prices = tmp_path / "prices.json"
        prices.write_text(
            '{"claude-sonnet-4-5-20250929": {"input": 0, "output": 0, "cacheWrite": 0, "cacheRead": 0}}'
        )
        isolated_config.set_string("pricing/tableFile", str(prices))
        svc = AnalyticsService(projects_root=str(populated), config=isolated_config)

        llm = svc.get_session("llm-1")
        assert llm.cost == 0

    def test_entry_cache_enabled(self, isolated_config, populated):
        isolated_config.set_bool("scan/cacheEntries", True)
        svc = AnalyticsService(projects_root=str(populated), config=isolated_config)

        first = [s.to_dict() for s in svc.list_sessions().sessions]
        second = [s.to_dict() for s in svc.list_sessions().sessions]
        assert first == second
