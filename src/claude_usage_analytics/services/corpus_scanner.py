"""Walk the projects root and build filtered, sorted session listings."""

import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from claude_usage_analytics.services.entry_cache import EntryCache
from claude_usage_analytics.services.jsonl_parser import parse_session_file
from claude_usage_analytics.services.session_builder import (
    build_session_detail,
    build_session_summary,
)
from claude_usage_analytics.types.messages import LogEntry
from claude_usage_analytics.types.sessions import (
    SessionDetail,
    SessionFilters,
    SessionPage,
    SessionSummary,
)
from claude_usage_analytics.utils.path_codec import (
    SESSION_FILE_SUFFIX,
    is_agent_session,
    session_id_from_filename,
)
from claude_usage_analytics.utils.path_validation import (
    is_valid_session_id,
    validate_session_path,
)
from claude_usage_analytics.utils.pricing import PricingTable

logger = logging.getLogger(__name__)


class SessionScanner:
    """Re-reads the on-disk corpus on every call.

    Layout: <projects_root>/<encoded project dir>/<session id>.jsonl
    """

    def __init__(
        self,
        projects_root: str | Path,
        pricing: PricingTable | None = None,
        cache: EntryCache | None = None,
    ):
        self._projects_root = Path(projects_root)
        self._pricing = pricing or PricingTable()
        self._cache = cache

    @property
    def projects_root(self) -> Path:
        return self._projects_root

    @property
    def pricing(self) -> PricingTable:
        return self._pricing

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def _iter_project_dirs(self) -> Iterator[Path]:
        try:
            entries = sorted(self._projects_root.iterdir())
        except OSError as e:
            logger.warning("Cannot list projects root %s: %s", self._projects_root, e)
            return

        for entry in entries:
            try:
                if entry.is_dir():
                    yield entry
            except OSError:
                continue

    def _iter_session_files(self) -> Iterator[tuple[str, Path]]:
        """Yield (project dir name, session file) pairs, agent sessions excluded."""
        for project_dir in self._iter_project_dirs():
            try:
                files = sorted(project_dir.glob(f"*{SESSION_FILE_SUFFIX}"))
            except OSError as e:
                logger.warning("Skipping unreadable project dir %s: %s", project_dir, e)
                continue

            for session_file in files:
                if is_agent_session(session_id_from_filename(session_file.name)):
                    continue
                try:
                    if not session_file.is_file():
                        continue
                except OSError:
                    continue
                yield project_dir.name, session_file

    def _read_entries(self, session_file: Path) -> list[LogEntry]:
        if self._cache is None:
            return parse_session_file(session_file)

        try:
            stat = session_file.stat()
        except OSError:
            return []
        key = str(session_file)
        cached = self._cache.get(key, stat.st_size, stat.st_mtime)
        if cached is not None:
            return cached
        entries = parse_session_file(session_file)
        self._cache.put(key, stat.st_size, stat.st_mtime, entries)
        return entries

    def iter_session_entries(self) -> Iterator[tuple[SessionSummary, list[LogEntry]]]:
        """Yield every non-agent session with its raw entries."""
        for project_name, session_file in self._iter_session_files():
            session_id = session_id_from_filename(session_file.name)
            entries = self._read_entries(session_file)
            summary = build_session_summary(entries, session_id, project_name, self._pricing)
            if summary is not None:
                yield summary, entries

    def load_summaries(self) -> list[SessionSummary]:
        """All non-agent sessions, start time descending."""
        sessions = [summary for summary, _ in self.iter_session_entries()]
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_sessions(
        self,
        filters: SessionFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> SessionPage:
        """Filter, then paginate. total is the filtered count before slicing."""
        sessions = self.load_summaries()
        if filters is not None:
            sessions = [s for s in sessions if matches_filters(s, filters)]

        total = len(sessions)
        page_num = max(1, page or 1)
        if page is not None and limit:
            start = (page_num - 1) * limit
            sessions = sessions[start:start + limit]

        per_page = limit or total
        total_pages = math.ceil(total / per_page) if per_page else 0
        return SessionPage(
            sessions=sessions, total=total, page=page_num, total_pages=total_pages,
        )

    def get_session(self, session_id: str) -> SessionDetail | None:
        """Find a session by id across all projects, with its full entry list."""
        for project_dir, session_file in self._find_session_files(session_id):
            entries = self._read_entries(session_file)
            detail = build_session_detail(entries, session_id, project_dir, self._pricing)
            if detail is not None:
                return detail
        return None

    def delete_session(self, session_id: str) -> bool:
        """Remove the backing file. Returns False if none was found or removal failed."""
        for _, session_file in self._find_session_files(session_id):
            try:
                session_file.unlink()
            except OSError as e:
                logger.warning("Failed to delete session file %s: %s", session_file, e)
                continue
            if self._cache is not None:
                self._cache.remove(str(session_file))
            logger.info("Deleted session %s", session_id)
            return True
        return False

    def list_project_names(self) -> list[str]:
        return sorted({s.project_name for s in self.load_summaries()})

    def _find_session_files(self, session_id: str) -> Iterator[tuple[str, Path]]:
        if not is_valid_session_id(session_id):
            logger.warning("Rejected invalid session id: %r", session_id)
            return

        for project_dir in self._iter_project_dirs():
            candidate = project_dir / f"{session_id}{SESSION_FILE_SUFFIX}"
            try:
                if not candidate.is_file():
                    continue
            except OSError:
                continue
            if not validate_session_path(str(candidate), str(self._projects_root)):
                logger.error("Session path escapes projects root: %s", candidate)
                continue
            yield project_dir.name, candidate


def matches_filters(session: SessionSummary, filters: SessionFilters) -> bool:
    """AND of every filter that is set; search is an OR across title, first message, project."""
    if filters.project and filters.project not in (session.project_name, session.project_dir):
        return False
    if filters.start_date is not None and session.start_time < _as_aware(filters.start_date):
        return False
    if filters.end_date is not None and session.start_time > _as_aware(filters.end_date):
        return False
    if filters.search:
        needle = filters.search.lower()
        haystacks = (session.title, session.first_message, session.project_name)
        if not any(needle in h.lower() for h in haystacks):
            return False
    return True


def _as_aware(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt
