"""Shared test fixtures for Claude Usage Analytics."""

import os
import sys
from pathlib import Path

import orjson
import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PROJECT_DIR_NAME = "-home-wiz-projects-myapp"


@pytest.fixture(scope="session")
def qapp():
    """Create a QGuiApplication for tests that need Qt."""
    os.environ["QT_QPA_PLATFORM"] = "offscreen"
    from PySide6.QtGui import QGuiApplication

    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication(sys.argv or ["test"])
    yield app


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def simple_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "simple_session.jsonl"


@pytest.fixture
def tools_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "session_with_tools.jsonl"


@pytest.fixture
def malformed_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "malformed_session.jsonl"


@pytest.fixture
def tmp_session_dir(tmp_path) -> Path:
    """Create a temporary Claude projects directory structure."""
    projects_dir = tmp_path / ".claude" / "projects"
    project_dir = projects_dir / PROJECT_DIR_NAME
    project_dir.mkdir(parents=True)
    return projects_dir


@pytest.fixture
def tmp_session_file(tmp_session_dir, simple_session_path) -> Path:
    """Copy the simple session into a mock Claude directory."""
    dest = tmp_session_dir / PROJECT_DIR_NAME / "test-session.jsonl"
    dest.write_text(simple_session_path.read_text())
    return dest


@pytest.fixture
def write_session(tmp_session_dir):
    """Write a session file from a list of raw entry dicts.

    Returns the path; the project directory is created on demand.
    """
    def _write(session_id: str, entries: list[dict], project: str = PROJECT_DIR_NAME) -> Path:
        project_dir = tmp_session_dir / project
        project_dir.mkdir(parents=True, exist_ok=True)
        path = project_dir / f"{session_id}.jsonl"
        path.write_bytes(b"\n".join(orjson.dumps(e) for e in entries) + b"\n")
        return path
    return _write
