"""Application configuration manager wrapping QSettings."""

import logging
import os
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot, QSettings

logger = logging.getLogger(__name__)

CLAUDE_DIR_ENV = "CLAUDE_DIR"

# Default values
DEFAULTS = {
    "general/claudeDir": "~/.claude",
    "dashboard/recentSessions": 5,
    "dashboard/topProjects": 10,
    "scan/cacheEntries": False,
    "pricing/tableFile": "",
    "advanced/debugLogging": False,
}


def resolve_claude_dir(configured: str = DEFAULTS["general/claudeDir"]) -> Path:
    """The Claude data directory; the CLAUDE_DIR environment variable wins."""
    override = os.environ.get(CLAUDE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(configured).expanduser()


class ConfigManager(QObject):
    """Centralized application settings."""

    settings_changed = Signal(str)  # key

    def __init__(self, parent=None):
        super().__init__(parent)
        self._settings = QSettings()

    @Slot(str, result=str)
    def get_string(self, key: str) -> str:
        return str(self._settings.value(key, DEFAULTS.get(key, "")))

    @Slot(str, result=int)
    def get_int(self, key: str) -> int:
        val = self._settings.value(key, DEFAULTS.get(key, 0))
        try:
            return int(val)
        except (ValueError, TypeError):
            return DEFAULTS.get(key, 0)

    @Slot(str, result=bool)
    def get_bool(self, key: str) -> bool:
        val = self._settings.value(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    @Slot(str, str)
    def set_string(self, key: str, value: str):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, int)
    def set_int(self, key: str, value: int):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, bool)
    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def claude_dir(self) -> Path:
        return resolve_claude_dir(self.get_string("general/claudeDir"))

    def projects_root(self) -> Path:
        return self.claude_dir() / "projects"

    def pricing_file(self) -> Path | None:
        value = self.get_string("pricing/tableFile")
        return Path(value).expanduser() if value else None
