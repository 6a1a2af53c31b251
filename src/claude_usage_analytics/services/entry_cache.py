"""In-memory cache of decoded entries, invalidated by file size and mtime."""

import threading
from dataclasses import dataclass

from claude_usage_analytics.types.messages import LogEntry


@dataclass
class _CachedFile:
    file_size: int
    mtime: float
    entries: list[LogEntry]


class EntryCache:
    """Caches decoded session files to avoid re-parsing unchanged JSONL files.

    Lives only as long as the process; nothing is written to disk. A lookup
    for a file whose size or mtime changed is a miss, so reads through the
    cache return the same entries a cold parse would.
    """

    def __init__(self):
        self._files: dict[str, _CachedFile] = {}
        self._lock = threading.Lock()

    def get(self, file_path: str, file_size: int, mtime: float) -> list[LogEntry] | None:
        with self._lock:
            cached = self._files.get(file_path)
        if cached is None or self._is_stale(cached, file_size, mtime):
            return None
        return list(cached.entries)

    def put(self, file_path: str, file_size: int, mtime: float, entries: list[LogEntry]):
        with self._lock:
            self._files[file_path] = _CachedFile(file_size, mtime, list(entries))

    def is_stale(self, file_path: str, file_size: int, mtime: float) -> bool:
        with self._lock:
            cached = self._files.get(file_path)
        return cached is None or self._is_stale(cached, file_size, mtime)

    def remove(self, file_path: str):
        with self._lock:
            self._files.pop(file_path, None)

    def clear(self):
        with self._lock:
            self._files.clear()

    def __len__(self) -> int:
        return len(self._files)

    @staticmethod
    def _is_stale(cached: _CachedFile, file_size: int, mtime: float) -> bool:
        return cached.file_size != file_size or abs(cached.mtime - mtime) > 0.001
