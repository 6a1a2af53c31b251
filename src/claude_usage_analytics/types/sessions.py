"""Session summary and detail types."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from claude_usage_analytics.types.messages import TokenUsage, format_timestamp

if TYPE_CHECKING:
    from claude_usage_analytics.types.messages import LogEntry


@dataclass
class TokenStats:
    input: int = 0
    output: int = 0
    cache_creation: int = 0
    cache_read: int = 0

    @property
    def total(self) -> int:
        return self.input + self.output + self.cache_creation + self.cache_read

    def add(self, other: "TokenStats") -> None:
        self.input += other.input
        self.output += other.output
        self.cache_creation += other.cache_creation
        self.cache_read += other.cache_read

    def add_usage(self, usage: TokenUsage) -> None:
        self.input += usage.input_tokens
        self.output += usage.output_tokens
        self.cache_creation += usage.cache_creation_input_tokens
        self.cache_read += usage.cache_read_input_tokens

    def copy(self) -> "TokenStats":
        return TokenStats(self.input, self.output, self.cache_creation, self.cache_read)

    def as_usage(self) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input,
            output_tokens=self.output,
            cache_creation_input_tokens=self.cache_creation,
            cache_read_input_tokens=self.cache_read,
        )

    def to_dict(self) -> dict:
        return {
            "input": self.input,
            "output": self.output,
            "cacheCreation": self.cache_creation,
            "cacheRead": self.cache_read,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TokenStats":
        return cls(
            input=int(data.get("input", 0)),
            output=int(data.get("output", 0)),
            cache_creation=int(data.get("cacheCreation", 0)),
            cache_read=int(data.get("cacheRead", 0)),
        )


@dataclass
class SessionSummary:
    id: str
    project_dir: str
    project_name: str
    title: str
    first_message: str
    start_time: datetime
    end_time: datetime
    duration: int  # minutes
    message_count: int
    token_stats: TokenStats
    cost: float  # USD
    model: str
    is_agent: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectDir": self.project_dir,
            "projectName": self.project_name,
            "title": self.title,
            "firstMessage": self.first_message,
            "startTime": format_timestamp(self.start_time),
            "endTime": format_timestamp(self.end_time),
            "duration": self.duration,
            "messageCount": self.message_count,
            "tokenStats": self.token_stats.to_dict(),
            "cost": self.cost,
            "model": self.model,
            "isAgent": self.is_agent,
        }


@dataclass
class SessionDetail(SessionSummary):
    entries: list["LogEntry"] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["messages"] = [entry.to_dict() for entry in self.entries]
        return result


@dataclass
class SessionFilters:
    project: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    search: str = ""


@dataclass
class SessionPage:
    sessions: list[SessionSummary]
    total: int
    page: int = 1
    total_pages: int = 0

    def to_dict(self) -> dict:
        return {
            "sessions": [s.to_dict() for s in self.sessions],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
        }
