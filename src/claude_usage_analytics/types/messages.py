"""Entry-level types for decoded JSONL log data."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union


class EntryKind(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SUMMARY = "summary"
    SYSTEM = "system"
    SNAPSHOT = "file-history-snapshot"


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0

    @property
    def total(self) -> int:
        return (self.input_tokens + self.output_tokens +
                self.cache_creation_input_tokens + self.cache_read_input_tokens)

    def to_dict(self) -> dict:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cache_creation_input_tokens": self.cache_creation_input_tokens,
            "cache_read_input_tokens": self.cache_read_input_tokens,
        }


# Content blocks: a closed set of tags plus UnknownBlock for anything newer.

@dataclass
class TextBlock:
    text: str = ""

    def to_dict(self) -> dict:
        return {"type": "text", "text": self.text}


@dataclass
class ToolUseBlock:
    id: str = ""
    name: str = ""
    input: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"type": "tool_use", "id": self.id, "name": self.name, "input": self.input}


@dataclass
class ToolResultBlock:
    tool_use_id: str = ""
    content: Any = ""  # str or list of sub-blocks
    is_error: bool = False

    def to_dict(self) -> dict:
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
            "is_error": self.is_error,
        }


@dataclass
class ThinkingBlock:
    thinking: str = ""

    def to_dict(self) -> dict:
        return {"type": "thinking", "thinking": self.thinking}


@dataclass
class UnknownBlock:
    """A block whose tag this version does not understand, kept verbatim."""
    type: str = ""
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return dict(self.data)


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock, ThinkingBlock, UnknownBlock]


@dataclass
class Message:
    role: str = ""
    content: Union[str, list[ContentBlock]] = ""
    model: str = ""
    usage: Optional[TokenUsage] = None

    def to_dict(self) -> dict:
        if isinstance(self.content, str):
            content: Any = self.content
        else:
            content = [block.to_dict() for block in self.content]
        result = {"role": self.role, "content": content}
        if self.model:
            result["model"] = self.model
        if self.usage is not None:
            result["usage"] = self.usage.to_dict()
        return result


@dataclass
class LogEntry:
    kind: EntryKind
    uuid: str = ""
    parent_uuid: Optional[str] = None
    session_id: str = ""
    timestamp: Optional[datetime] = None
    message: Optional[Message] = None
    summary: Optional[str] = None
    cwd: str = ""
    git_branch: str = ""
    version: str = ""

    @property
    def usage(self) -> Optional[TokenUsage]:
        return self.message.usage if self.message else None

    @property
    def model(self) -> str:
        return self.message.model if self.message else ""

    def to_dict(self) -> dict:
        """Re-emit the entry in its on-disk JSON shape."""
        result: dict[str, Any] = {"type": self.kind.value}
        if self.uuid:
            result["uuid"] = self.uuid
        if self.parent_uuid is not None:
            result["parentUuid"] = self.parent_uuid
        if self.session_id:
            result["sessionId"] = self.session_id
        if self.timestamp is not None:
            result["timestamp"] = format_timestamp(self.timestamp)
        if self.message is not None:
            result["message"] = self.message.to_dict()
        if self.summary is not None:
            result["summary"] = self.summary
        if self.cwd:
            result["cwd"] = self.cwd
        if self.git_branch:
            result["gitBranch"] = self.git_branch
        if self.version:
            result["version"] = self.version
        return result


def format_timestamp(ts: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with a trailing Z."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
