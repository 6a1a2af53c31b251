"""Derive display names from Claude project directory names and session files."""

AGENT_SESSION_PREFIX = "agent-"
SESSION_FILE_SUFFIX = ".jsonl"


def extract_project_name(project_dir: str) -> str:
    """Get a display name from an encoded project directory name.

    -Users-wiz-Documents-bildux-com → bildux.com
    -home-wiz-AI-LLM → LLM
    """
    parts = project_dir.removeprefix("-").split("-")
    if len(parts) >= 2 and parts[-1] == "com":
        return f"{parts[-2]}.com"
    return parts[-1] or project_dir


def session_id_from_filename(file_name: str) -> str:
    """abc123.jsonl → abc123"""
    return file_name.removesuffix(SESSION_FILE_SUFFIX)


def is_agent_session(session_id: str) -> bool:
    """Agent (background tooling) sessions are stored as agent-<id>.jsonl."""
    return session_id.startswith(AGENT_SESSION_PREFIX)
