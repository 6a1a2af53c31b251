"""Session id and path validation for the projects root sandbox."""

import os

# Session ids are file stems, so anything a directory listing can return is
# accepted as long as it stays a single path component.
_FORBIDDEN_ID_CHARS = ("/", "\\", "\0")


def is_valid_session_id(session_id: str) -> bool:
    """Reject ids that could name a path outside a project directory."""
    if not session_id or session_id in (".", ".."):
        return False
    return not any(ch in session_id for ch in _FORBIDDEN_ID_CHARS)


def is_path_allowed(path: str, root: str) -> bool:
    """Validate that a path is within root.

    Resolves symlinks before checking to prevent escape attacks.
    """
    try:
        resolved = os.path.realpath(os.path.expanduser(path))
        resolved_root = os.path.realpath(os.path.expanduser(root))
    except (OSError, ValueError):
        return False
    return resolved.startswith(resolved_root + os.sep) or resolved == resolved_root


def validate_session_path(path: str, root: str) -> bool:
    """Validate that a path points to a session file within root."""
    if not path.endswith(".jsonl"):
        return False
    return is_path_allowed(path, root)
