"""Path resolution for Claude Code's data directory."""

import os
import re
from pathlib import Path


def get_claude_home() -> Path:
    """Return the root of Claude Code's data directory."""
    env = os.environ.get("AICHAT_CLAUDE_HOME")
    if env:
        return Path(env)

    return Path.home() / ".claude"


def get_claude_code_path() -> Path:
    """Return the path to Claude Code's projects directory."""
    env = os.environ.get("AICHAT_CLAUDE_PATH")
    if env:
        return Path(env)

    return get_claude_home() / "projects"


def get_history_path() -> Path:
    """Return the path to the global history.jsonl index."""
    env = os.environ.get("AICHAT_HISTORY_PATH")
    if env:
        return Path(env)

    return get_claude_home() / "history.jsonl"


def project_dir_name(project_path: str) -> str:
    """Derive a project's directory name from its filesystem path.

    Every character outside [A-Za-z0-9] becomes "-":
    /Users/farhaj/dev/travel-agency -> -Users-farhaj-dev-travel-agency
    """
    return re.sub(r"[^A-Za-z0-9]", "-", str(project_path))


def get_project_dir(project_path: str, projects_dir: Path | None = None) -> Path:
    """Return the directory holding the session logs of ``project_path``."""
    base = projects_dir if projects_dir is not None else get_claude_code_path()
    return base / project_dir_name(project_path)


def get_session_path(session_id: str, project_path: str, projects_dir: Path | None = None) -> Path:
    """Return the log file of one session."""
    return get_project_dir(project_path, projects_dir) / f"{session_id}.jsonl"
