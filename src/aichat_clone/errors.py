"""Exceptions raised while cloning a session."""

from pathlib import Path


class CloneError(Exception):
    """Base class for every failure of a clone operation."""


class SessionNotFound(CloneError):
    """No log file exists for the session/project pair."""

    def __init__(self, session_id: str, path: Path):
        self.session_id = session_id
        self.path = path
        super().__init__(f"Session {session_id} not found at {path}")


class ParseError(CloneError):
    """A line of a session log is not a well-formed message record."""

    def __init__(self, path: Path, line_num: int, reason: str):
        self.path = path
        self.line_num = line_num
        self.reason = reason
        super().__init__(f"{path}:{line_num}: {reason}")


class InsufficientMessages(CloneError):
    """The source log is too short to be split."""

    def __init__(self, count: int, minimum: int = 2):
        self.count = count
        self.minimum = minimum
        super().__init__(
            f"Session has fewer than {minimum} messages ({count}), nothing to clone"
        )


class WriteFailure(CloneError):
    """The destination log could not be created or finalized."""


class HistoryAppendFailure(CloneError):
    """The clone could not be recorded in the history index."""
