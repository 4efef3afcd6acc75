"""Core data models for aichat-clone."""

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass
class Message:
    """A single line of a session log that takes part in the parentUuid chain."""

    uuid: str
    parent_uuid: Optional[str]
    session_id: str
    type: str  # "user" | "assistant" | "system" | "progress"
    content: Any = None  # str or list of blocks, from message.content
    timestamp: Optional[str] = None
    raw: dict = field(default_factory=dict)  # the decoded line, untouched

    @classmethod
    def from_dict(cls, entry: dict) -> "Message":
        msg_data = entry.get("message")
        content = msg_data.get("content") if isinstance(msg_data, dict) else None
        return cls(
            uuid=entry["uuid"],
            parent_uuid=entry.get("parentUuid"),
            session_id=entry["sessionId"],
            type=entry["type"],
            content=content,
            timestamp=entry.get("timestamp"),
            raw=entry,
        )

    def to_dict(self) -> dict:
        """Return the on-disk record, with the modelled fields laid over ``raw``.

        Keys keep the order they had in the source line.
        """
        data = copy.deepcopy(self.raw)
        data["parentUuid"] = self.parent_uuid
        data["sessionId"] = self.session_id
        data["type"] = self.type
        data["uuid"] = self.uuid
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp

        msg_data = data.get("message")
        if isinstance(msg_data, dict):
            msg_data["content"] = copy.deepcopy(self.content)
        elif self.content is not None:
            data["message"] = {"role": self.type, "content": copy.deepcopy(self.content)}
        return data


@dataclass
class Conversation:
    """An ordered session log plus a uuid index over it."""

    session_id: str
    project_path: str
    path: Path
    messages: list[Message] = field(default_factory=list)
    by_uuid: dict[str, Message] = field(init=False, repr=False)

    def __post_init__(self):
        self.by_uuid = {m.uuid: m for m in self.messages}

    def __len__(self) -> int:
        return len(self.messages)

    def resolves(self, uuid: Optional[str]) -> bool:
        """True if ``uuid`` is None or names a message of this log."""
        return uuid is None or uuid in self.by_uuid


@dataclass
class HistoryRecord:
    """One line of the global history index."""

    display: str
    project: str
    session_id: str
    timestamp: int  # epoch milliseconds
    pasted_contents: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, entry: dict) -> "HistoryRecord":
        return cls(
            display=entry.get("display", ""),
            project=entry.get("project", ""),
            session_id=entry.get("sessionId", ""),
            timestamp=entry.get("timestamp", 0),
            pasted_contents=entry.get("pastedContents") or {},
        )

    def to_dict(self) -> dict:
        return {
            "display": self.display,
            "pastedContents": self.pasted_contents,
            "timestamp": self.timestamp,
            "project": self.project,
            "sessionId": self.session_id,
        }
