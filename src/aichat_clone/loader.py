"""Read a Claude Code session log into a Conversation.

Each line of ``<projects>/<project dir>/<sessionId>.jsonl`` is one JSON object.
Lines with a uuid form the parentUuid chain and become Messages. A few
metadata entry types carry no uuid and are not part of the chain:
- "summary": Compaction summary pointing at a leaf uuid.
- "file-history-snapshot": Editor checkpoint.
- "queue-operation": Prompt queue bookkeeping.
These are skipped. Anything else that is not a well-formed message is an error.
"""

import json
import logging
from pathlib import Path

from .config import get_session_path
from .core import Conversation, Message
from .errors import ParseError, SessionNotFound

logger = logging.getLogger(__name__)

METADATA_TYPES = ("summary", "file-history-snapshot", "queue-operation")


def load_conversation(
    session_id: str,
    project_path: str,
    projects_dir: Path | None = None,
) -> Conversation:
    """Load one session's log, preserving file order exactly.

    Raises ParseError on the first bad line; no partial result is returned.
    """
    path = get_session_path(session_id, project_path, projects_dir)
    if "/" in session_id or "\\" in session_id or not path.is_file():
        raise SessionNotFound(session_id, path)

    numbered = parse_jsonl(path)
    conversation = Conversation(
        session_id=session_id,
        project_path=project_path,
        path=path,
        messages=[msg for _, msg in numbered],
    )
    _check_parent_order(conversation, numbered)
    logger.debug("Loaded %d messages from %s", len(conversation), path)
    return conversation


def parse_jsonl(path: Path) -> list[tuple[int, Message]]:
    """Parse a session log into (line number, Message) pairs."""
    numbered = []
    line_of: dict[str, int] = {}

    with path.open("rb") as f:
        for line_num, raw_line in enumerate(f, 1):
            try:
                line = raw_line.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                raise ParseError(path, line_num, f"not valid UTF-8: {e}") from e
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError as e:
                raise ParseError(path, line_num, f"invalid JSON: {e}") from e

            if not isinstance(entry, dict):
                raise ParseError(path, line_num, "record is not a JSON object")

            if "uuid" not in entry and entry.get("type") in METADATA_TYPES:
                logger.debug("Skipping %s entry at %s:%d", entry["type"], path, line_num)
                continue

            _check_entry(entry, path, line_num)

            uuid = entry["uuid"]
            if uuid in line_of:
                raise ParseError(
                    path, line_num, f"duplicate uuid {uuid} (first seen on line {line_of[uuid]})"
                )

            if entry.get("parentUuid") == uuid:
                raise ParseError(path, line_num, f"message {uuid} is its own parent")
            if numbered and entry["sessionId"] != numbered[0][1].session_id:
                logger.warning(
                    "Mixed sessionId %s at %s:%d", entry["sessionId"], path, line_num
                )

            line_of[uuid] = line_num
            numbered.append((line_num, Message.from_dict(entry)))

    return numbered


def _check_entry(entry: dict, path: Path, line_num: int) -> None:
    """Validate the fields every message record must carry."""
    for key in ("uuid", "sessionId", "type"):
        value = entry.get(key)
        if not isinstance(value, str) or not value:
            raise ParseError(path, line_num, f"missing or invalid {key!r}")

    parent = entry.get("parentUuid")
    if parent is not None and not isinstance(parent, str):
        raise ParseError(path, line_num, "parentUuid must be a string or null")

    msg_data = entry.get("message")
    if msg_data is not None:
        if not isinstance(msg_data, dict):
            raise ParseError(path, line_num, "message must be an object")
        content = msg_data.get("content")
        if content is not None and not isinstance(content, (str, list)):
            raise ParseError(path, line_num, "message.content must be a string or a list")


def _check_parent_order(conversation: Conversation, numbered: list[tuple[int, Message]]) -> None:
    """Reject parent references that point at a later line."""
    seen = set()
    for line_num, msg in numbered:
        parent = msg.parent_uuid
        if parent is not None:
            if not conversation.resolves(parent):
                logger.warning(
                    "Unresolved parentUuid %s in %s:%d", parent, conversation.path, line_num
                )
            elif parent not in seen:
                raise ParseError(
                    conversation.path,
                    line_num,
                    f"parentUuid {parent} refers to a later line",
                )
        seen.add(msg.uuid)
