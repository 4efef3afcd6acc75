"""Give a retained slice of messages a fresh identity.

The slice becomes a log of its own: one new sessionId for every line, new
message uuids, and parent links rewritten through the old -> new uuid map.
The first message is detached from the discarded head.
"""

import copy
import logging
import uuid
from dataclasses import dataclass, field

from .core import Message
from .errors import CloneError

logger = logging.getLogger(__name__)

# Top-level fields besides parentUuid that hold the uuid of another line.
REFERENCE_FIELDS = ("logicalParentUuid", "sourceToolAssistantUUID")


@dataclass
class RemappedLog:
    """Output of the remapper: the new session id and its messages."""

    session_id: str
    messages: list[Message]
    uuid_map: dict[str, str] = field(default_factory=dict)  # old uuid -> new uuid


def new_id() -> str:
    """Return a fresh random identifier."""
    try:
        return str(uuid.uuid4())
    except (OSError, NotImplementedError) as e:
        raise CloneError(f"Could not generate an identifier: {e}") from e


def remap_messages(messages: list[Message], new_session_id: str | None = None) -> RemappedLog:
    """Rewrite ``messages`` for a brand-new log.

    Only references to messages earlier in the slice survive; anything else
    (a branch rooted in the discarded head, an unknown uuid) is set to null.
    """
    session_id = new_session_id or new_id()
    old_session_ids = {m.session_id for m in messages}
    uuid_map: dict[str, str] = {}
    remapped = []

    for index, msg in enumerate(messages):
        if index == 0:
            parent = None
        else:
            parent = _resolve(msg.parent_uuid, uuid_map, msg.uuid, "parentUuid")

        new_uuid = new_id()

        raw = _replace_ids(msg.raw, old_session_ids, session_id)
        for key in REFERENCE_FIELDS:
            if raw.get(key) is not None:
                raw[key] = _resolve(raw[key], uuid_map, msg.uuid, key)

        uuid_map[msg.uuid] = new_uuid
        remapped.append(Message(
            uuid=new_uuid,
            parent_uuid=parent,
            session_id=session_id,
            type=msg.type,
            content=_replace_ids(msg.content, old_session_ids, session_id),
            timestamp=msg.timestamp,
            raw=raw,
        ))

    return RemappedLog(session_id=session_id, messages=remapped, uuid_map=uuid_map)


def _resolve(ref: str | None, uuid_map: dict[str, str], owner: str, key: str) -> str | None:
    if ref is None:
        return None
    if ref in uuid_map:
        return uuid_map[ref]
    logger.warning("Detaching %s of %s: %s is not retained", key, owner, ref)
    return None


def _replace_ids(value, old_ids: set[str], replacement: str):
    """Return a copy of ``value`` with every occurrence of ``old_ids`` replaced, at any depth."""
    if isinstance(value, str):
        for old in old_ids:
            value = value.replace(old, replacement)
        return value
    if isinstance(value, dict):
        return {k: _replace_ids(v, old_ids, replacement) for k, v in value.items()}
    if isinstance(value, list):
        return [_replace_ids(v, old_ids, replacement) for v in value]
    return copy.deepcopy(value)
