"""Half-clone a session: keep the later half of a log under a new session id."""

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import HistoryAppendFailure
from .history import HistoryIndex, make_record
from .loader import load_conversation
from .marker import display_preview, tag_display, tag_message
from .remap import remap_messages
from .split import split_point
from .writer import write_conversation

logger = logging.getLogger(__name__)


@dataclass
class CloneResult:
    """What a successful half-clone produced."""

    session_id: str
    source_session_id: str
    project_path: str
    path: Path
    kept: int
    skipped: int
    display: str


def half_clone(
    session_id: str,
    project_path: str,
    projects_dir: Path | None = None,
    history: HistoryIndex | None = None,
) -> CloneResult:
    """Write a new session holding the later half of ``session_id``.

    ``project_path`` is the project the session belongs to, which need not be
    the current directory. Nothing is written unless every check passes, and
    if the clone cannot be recorded in the history index the new log is
    removed again.
    """
    conversation = load_conversation(session_id, project_path, projects_dir)
    split = split_point(len(conversation))

    tail = conversation.messages[split.skip:]
    remapped = remap_messages(tail)
    display = tag_display(display_preview(remapped.messages))
    tag_message(remapped.messages[0])

    dest = conversation.path.parent / f"{remapped.session_id}.jsonl"
    write_conversation(dest, remapped.messages)

    history = history if history is not None else HistoryIndex()
    try:
        history.append(make_record(remapped.session_id, project_path, display))
    except HistoryAppendFailure:
        logger.error("Removing %s: clone could not be recorded in history", dest)
        dest.unlink(missing_ok=True)
        raise

    logger.info(
        "Half-cloned %s -> %s (kept %d, skipped %d)",
        session_id, remapped.session_id, split.keep, split.skip,
    )
    return CloneResult(
        session_id=remapped.session_id,
        source_session_id=session_id,
        project_path=project_path,
        path=dest,
        kept=split.keep,
        skipped=split.skip,
        display=display,
    )
