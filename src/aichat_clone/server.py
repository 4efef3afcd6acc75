"""FastAPI web server for aichat-clone."""

import logging

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from .clone import half_clone
from .errors import (
    CloneError,
    InsufficientMessages,
    ParseError,
    SessionNotFound,
)
from .history import HistoryIndex
from .loader import load_conversation

logger = logging.getLogger(__name__)

app = FastAPI(title="aichat-clone", version="0.1.0")


class HalfCloneRequest(BaseModel):
    session_id: str = Field(alias="sessionId")
    project: str


def _status_for(error: CloneError) -> int:
    """Map a clone failure to an HTTP status code."""
    if isinstance(error, SessionNotFound):
        return 404
    if isinstance(error, (InsufficientMessages, ParseError)):
        return 422
    return 500


def _message_to_dict(msg) -> dict:
    """Convert a Message dataclass to a JSON-serializable dict."""
    return {
        "uuid": msg.uuid,
        "parentUuid": msg.parent_uuid,
        "type": msg.type,
        "content": msg.content,
        "timestamp": msg.timestamp,
    }


def _record_to_dict(record) -> dict:
    """Convert a HistoryRecord dataclass to a JSON-serializable dict."""
    return {
        "sessionId": record.session_id,
        "project": record.project,
        "display": record.display,
        "timestamp": record.timestamp,
    }


# ── Routes ───────────────────────────────────────────────────────


@app.post("/api/half-clone")
async def create_half_clone(request: HalfCloneRequest):
    """Clone the later half of a session into a new one."""
    try:
        result = half_clone(request.session_id, request.project)
    except CloneError as e:
        status = _status_for(e)
        if status == 500:
            logger.error("Half-clone of %s failed: %s", request.session_id, e)
        raise HTTPException(status_code=status, detail=str(e))

    return {
        "sessionId": result.session_id,
        "sourceSessionId": result.source_session_id,
        "project": result.project_path,
        "kept": result.kept,
        "skipped": result.skipped,
        "display": result.display,
    }


@app.get("/api/session/{session_id}")
async def get_session(
    session_id: str,
    project: str = Query(..., description="Project path the session belongs to"),
):
    """Return the messages of a session in file order."""
    try:
        conversation = load_conversation(session_id, project)
    except CloneError as e:
        raise HTTPException(status_code=_status_for(e), detail=str(e))

    return {
        "session_id": session_id,
        "project": project,
        "messages": [_message_to_dict(m) for m in conversation.messages],
    }


@app.get("/api/history")
async def get_history(
    project: str | None = Query(None, description="Filter by project path"),
    limit: int = Query(50, ge=1, le=1000),
):
    """Return history records, most recent first."""
    records = [
        r for r in HistoryIndex().records()
        if project is None or r.project == project
    ]
    records.reverse()

    return {
        "total": len(records),
        "records": [_record_to_dict(r) for r in records[:limit]],
    }
