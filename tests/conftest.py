"""Shared test fixtures for aichat-clone."""

import json
import uuid

import pytest

PROJECT_PATH = "/test/project"
PROJECT_DIRNAME = "-test-project"


def generate_message(msg_uuid, parent_uuid, session_id, msg_type, content):
    """Build one log line the way Claude Code writes it.

    User messages carry string content, assistant messages a list of blocks.
    """
    if msg_type == "user":
        message = {"role": "user", "content": content}
    else:
        message = {"role": "assistant", "content": [{"type": "text", "text": content}]}
    return {
        "parentUuid": parent_uuid,
        "sessionId": session_id,
        "type": msg_type,
        "message": message,
        "uuid": msg_uuid,
        "timestamp": "2025-01-01T00:00:00.000Z",
    }


def write_jsonl(path, entries):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "".join(json.dumps(e, separators=(",", ":")) + "\n" for e in entries),
        encoding="utf-8",
    )


def read_jsonl(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]


@pytest.fixture
def claude_home(tmp_path, monkeypatch):
    """Create an isolated Claude data directory with an empty history index."""
    home = tmp_path / ".claude"
    (home / "projects" / PROJECT_DIRNAME).mkdir(parents=True)
    (home / "history.jsonl").touch()

    monkeypatch.setenv("AICHAT_CLAUDE_HOME", str(home))
    monkeypatch.delenv("AICHAT_CLAUDE_PATH", raising=False)
    monkeypatch.delenv("AICHAT_HISTORY_PATH", raising=False)
    return home


@pytest.fixture
def project_dir(claude_home):
    return claude_home / "projects" / PROJECT_DIRNAME


@pytest.fixture
def history_file(claude_home):
    return claude_home / "history.jsonl"


@pytest.fixture
def make_conversation(project_dir):
    """Return a factory writing a linear conversation of N alternating messages.

    Odd-numbered messages are from the user, even-numbered from the assistant.
    The factory returns the new session id.
    """

    def _make(num_messages):
        session_id = str(uuid.uuid4())
        entries = []
        prev_uuid = None
        for i in range(1, num_messages + 1):
            msg_uuid = str(uuid.uuid4())
            if i % 2 == 1:
                entries.append(generate_message(msg_uuid, prev_uuid, session_id, "user", f"User message {i}"))
            else:
                entries.append(generate_message(msg_uuid, prev_uuid, session_id, "assistant", f"Assistant response {i}"))
            prev_uuid = msg_uuid
        write_jsonl(project_dir / f"{session_id}.jsonl", entries)
        return session_id

    return _make
