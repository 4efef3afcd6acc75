"""End-to-end tests for half-cloning a session."""

import json
from unittest.mock import patch

import pytest

from aichat_clone.clone import half_clone
from aichat_clone.errors import CloneError, HistoryAppendFailure, InsufficientMessages, SessionNotFound
from aichat_clone.history import HistoryIndex
from aichat_clone.loader import load_conversation

from .conftest import PROJECT_PATH, generate_message, read_jsonl, write_jsonl


class TestHalfClone:
    """Tests for half_clone."""

    @pytest.mark.parametrize("count, kept", [(6, 3), (7, 4), (2, 1)])
    def test_keeps_later_half(self, make_conversation, project_dir, count, kept):
        session_id = make_conversation(count)
        result = half_clone(session_id, PROJECT_PATH)

        assert result.path == project_dir / f"{result.session_id}.jsonl"
        assert result.kept == kept
        assert result.skipped == count - kept
        assert len(read_jsonl(result.path)) == kept

    def test_keeps_the_tail(self, make_conversation):
        session_id = make_conversation(7)
        result = half_clone(session_id, PROJECT_PATH)

        lines = read_jsonl(result.path)
        assert lines[-1]["message"]["content"] == "User message 7"
        assert lines[1]["message"]["content"] == "User message 5"

    def test_single_message_fails(self, make_conversation, project_dir, history_file):
        session_id = make_conversation(1)

        with pytest.raises(InsufficientMessages) as exc:
            half_clone(session_id, PROJECT_PATH)

        assert "fewer than 2 messages" in str(exc.value)
        assert [p.name for p in project_dir.iterdir()] == [f"{session_id}.jsonl"]
        assert history_file.read_text() == ""

    def test_missing_session(self, claude_home, history_file):
        with pytest.raises(SessionNotFound):
            half_clone("nope", PROJECT_PATH)
        assert history_file.read_text() == ""

    def test_first_parent_null(self, make_conversation):
        result = half_clone(make_conversation(6), PROJECT_PATH)

        with result.path.open() as f:
            first_line = f.readline()
        assert '"parentUuid":null' in first_line

    def test_marker_in_first_message(self, make_conversation):
        result = half_clone(make_conversation(6), PROJECT_PATH)

        lines = result.path.read_text().splitlines()
        assert "[HALF-CLONE]" in lines[0]
        assert all("[HALF-CLONE]" not in line for line in lines[1:])
        # Kept messages are 4, 5, 6; message 4 is an assistant block list.
        first = json.loads(lines[0])
        assert first["message"]["content"] == [
            {"type": "text", "text": "[HALF-CLONE] Assistant response 4"}
        ]

    def test_session_id_remapped(self, make_conversation):
        session_id = make_conversation(4)
        result = half_clone(session_id, PROJECT_PATH)

        text = result.path.read_text()
        assert session_id not in text
        for line in text.splitlines():
            assert f'"sessionId":"{result.session_id}"' in line

    def test_output_is_well_formed(self, make_conversation):
        result = half_clone(make_conversation(9), PROJECT_PATH)

        clone = load_conversation(result.session_id, PROJECT_PATH)
        assert len(clone) == 5
        assert clone.messages[0].parent_uuid is None
        for prev, msg in zip(clone.messages, clone.messages[1:]):
            assert msg.parent_uuid == prev.uuid

    def test_source_untouched(self, make_conversation, project_dir):
        session_id = make_conversation(6)
        source = project_dir / f"{session_id}.jsonl"
        before = source.read_bytes()

        half_clone(session_id, PROJECT_PATH)

        assert source.read_bytes() == before

    def test_history_entry(self, make_conversation, history_file):
        session_id = make_conversation(4)
        before = len(history_file.read_text().splitlines())

        result = half_clone(session_id, PROJECT_PATH)

        lines = history_file.read_text().splitlines()
        assert len(lines) == before + 1
        record = json.loads(lines[-1])
        assert record["sessionId"] == result.session_id
        assert record["project"] == PROJECT_PATH
        assert record["display"] == "[HALF-CLONE] User message 3"
        assert "[HALF-CLONE]" in result.display

    def test_history_records_given_project(self, make_conversation, tmp_path, monkeypatch):
        session_id = make_conversation(2)
        monkeypatch.chdir(tmp_path)

        half_clone(session_id, PROJECT_PATH)

        assert HistoryIndex().latest().project == PROJECT_PATH

    def test_each_run_adds_one_record(self, make_conversation):
        session_id = make_conversation(4)
        half_clone(session_id, PROJECT_PATH)
        half_clone(session_id, PROJECT_PATH)

        assert len(HistoryIndex()) == 2

    def test_clone_of_clone(self, make_conversation):
        first = half_clone(make_conversation(8), PROJECT_PATH)
        second = half_clone(first.session_id, PROJECT_PATH)

        assert second.kept == 2
        lines = read_jsonl(second.path)
        assert lines[0]["parentUuid"] is None

    def test_history_failure_removes_clone(self, make_conversation, project_dir):
        session_id = make_conversation(4)

        with patch.object(HistoryIndex, "append", side_effect=HistoryAppendFailure("disk full")):
            with pytest.raises(HistoryAppendFailure):
                half_clone(session_id, PROJECT_PATH)

        assert [p.name for p in project_dir.iterdir()] == [f"{session_id}.jsonl"]

    def test_structured_first_message(self, project_dir):
        write_jsonl(project_dir / "s1.jsonl", [
            generate_message("u1", None, "s1", "user", "start"),
            generate_message("u2", "u1", "s1", "assistant", "ok"),
            {
                "parentUuid": "u2",
                "sessionId": "s1",
                "type": "user",
                "message": {"role": "user", "content": [
                    {"type": "tool_result", "tool_use_id": "toolu_1", "content": "done"},
                ]},
                "uuid": "u3",
                "timestamp": "2025-01-01T00:00:00.000Z",
            },
            generate_message("u4", "u3", "s1", "assistant", "finished"),
        ])

        result = half_clone("s1", PROJECT_PATH)

        first = read_jsonl(result.path)[0]
        blocks = first["message"]["content"]
        assert blocks[0]["type"] == "tool_result"
        assert blocks[-1] == {"type": "text", "text": "[HALF-CLONE]"}
        assert result.display == "[HALF-CLONE] finished"

    def test_nested_session_id_replaced(self, project_dir):
        write_jsonl(project_dir / "s-old.jsonl", [
            generate_message("u1", None, "s-old", "user", "start"),
            generate_message("u2", "u1", "s-old", "assistant", "ok"),
            {
                "parentUuid": "u2",
                "sessionId": "s-old",
                "type": "progress",
                "data": {"type": "agent_progress", "message": {"sessionId": "s-old"}},
                "uuid": "u3",
                "timestamp": "2025-01-01T00:00:00.000Z",
            },
            generate_message("u4", "u3", "s-old", "assistant", "done"),
        ])

        result = half_clone("s-old", PROJECT_PATH)

        text = result.path.read_text()
        assert "s-old" not in text
        progress = read_jsonl(result.path)[0]
        assert progress["data"]["message"]["sessionId"] == result.session_id

    def test_lone_surrogate_in_content(self, project_dir, history_file):
        write_jsonl(project_dir / "s1.jsonl", [
            generate_message("u1", None, "s1", "user", "start"),
            generate_message("u2", "u1", "s1", "user", "emoji \ud83d cut"),
        ])

        result = half_clone("s1", PROJECT_PATH)

        first = read_jsonl(result.path)[0]
        assert first["message"]["content"] == "[HALF-CLONE] emoji \ud83d cut"
        assert HistoryIndex().latest().display == "[HALF-CLONE] emoji \ud83d cut"

    def test_write_failure_leaves_nothing(self, make_conversation, project_dir, history_file):
        session_id = make_conversation(4)

        with patch("aichat_clone.writer.os.replace", side_effect=OSError("rename failed")):
            with pytest.raises(CloneError):
                half_clone(session_id, PROJECT_PATH)

        assert [p.name for p in project_dir.iterdir()] == [f"{session_id}.jsonl"]
        assert history_file.read_text() == ""
