"""Append-only access to Claude Code's global history.jsonl index."""

import json
import logging
import time
from collections.abc import Iterator
from pathlib import Path

from .config import get_history_path
from .core import HistoryRecord
from .errors import HistoryAppendFailure
from .writer import dumps_line

logger = logging.getLogger(__name__)


class HistoryIndex:
    """The history index: one JSON record per line, appended and never rewritten."""

    def __init__(self, path: Path | None = None, retries: int = 1):
        self.path = path if path is not None else get_history_path()
        self.retries = retries

    def append(self, record: HistoryRecord) -> None:
        """Append ``record`` as one complete line.

        The line goes out in a single write so concurrent appenders never
        split each other's records.
        """
        try:
            line = dumps_line(record.to_dict()) + "\n"
        except (TypeError, ValueError) as e:
            raise HistoryAppendFailure(f"Cannot serialize history record: {e}") from e

        attempt = 0
        while True:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as f:
                    f.write(line)
                return
            except OSError as e:
                if attempt >= self.retries:
                    raise HistoryAppendFailure(
                        f"Failed to append to {self.path}: {e}"
                    ) from e
                attempt += 1
                logger.warning("History append to %s failed, retrying: %s", self.path, e)

    def records(self) -> Iterator[HistoryRecord]:
        """Yield records in file order, skipping lines that do not parse."""
        if not self.path.exists():
            return

        with self.path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning("Bad JSON at %s:%d: %s", self.path, line_num, e)
                    continue
                if not isinstance(entry, dict):
                    continue
                yield HistoryRecord.from_dict(entry)

    def latest(self, project: str | None = None) -> HistoryRecord | None:
        """Return the most recently appended record, optionally for one project."""
        found = None
        for record in self.records():
            if project is None or record.project == project:
                found = record
        return found

    def __len__(self) -> int:
        return sum(1 for _ in self.records())


def make_record(session_id: str, project_path: str, display: str) -> HistoryRecord:
    """Build a history record stamped with the current time."""
    return HistoryRecord(
        display=display,
        project=str(project_path),
        session_id=session_id,
        timestamp=int(time.time() * 1000),
    )
