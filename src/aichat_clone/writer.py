"""Write a session log atomically."""

import json
import logging
import os
import tempfile
from pathlib import Path

from .core import Message
from .errors import WriteFailure

logger = logging.getLogger(__name__)


def dumps_line(data: dict) -> str:
    """Serialize ``data`` as compact JSON (no trailing newline).

    Non-ASCII text is written as-is unless the record holds a lone surrogate,
    which UTF-8 cannot encode; such records are fully \\u-escaped instead.
    """
    line = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    try:
        line.encode("utf-8")
    except UnicodeEncodeError:
        line = json.dumps(data, ensure_ascii=True, separators=(",", ":"))
    return line


def serialize_message(message: Message) -> str:
    """Serialize one message as a compact JSON line (no trailing newline)."""
    return dumps_line(message.to_dict())


def write_conversation(path: Path, messages: list[Message]) -> Path:
    """Write ``messages`` to ``path``, one per line.

    The log is staged in a temporary file beside ``path`` and renamed into
    place, so ``path`` either does not exist or holds the complete log.
    An existing file is never overwritten.
    """
    if path.exists():
        raise WriteFailure(f"Refusing to overwrite existing log {path}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
    except OSError as e:
        raise WriteFailure(f"Failed to create {path.parent}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            for message in messages:
                f.write(serialize_message(message))
                f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        logger.error("Failed to write %s: %s", path, e)
        raise WriteFailure(f"Failed to write {path}: {e}") from e
    finally:
        if tmp_path.exists():
            tmp_path.unlink()

    logger.debug("Wrote %d messages to %s", len(messages), path)
    return path
