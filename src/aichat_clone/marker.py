"""Stamp a recognizable tag into a cloned session."""

from .core import Message

MARKER = "[HALF-CLONE]"
PREVIEW_LENGTH = 80


def tag_message(message: Message, marker: str = MARKER) -> Message:
    """Insert ``marker`` into the message's content, in place.

    String content is prefixed. For a list of blocks the first text block is
    prefixed; if there is none a text block is appended so tool blocks keep
    their positions.
    """
    content = message.content

    if isinstance(content, str):
        message.content = f"{marker} {content}" if content else marker
        return message

    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text") or ""
                block["text"] = f"{marker} {text}" if text else marker
                return message
        content.append({"type": "text", "text": marker})
        return message

    message.content = marker
    return message


def tag_display(text: str, marker: str = MARKER) -> str:
    """Return the history display string for a clone."""
    text = " ".join(text.split())[:PREVIEW_LENGTH]
    return f"{marker} {text}" if text else marker


def extract_text(message: Message) -> str:
    """Return the plain text of a message, ignoring tool blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    parts = []
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
        elif isinstance(block, str):
            parts.append(block)
    return "\n".join(parts)


def display_preview(messages: list[Message]) -> str:
    """Pick the text that titles a clone in the history index.

    The first user prompt wins, then any text at all, then "Untitled".
    """
    for msg in messages:
        if msg.type in ("human", "user"):
            text = extract_text(msg).strip()
            if text:
                return text
    for msg in messages:
        text = extract_text(msg).strip()
        if text:
            return text
    return "Untitled"
