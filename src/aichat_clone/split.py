"""Decide where a session is cut in two."""

from dataclasses import dataclass

from .errors import InsufficientMessages

MIN_MESSAGES = 2


@dataclass(frozen=True)
class SplitPoint:
    """How many leading messages are dropped and how many trailing ones kept."""

    skip: int
    keep: int


def split_point(count: int) -> SplitPoint:
    """Split ``count`` messages, keeping the larger half when it is odd.

    6 -> skip 3, keep 3; 7 -> skip 3, keep 4; 2 -> skip 1, keep 1.
    """
    if count < MIN_MESSAGES:
        raise InsufficientMessages(count, MIN_MESSAGES)

    skip = count // 2
    return SplitPoint(skip=skip, keep=count - skip)
