"""Bounded, lock-protected store for build events.

The watch loop appends from its own thread; callers query from theirs.
"""

import threading
from collections import deque

from zs.observability.events import StackEvent


def _subject(event: StackEvent) -> str:
    """Source file, header path or plugin command the event is about."""
    for attr in ("source", "path", "command"):
        value = getattr(event, attr, None)
        if value:
            return value
    return ""


class EventLog:
    """Keeps the newest ``max_events`` events; older ones fall off."""

    __slots__ = ("_events", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: StackEvent) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Newest-first events matching every given filter.

        ``path`` matches as a substring of the event's source file, header
        path or plugin command.
        """
        with self._lock:
            snapshot = list(self._events)

        matches: list[StackEvent] = []
        for event in reversed(snapshot):
            if len(matches) == limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if event.timestamp_ns < since_ns:
                continue
            if path is not None and path not in _subject(event):
                continue
            matches.append(event)
        return matches

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
