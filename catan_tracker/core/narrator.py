"""Event Narrator - bounded, human-readable audit trail of tracker activity."""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
DEBUG_PREFIX = "[DEBUG] "


@dataclass(frozen=True)
class EventRecord:
    """One audit entry."""
    message: str
    timestamp: str

    @property
    def is_debug(self) -> bool:
        return self.message.startswith(DEBUG_PREFIX)

    def to_dict(self) -> dict:
        return {"message": self.message, "timestamp": self.timestamp}


class EventNarrator:
    """Append-only trail that forgets its oldest entry once full."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("Narrator capacity must be positive")
        self._entries: deque[EventRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def __len__(self) -> int:
        return len(self._entries)

    def note(self, message: str, debug: bool = False) -> EventRecord:
        """Append a message; debug notes are tagged for diagnostic views."""
        if debug:
            message = DEBUG_PREFIX + message
        entry = EventRecord(message, datetime.now(timezone.utc).isoformat())
        self._entries.append(entry)
        logger.debug("%s", message)
        return entry

    def entries(self, include_debug: bool = True) -> list[EventRecord]:
        """Entries oldest first."""
        if include_debug:
            return list(self._entries)
        return [e for e in self._entries if not e.is_debug]

    def clear(self) -> None:
        self._entries.clear()
