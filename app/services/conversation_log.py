"""
CONVERSATION LOG MODULE
=======================

In-memory record of recent exchanges (what the user said, what Jarvis answered,
when). Nothing is written to disk; a restart starts with an empty log.

LIFECYCLE:
  - append(user_text, ai_text): called after every successful /ask.
  - recent(n): the last n exchanges, newest first (GET /history).
  - prune(retention_seconds): drops entries older than the retention window.
    Run once at startup and then on a timer from main.py.
  - clear(): empties the log (GET /clear-history).

A lock guards the entry list so the prune timer and request handlers can
never see it half-updated.
"""

import logging
import threading
import time
from typing import Callable, List

from app.models import ConversationEntry

logger = logging.getLogger("J.A.R.V.I.S")

DEFAULT_RETENTION_SECONDS = 7 * 24 * 60 * 60


class ConversationLog:
    """Append-only, time-pruned list of ConversationEntry in chronological order."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: List[ConversationEntry] = []
        self._lock = threading.Lock()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def append(self, user_text: str, ai_text: str) -> ConversationEntry:
        entry = ConversationEntry(user_text=user_text, ai_text=ai_text, timestamp=self._now_ms())
        with self._lock:
            self._entries.append(entry)
        return entry

    def recent(self, n: int = 20) -> List[ConversationEntry]:
        """Return the last n entries, newest first."""
        if n <= 0:
            return []
        with self._lock:
            latest = self._entries[-n:]
        return list(reversed(latest))

    def prune(self, retention_seconds: float = DEFAULT_RETENTION_SECONDS) -> int:
        """Remove entries older than now - retention_seconds. Returns how many were removed."""
        cutoff = self._now_ms() - int(retention_seconds * 1000)
        with self._lock:
            before = len(self._entries)
            self._entries = [entry for entry in self._entries if entry.timestamp >= cutoff]
            removed = before - len(self._entries)
        logger.info("Pruned old conversation history (%s entries removed).", removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries = []
        logger.info("Conversation history cleared manually.")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
