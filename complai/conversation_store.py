"""
Conversation Store — Bounded, expiring chat history per conversation id.

Entries expire after ``ttl_seconds`` without use and the least recently
used conversation is evicted once ``max_entries`` is exceeded. Each
conversation keeps only its newest ``max_messages`` messages.
"""

import logging
import os
import threading
import time
from collections import OrderedDict

logger = logging.getLogger(__name__)


class ConversationStore:

    def __init__(self, max_entries: int = 500, ttl_seconds: float = 3600.0,
                 max_messages: int = 20, clock=time.monotonic):
        if max_entries < 1 or max_messages < 1:
            raise ValueError("max_entries and max_messages must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.max_messages = max_messages
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, list[dict]]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def _purge_expired(self):
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Expired %d conversations", len(expired))

    def get(self, conversation_id: str | None) -> list[dict]:
        """
        Return a copy of the stored messages, or [] if unknown or expired.

        A hit counts as use: the entry's expiry and recency are refreshed.
        """
        if not conversation_id:
            return []
        with self._lock:
            self._purge_expired()
            entry = self._entries.get(conversation_id)
            if entry is None:
                return []
            history = entry[1]
            self._entries[conversation_id] = (self._clock() + self.ttl_seconds, history)
            self._entries.move_to_end(conversation_id)
            return [dict(m) for m in history]

    def append(self, conversation_id: str | None, *messages: dict):
        if not conversation_id or not messages:
            return
        with self._lock:
            self._purge_expired()
            _, history = self._entries.pop(conversation_id, (0.0, []))
            history = (history + [dict(m) for m in messages])[-self.max_messages:]
            self._entries[conversation_id] = (self._clock() + self.ttl_seconds, history)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted conversation %s", evicted)

    def clear(self):
        with self._lock:
            self._entries.clear()


def create_conversation_store() -> ConversationStore:
    """Build the store from CONVERSATION_* env vars."""
    return ConversationStore(
        max_entries=int(os.environ.get("CONVERSATION_MAX_ENTRIES", "500")),
        ttl_seconds=float(os.environ.get("CONVERSATION_TTL_SECONDS", "3600")),
        max_messages=int(os.environ.get("CONVERSATION_MAX_MESSAGES", "20")),
    )
