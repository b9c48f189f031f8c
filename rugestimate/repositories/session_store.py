"""Bounded, expiring in-memory store for editing sessions.

Sessions are ephemeral: entries older than ``ttl_seconds`` since their
last access are evicted, and once ``max_entries`` is reached the least
recently used entry is dropped to make room.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable
from typing import Generic, TypeVar

from rugestimate.errors import SessionNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionStore(Generic[T]):
    """LRU map of session id to session object with idle-time expiry."""

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, T]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._entries)

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        while self._entries:
            session_id, (touched, _) = next(iter(self._entries.items()))
            if touched > cutoff:
                break
            del self._entries[session_id]
            logger.debug("Evicted expired session %s", session_id)

    def add(self, session: T) -> str:
        """Store *session* under a fresh id and return the id."""
        session_id = str(uuid.uuid4())
        with self._lock:
            self._evict_expired()
            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted least recently used session %s", evicted)
            self._entries[session_id] = (self._clock(), session)
        return session_id

    def get(self, session_id: str) -> T:
        """Return the session and refresh its expiry."""
        with self._lock:
            self._evict_expired()
            try:
                _, session = self._entries.pop(session_id)
            except KeyError:
                raise SessionNotFoundError(session_id) from None
            self._entries[session_id] = (self._clock(), session)
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._entries.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
