# src/content/dedup.py
"""Process-local suppression of repeated views and likes.

Entries live in memory only: they are lost on restart and are not shared
between worker processes, so a client can be counted again after either.
"""
import threading
import time
from typing import Callable, Dict, Optional

from fastapi import Request

VIEW_WINDOW_SECONDS = 5 * 60
VIEW_EVICT_AFTER_SECONDS = 10 * 60


class RecentHitCache:
    """Maps ``<client address>-<content id>`` to the time it was last counted."""

    def __init__(
        self,
        window_seconds: Optional[float],
        evict_after_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.evict_after_seconds = evict_after_seconds
        self._clock = clock
        self._hits: Dict[str, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(client: str, content_id: str) -> str:
        return f"{client}-{content_id}"

    def allows(self, key: str) -> bool:
        """True when the key has not been recorded within the window."""
        with self._lock:
            last = self._hits.get(key)
        if last is None:
            return True
        if self.window_seconds is None:
            return False
        return self._clock() - last >= self.window_seconds

    def record(self, key: str) -> None:
        now = self._clock()
        with self._lock:
            self._hits[key] = now
            if self.evict_after_seconds is not None:
                stale = [k for k, seen in self._hits.items() if now - seen > self.evict_after_seconds]
                for k in stale:
                    del self._hits[k]

    def clear(self) -> None:
        with self._lock:
            self._hits.clear()

    def __len__(self) -> int:
        return len(self._hits)


recent_views = RecentHitCache(VIEW_WINDOW_SECONDS, VIEW_EVICT_AFTER_SECONDS)
# one like per client and content for the lifetime of the process
recent_likes = RecentHitCache(None)


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
