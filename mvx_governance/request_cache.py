"""
Short-lived response cache for identical upstream POST requests.

Entries are keyed by the exact url and serialized request body, so a
different page size or filter is a different entry. The clock is injected
so callers (and tests) control expiry.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0


def cache_key(url: str, body: Any) -> str:
    """url and json-serialized body joined by '|'"""
    serialized = body if isinstance(body, str) else json.dumps(body)
    return f"{url}|{serialized}"


@dataclass
class _Entry:
    stored_at: float
    value: Any


class RequestCache:
    """TTL cache of upstream responses with an injectable clock."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be non-negative")
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _fresh(self, entry: _Entry, now: float) -> bool:
        return (now - entry.stored_at) < self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not self._fresh(entry, self.clock()):
                return None
            return entry.value

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = _Entry(self.clock(), value)

    def get_or_fetch(self, url: str, body: Any, fetch: Callable[[], Any]) -> Any:
        """
        Return a stored response for (url, body) if younger than the TTL,
        otherwise call fetch(), store its result and return it.

        Exceptions from fetch propagate and nothing is stored.
        """
        key = cache_key(url, body)
        cached = self.get(key)
        with self._lock:
            if cached is not None:
                self.hits += 1
            else:
                self.misses += 1
        if cached is not None:
            logger.debug(f"Cache HIT for {url}")
            return cached
        logger.debug(f"Cache MISS for {url}")
        value = fetch()
        self.put(key, value)
        return value

    def evict_expired(self) -> int:
        """drop expired entries and return how many were removed"""
        with self._lock:
            now = self.clock()
            stale = [k for k, e in self._entries.items() if not self._fresh(e, now)]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0


__all__ = ["DEFAULT_TTL_SECONDS", "RequestCache", "cache_key"]
