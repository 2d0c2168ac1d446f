"""Process-wide TTL cache for derived values (article index, word cloud)."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from docwiki.core.settings import CACHE_TTL_SECONDS

INDEX_CACHE_KEY = "article_index"
WORDCLOUD_CACHE_KEY = "word_cloud"


@dataclass
class CacheEntry:
    value: str
    expires_at: float


class TTLCache:
    """String cache with per-entry expiry.

    Keys are prefixed with a namespace. Concurrent writers may race after an
    entry expires; the last write wins, which is fine since every value can be
    re-derived from the content store.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        namespace: str = "",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    def get(self, key: str) -> str | None:
        """Return the cached value, or None when missing or expired."""
        full_key = self._key(key)
        entry = self._entries.get(full_key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(full_key, None)
            return None
        return entry.value

    def put(self, key: str, value: str, ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[self._key(key)] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(self._key(key), None)

    def clear(self) -> None:
        self._entries.clear()


# Module-level instance shared by every request in the process
_cache: TTLCache | None = None


def get_cache(namespace: str = "") -> TTLCache:
    """Get or create the process-wide TTLCache."""
    global _cache
    if _cache is None:
        _cache = TTLCache(namespace=namespace)
    return _cache
