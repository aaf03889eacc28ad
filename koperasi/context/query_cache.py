"""Keyed in-memory cache for query results with a single stale time."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger("koperasi.context.cache")


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float


class QueryCache:
    """
    Cache query results by key until they go stale.

    Keys are strings; related keys share a prefix so they can be
    invalidated together, e.g. ``"<anggota_id>:tabungan"``.
    """

    def __init__(self, stale_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            stale_seconds: Age after which an entry is reloaded
            clock: Monotonic time source, replaceable in tests
        """
        self._stale_seconds = stale_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def is_fresh(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() - entry.fetched_at < self._stale_seconds

    def get(self, key: str) -> Any:
        """Return the cached value for ``key`` regardless of age, or None."""
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())

    def fetch(self, key: str, loader: Callable[[], Any], force: bool = False, keep_empty: bool = True) -> Any:
        """
        Return the cached value, calling ``loader`` when it is missing or stale.

        Args:
            key: Cache key
            loader: Zero-argument callable producing the value
            force: Reload even if the entry is fresh
            keep_empty: Whether a fresh but empty value may be served from cache

        Raises:
            Whatever ``loader`` raises; the previous entry is left untouched
        """
        if not force and self.is_fresh(key):
            value = self._entries[key].value
            if keep_empty or value:
                logger.debug("Using cached %s", key)
                return value
        logger.debug("Loading %s", key)
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, prefix: str) -> None:
        """Drop every entry whose key starts with ``prefix``."""
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()
