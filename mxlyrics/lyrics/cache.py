"""
Bounded in-memory cache for lookup results

Entries expire lazily: an entry past its TTL is dropped when it is read, there
is no background sweep. When a new key arrives while the cache is full, the
oldest inserted entry is evicted (FIFO). Overwriting an existing key keeps its
original insertion slot.

"No lyrics found" is cached exactly like a real result so that repeated
lookups of an unknown track do not hit the provider again within the TTL.
The cache is not persisted across restarts.
"""

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from .models import CacheEntry, LyricsResult


def make_cache_key(artist: Optional[str], title: str) -> str:
    """Normalize an artist/title pair into a cache key ("artist|title")"""
    normalized_artist = artist.strip().lower() if artist else ""
    return f"{normalized_artist}|{(title or '').strip().lower()}"


class ResultCache:
    """Thread-safe TTL cache with a fixed capacity"""

    def __init__(
        self,
        ttl: float = 300.0,
        max_entries: int = 100,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the cache

        Args:
            ttl: Seconds an entry stays valid after it is stored
            max_entries: Capacity; one entry is evicted when a new key arrives at capacity
            clock: Time source in seconds, injectable for tests
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")

        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """
        Return the live entry for key, or None on a miss

        Use this rather than get() when a cached negative result must be told
        apart from a miss.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry

    def get(self, key: str) -> Optional[LyricsResult]:
        """Return the cached result for key (None on a miss or a cached negative)"""
        entry = self.get_entry(key)
        return entry.value if entry else None

    def put(self, key: str, value: Optional[LyricsResult]) -> None:
        """Store a result (or None for "not found") under key"""
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                expires_at=self._clock() + self.ttl
            )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get_entry(key) is not None
