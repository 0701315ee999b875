"""In-memory TTL cache for provider responses."""

import time
from typing import Any, Callable

from .models import CacheEntry


class PriceCache:
    """
    Key -> (payload, timestamp) store with a fixed time-to-live.

    Entries are never evicted; a stale entry stays readable so callers can
    fall back to it when a refresh fails. Only clear() empties the store.
    """

    def __init__(
        self,
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> tuple[Any, bool] | None:
        """
        Look up a cached payload.

        Returns:
            (payload, is_fresh), or None if the key was never stored
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        age = self._clock() - entry.fetched_at
        return entry.payload, age < self.ttl_seconds

    def put(self, key: str, payload: Any) -> None:
        """Store payload under key, replacing any previous entry."""
        self._entries[key] = CacheEntry(payload=payload, fetched_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
