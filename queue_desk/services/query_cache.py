"""Short-lived read cache keyed by query parameters."""

import logging
import threading
import time
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass
from typing import Any

from queue_desk.services.change_feed import ChangeEvent, ChangeFeed

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    table: str
    value: Any
    expires_at: float


class QueryCache:
    """Process-local cache of serialized query results.

    Entries are tagged with the table they were read from and dropped when a
    change on that table is published, or when their TTL runs out.
    """

    def __init__(self, ttl_seconds: float = 30, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[tuple, _Entry] = {}
        self._unsubscribers: list[Callable[[], None]] = []

    def get(self, table: str, key: Hashable) -> Any | None:
        cache_key = (table, key)
        with self._lock:
            entry = self._entries.get(cache_key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[cache_key]
                return None
            return entry.value

    def set(self, table: str, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[(table, key)] = _Entry(
                table=table,
                value=value,
                expires_at=self._clock() + self.ttl_seconds,
            )

    def get_or_load(self, table: str, key: Hashable, loader: Callable[[], Any]) -> Any:
        cached = self.get(table, key)
        if cached is not None:
            logger.debug("Cache hit: %s %s", table, key)
            return cached

        value = loader()
        self.set(table, key, value)
        return value

    def invalidate_table(self, table: str) -> int:
        with self._lock:
            stale = [cache_key for cache_key, entry in self._entries.items() if entry.table == table]
            for cache_key in stale:
                del self._entries[cache_key]
        if stale:
            logger.debug("Invalidated %d cached %s queries", len(stale), table)
        return len(stale)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [cache_key for cache_key, entry in self._entries.items() if entry.expires_at <= now]
            for cache_key in expired:
                del self._entries[cache_key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def attach(
        self,
        feed: ChangeFeed,
        tables: tuple[str, ...],
        dependents: Mapping[str, tuple[str, ...]] | None = None,
    ) -> None:
        """Invalidate cached reads of ``tables`` whenever the feed reports a change.

        ``dependents`` names cached tables whose values embed another table's
        columns, e.g. booking listings carrying the branch name.
        """
        dependents = dependents or {}

        def _on_change(event: ChangeEvent) -> None:
            self.invalidate_table(event.table)
            for dependent in dependents.get(event.table, ()):
                self.invalidate_table(dependent)

        for table in tables:
            self._unsubscribers.append(feed.subscribe(table, _on_change))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
