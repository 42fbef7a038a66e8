"""In-process change notifications for store writes.

Services publish a ``ChangeEvent`` after every successful commit. Subscribers
register per table and receive the changed record's payload, so a listener can
merge the change instead of re-reading the whole listing.
"""

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

ChangeCallback = Callable[["ChangeEvent"], None]


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: str  # "insert" | "update" | "delete"
    record_id: int | str
    payload: dict[str, Any] = field(default_factory=dict)


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[ChangeCallback]] = defaultdict(list)

    def subscribe(self, table: str, callback: ChangeCallback) -> Callable[[], None]:
        """Register ``callback`` for changes to ``table``; returns an unsubscribe handle."""
        with self._lock:
            self._subscribers[table].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(table, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscribers.get(table, []))

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(event.table, []))

        logger.debug(
            "Publishing %s on %s (record %s) to %d subscriber(s)",
            event.action,
            event.table,
            event.record_id,
            len(callbacks),
        )
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                # Listener failures are logged and never reach the writer.
                logger.exception("Change subscriber failed for table %s", event.table)

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()


def publish_change(
    feed: ChangeFeed | None,
    table: str,
    action: str,
    record_id: int | str,
    payload: dict[str, Any] | None = None,
) -> None:
    """Publish when a feed is wired in; service calls outside a request pass ``None``."""
    if feed is None:
        return
    feed.publish(ChangeEvent(table=table, action=action, record_id=record_id, payload=payload or {}))
