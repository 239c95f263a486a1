"""In-process change notification for the record store.

Subscribers register interest in one collection, optionally narrowed by an
equality filter, and receive a ``ChangeEvent`` for every committed insert,
update or delete that matches. Consumers use the events to invalidate and
refetch cached views; the ledger and aggregator never depend on them.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    """Kind of row mutation carried by a change event."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """A committed mutation of one record."""

    collection: str
    kind: ChangeKind
    record: Mapping[str, Any] = field(default_factory=dict)


class Subscription:
    """Stream of change events for one collection and filter."""

    def __init__(
        self,
        feed: ChangeFeed,
        collection: str,
        filter: Mapping[str, Any] | None = None,
    ) -> None:
        self._feed = feed
        self.collection = collection
        self.filter = dict(filter or {})
        self._queue: queue.SimpleQueue[ChangeEvent] = queue.SimpleQueue()
        self.closed = False

    def matches(self, event: ChangeEvent) -> bool:
        """Return True if ``event`` falls under this subscription."""
        if event.collection != self.collection:
            return False
        return all(event.record.get(key) == value for key, value in self.filter.items())

    def deliver(self, event: ChangeEvent) -> None:
        if not self.closed:
            self._queue.put(event)

    @property
    def pending(self) -> bool:
        """True when at least one undelivered event is queued."""
        return not self._queue.empty()

    def get(self, timeout: float | None = None) -> ChangeEvent | None:
        """Block up to ``timeout`` seconds for the next event; None on timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def __iter__(self) -> Iterator[ChangeEvent]:
        """Drain the events queued so far without blocking."""
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return

    def close(self) -> None:
        """Stop receiving events."""
        if not self.closed:
            self.closed = True
            self._feed.unsubscribe(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ChangeFeed:
    """Fan-out hub connecting the record store to its subscribers."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
    ) -> Subscription:
        """Register a subscription for ``collection`` narrowed by ``filter``."""
        subscription = Subscription(self, collection, filter)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("Subscribed to %s with filter %s", collection, subscription.filter)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, events: Iterable[ChangeEvent]) -> None:
        """Deliver each event to every matching subscription."""
        with self._lock:
            subscriptions = list(self._subscriptions)
        for event in events:
            for subscription in subscriptions:
                if subscription.matches(event):
                    subscription.deliver(event)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


_change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    """Return the process-wide change feed."""
    return _change_feed
