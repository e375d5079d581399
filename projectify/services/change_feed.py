"""
In-process change feed — explicit subscribe/unsubscribe over collections.

Services publish a ChangeEvent after every successful commit. Callers
that want live views (the SSE endpoints) subscribe to one collection
with a predicate, re-read a snapshot from the store on every wake-up,
and unsubscribe by leaving the context manager.

Delivery semantics:
  • publish() never blocks and never fails the publisher.
  • Each subscription holds at most one pending event. A snapshot is
    re-read on wake-up, so one queued change covers any later ones.
  • Everything runs on the event loop thread — no locks needed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import Request

logger = logging.getLogger(__name__)

COLLECTION_PROJECTS = "projects"
COLLECTION_APPLICATIONS = "applications"
COLLECTION_USERS = "users"
COLLECTION_TEAMS = "teams"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One committed mutation.

    Attributes:
        collection:  Table/collection name (see COLLECTION_* constants).
        document_id: Identifier of the changed record, as a string.
        action:      "created" | "updated" | "deleted".
        owner_id:    User the record belongs to, when that is meaningful
                     (the applicant for applications). Used for filtering.
    """

    collection: str
    document_id: str
    action: str
    owner_id: str | None = None


EventFilter = Callable[[ChangeEvent], bool]


class Subscription:
    """Async iterator over change events matching one filter."""

    def __init__(self, collection: str, predicate: EventFilter | None) -> None:
        self.collection = collection
        self._predicate = predicate
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=1)

    def matches(self, event: ChangeEvent) -> bool:
        if event.collection != self.collection:
            return False
        return self._predicate is None or self._predicate(event)

    def offer(self, event: ChangeEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            pass  # a wake-up is already pending

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self._queue.get()


class ChangeFeed:
    """Registry of live subscriptions."""

    def __init__(self) -> None:
        self._subscriptions: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @asynccontextmanager
    async def subscribe(
        self,
        collection: str,
        predicate: EventFilter | None = None,
    ) -> AsyncIterator[Subscription]:
        """
        Register a subscription for the duration of the `async with` block.

        Usage:
            async with feed.subscribe("applications", lambda e: e.owner_id == uid) as sub:
                async for event in sub:
                    ...
        """
        subscription = Subscription(collection, predicate)
        self._subscriptions.add(subscription)
        logger.debug("Subscribed to %s (%d live)", collection, len(self._subscriptions))
        try:
            yield subscription
        finally:
            self._subscriptions.discard(subscription)
            logger.debug("Unsubscribed from %s (%d live)", collection, len(self._subscriptions))

    def publish(self, event: ChangeEvent) -> int:
        """Deliver `event` to every matching subscription. Returns the match count."""
        delivered = 0
        for subscription in list(self._subscriptions):
            try:
                matched = subscription.matches(event)
            except Exception:
                logger.exception("Change feed filter raised for %s", event.collection)
                continue
            if matched:
                subscription.offer(event)
                delivered += 1
        return delivered


def get_change_feed(request: Request) -> ChangeFeed:
    """FastAPI dependency — the process-wide feed built in the lifespan."""
    return request.app.state.change_feed
