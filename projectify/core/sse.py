"""
Server-sent event framing for live snapshot streams.

A stream sends one `snapshot` event immediately, then a fresh snapshot
each time the subscription wakes up. Comment lines keep idle
connections open through proxies.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable

from projectify.services.change_feed import ChangeFeed, EventFilter

KEEPALIVE_SECONDS = 15.0


def format_event(event: str, data: str) -> str:
    lines = "".join(f"data: {line}\n" for line in data.splitlines() or [""])
    return f"event: {event}\n{lines}\n"


async def snapshot_stream(
    feed: ChangeFeed,
    collection: str,
    load_snapshot: Callable[[], Awaitable[str]],
    predicate: EventFilter | None = None,
    *,
    keepalive: float = KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """
    Yield SSE frames: the current snapshot, then one per matching change.

    The subscription is registered before the first read, so a change
    committed between the read and the first wait is not lost. Closing
    the generator (client disconnect) releases the subscription.
    """
    async with feed.subscribe(collection, predicate) as subscription:
        while True:
            yield format_event("snapshot", await load_snapshot())
            while True:
                try:
                    await asyncio.wait_for(subscription.__anext__(), timeout=keepalive)
                    break
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
