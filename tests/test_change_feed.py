import asyncio

from conftest import auth
from projectify.main import app
from projectify.services.change_feed import (
    COLLECTION_APPLICATIONS,
    COLLECTION_PROJECTS,
    ChangeEvent,
    ChangeFeed,
)


def event(collection: str = COLLECTION_APPLICATIONS, owner: str | None = "alice") -> ChangeEvent:
    return ChangeEvent(collection, "doc-1", "updated", owner_id=owner)


def test_matching_events_are_delivered():
    async def scenario() -> ChangeEvent:
        feed = ChangeFeed()
        async with feed.subscribe(COLLECTION_APPLICATIONS, lambda e: e.owner_id == "alice") as sub:
            assert feed.publish(event(owner="bob")) == 0
            assert feed.publish(event(collection=COLLECTION_PROJECTS)) == 0
            assert feed.publish(event()) == 1
            return await asyncio.wait_for(sub.__anext__(), timeout=1)

    assert asyncio.run(scenario()).owner_id == "alice"


def test_pending_events_coalesce():
    async def scenario() -> bool:
        feed = ChangeFeed()
        async with feed.subscribe(COLLECTION_PROJECTS) as sub:
            for _ in range(3):
                feed.publish(event(collection=COLLECTION_PROJECTS))
            await sub.__anext__()
            try:
                await asyncio.wait_for(sub.__anext__(), timeout=0.05)
            except asyncio.TimeoutError:
                return True
            return False

    assert asyncio.run(scenario()) is True


def test_leaving_context_unsubscribes():
    async def scenario() -> tuple[int, int, int]:
        feed = ChangeFeed()
        async with feed.subscribe(COLLECTION_PROJECTS):
            inside = feed.subscriber_count
        return inside, feed.subscriber_count, feed.publish(event(collection=COLLECTION_PROJECTS))

    assert asyncio.run(scenario()) == (1, 0, 0)


def test_raising_filter_does_not_break_publish():
    def broken(_event: ChangeEvent) -> bool:
        raise ValueError("bad filter")

    async def scenario() -> int:
        feed = ChangeFeed()
        async with feed.subscribe(COLLECTION_PROJECTS, broken):
            async with feed.subscribe(COLLECTION_PROJECTS):
                return feed.publish(event(collection=COLLECTION_PROJECTS))

    assert asyncio.run(scenario()) == 1


def test_mutations_publish_to_feed(client, monkeypatch):
    feed = app.state.change_feed
    seen: list[ChangeEvent] = []
    original = feed.publish

    def recording_publish(change: ChangeEvent) -> int:
        seen.append(change)
        return original(change)

    monkeypatch.setattr(feed, "publish", recording_publish)
    client.post(
        "/api/teams",
        json={"teamName": "Squad", "members": [{"userId": "u1", "userName": "U"}]},
        headers=auth("admin-token"),
    )

    assert [(e.collection, e.action) for e in seen] == [("teams", "created")]
