import asyncio
import uuid

from conftest import auth
from projectify.core.sse import format_event, snapshot_stream
from projectify.services.change_feed import COLLECTION_PROJECTS, ChangeEvent, ChangeFeed


def apply(client, project_id: str, token: str) -> str:
    response = client.post(
        "/api/applications",
        json={
            "projectId": project_id,
            "username": "applicant",
            "contact": "applicant@example.com",
            "skillsDescription": "Relevant skills listed here",
            "experience": "2 years",
            "deadline": 7,
        },
        headers=auth(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["application"]["id"]


def test_users_see_only_open_projects(client, seed_project):
    seed_project(status="pending", title="Pending")
    seed_project(status="active", title="Active")
    seed_project(status="approved", title="Legacy")
    seed_project(status="completed", title="Done")

    body = client.get("/api/projects", headers=auth("alice-token")).json()

    assert body["total"] == 2
    assert {p["title"] for p in body["projects"]} == {"Active", "Legacy"}


def test_details_hidden_until_application_approved(client, seed_project):
    project_id = seed_project(project_details="Secret repository link")
    application_id = apply(client, project_id, "alice-token")

    before = client.get(f"/api/projects/{project_id}", headers=auth("alice-token")).json()
    client.put(f"/api/applications/{application_id}/approve", headers=auth("admin-token"))
    after = client.get(f"/api/projects/{project_id}", headers=auth("alice-token")).json()
    other = client.get(f"/api/projects/{project_id}", headers=auth("bob-token")).json()

    assert before["project"]["projectDetails"] is None
    assert after["project"]["projectDetails"] == "Secret repository link"
    assert other["project"]["projectDetails"] is None

    listed = client.get("/api/projects", headers=auth("alice-token")).json()
    assert listed["projects"][0]["projectDetails"] == "Secret repository link"


def test_admin_sees_everything_with_status_filter(client, seed_project):
    seed_project(status="pending", title="Pending")
    seed_project(status="active", title="Active")

    everything = client.get("/api/projects", headers=auth("admin-token")).json()
    pending = client.get(
        "/api/projects",
        params={"status": "pending"},
        headers=auth("admin-token"),
    ).json()

    assert everything["total"] == 2
    assert all(p["projectDetails"] for p in everything["projects"])
    assert [p["title"] for p in pending["projects"]] == ["Pending"]


def test_closed_project_is_not_found_for_users(client, seed_project):
    project_id = seed_project(status="pending")

    user_view = client.get(f"/api/projects/{project_id}", headers=auth("alice-token"))
    admin_view = client.get(f"/api/projects/{project_id}", headers=auth("admin-token"))

    assert user_view.status_code == 404
    assert admin_view.status_code == 200


def test_missing_project_is_not_found(client):
    response = client.get(f"/api/projects/{uuid.uuid4()}", headers=auth("admin-token"))

    assert response.status_code == 404
    assert response.json()["message"] == "Project not found"


def test_legacy_create_requires_admin(client):
    response = client.post(
        "/api/projects",
        json={
            "title": "Request",
            "role": "Designer",
            "description": "Design the landing page",
            "timeline": "1 week",
            "deadlineToApply": "2030-01-01",
        },
        headers=auth("alice-token"),
    )

    assert response.status_code == 403


# ── Live stream ─────────────────────────────────────────────
def test_snapshot_stream_resends_on_change():
    async def scenario() -> list[str]:
        feed = ChangeFeed()
        versions = iter(["v1", "v2", "v3"])

        async def load() -> str:
            return next(versions)

        stream = snapshot_stream(feed, COLLECTION_PROJECTS, load)
        frames = [await stream.__anext__()]

        feed.publish(ChangeEvent(COLLECTION_PROJECTS, "p1", "created"))
        frames.append(await stream.__anext__())

        assert feed.subscriber_count == 1
        await stream.aclose()
        assert feed.subscriber_count == 0
        return frames

    frames = asyncio.run(scenario())

    assert frames == [format_event("snapshot", "v1"), format_event("snapshot", "v2")]


def test_snapshot_stream_sends_keepalive_when_idle():
    async def scenario() -> str:
        feed = ChangeFeed()

        async def load() -> str:
            return "{}"

        stream = snapshot_stream(feed, COLLECTION_PROJECTS, load, keepalive=0.01)
        await stream.__anext__()
        frame = await stream.__anext__()
        await stream.aclose()
        return frame

    assert asyncio.run(scenario()) == ": keep-alive\n\n"


def test_format_event_splits_lines():
    assert format_event("snapshot", "a\nb") == "event: snapshot\ndata: a\ndata: b\n\n"
