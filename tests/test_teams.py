from conftest import auth


def team_body(**overrides) -> dict:
    body = {
        "teamName": "Platform Squad",
        "members": [
            {"userId": "alice-uid", "userName": "Alice"},
            {"userId": "bob-uid", "userName": "Bob"},
        ],
    }
    body.update(overrides)
    return body


def create(client, token: str = "admin-token", **overrides):
    return client.post("/api/teams", json=team_body(**overrides), headers=auth(token))


def test_create_team_stores_members_in_order(client):
    response = create(client, teamName="  Platform Squad  ")

    assert response.status_code == 201
    team = response.json()["team"]
    assert team["teamName"] == "Platform Squad"
    assert team["maxMembers"] == 5
    assert team["members"] == [
        {"userId": "alice-uid", "userName": "Alice"},
        {"userId": "bob-uid", "userName": "Bob"},
    ]


def test_member_cap_is_enforced(client):
    response = create(client, maxMembers=1)

    assert response.status_code == 400
    assert response.json()["message"] == "Maximum 1 members allowed"


def test_duplicate_members_are_rejected(client):
    members = [
        {"userId": "alice-uid", "userName": "Alice"},
        {"userId": "alice-uid", "userName": "Alice again"},
    ]

    response = create(client, members=members)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_argument"


def test_empty_name_or_members_fail_validation(client):
    assert create(client, teamName="   ").status_code == 400
    assert create(client, members=[]).status_code == 400


def test_team_names_are_not_unique(client):
    assert create(client).status_code == 201
    assert create(client).status_code == 201


def test_list_teams(client):
    create(client, teamName="First")
    create(client, teamName="Second")

    body = client.get("/api/teams", headers=auth("admin-token")).json()

    assert body["total"] == 2
    assert [t["teamName"] for t in body["teams"]] == ["Second", "First"]


def test_teams_require_admin(client):
    assert create(client, token="alice-token").status_code == 403
