from conftest import ADMIN, ALICE, BOB, auth


def test_list_users_excludes_admins(client, sign_in):
    sign_in("admin-token", "alice-token", "bob-token")

    body = client.get("/api/users", headers=auth("admin-token")).json()

    assert body["total"] == 2
    assert [u["id"] for u in body["users"]] == [BOB.uid, ALICE.uid]
    assert ADMIN.uid not in {u["id"] for u in body["users"]}


def test_users_endpoints_require_admin(client, sign_in):
    sign_in("alice-token")

    assert client.get("/api/users", headers=auth("alice-token")).status_code == 403
    assert client.delete(f"/api/users/{ALICE.uid}", headers=auth("alice-token")).status_code == 403


def test_get_user(client, sign_in):
    sign_in("alice-token")

    found = client.get(f"/api/users/{ALICE.uid}", headers=auth("admin-token"))
    missing = client.get("/api/users/nobody", headers=auth("admin-token"))

    assert found.json()["user"]["email"] == ALICE.email
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"


def test_update_user_status(client, sign_in):
    sign_in("alice-token")

    response = client.put(
        f"/api/users/{ALICE.uid}/status",
        json={"status": "inactive"},
        headers=auth("admin-token"),
    )

    assert response.status_code == 200
    assert response.json()["user"]["status"] == "inactive"


def test_invalid_user_status_is_rejected(client, sign_in):
    sign_in("alice-token")

    response = client.put(
        f"/api/users/{ALICE.uid}/status",
        json={"status": "banned"},
        headers=auth("admin-token"),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status. Must be active, inactive, or pending"


def test_status_of_missing_user_is_not_found(client):
    response = client.put(
        "/api/users/nobody/status",
        json={"status": "active"},
        headers=auth("admin-token"),
    )

    assert response.status_code == 404


def test_delete_user(client, sign_in):
    sign_in("alice-token")

    deleted = client.delete(f"/api/users/{ALICE.uid}", headers=auth("admin-token"))
    again = client.delete(f"/api/users/{ALICE.uid}", headers=auth("admin-token"))

    assert deleted.json() == {"success": True, "message": "User deleted successfully"}
    assert again.status_code == 404


def test_job_recipients_are_active_users_only(client, sign_in):
    sign_in("alice-token", "bob-token")
    client.put(
        f"/api/users/{BOB.uid}/status",
        json={"status": "inactive"},
        headers=auth("admin-token"),
    )

    body = client.get("/api/users/notify/job", headers=auth("admin-token")).json()

    assert [u["email"] for u in body["users"]] == [ALICE.email]
