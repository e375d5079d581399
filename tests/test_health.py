from conftest import auth
from projectify.main import SECURITY_HEADERS


def test_health_is_public(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Server is running and healthy"
    assert body["status"] == "OK"
    assert body["port"] == 5001
    assert body["uptime"] >= 0
    assert body["timestamp"]


def test_responses_carry_security_headers(client):
    response = client.get("/api/health")

    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found", "error": "not_found"}


def test_malformed_id_is_a_validation_error(client):
    response = client.get("/api/projects/not-a-uuid", headers=auth("admin-token"))

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "project_id"
