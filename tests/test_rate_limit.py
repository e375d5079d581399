from conftest import auth
from projectify.auth.rate_limit import SlidingWindowRateLimiter, get_rate_limiter
from projectify.main import app


def limit_to(max_requests: int, window_seconds: int = 60) -> SlidingWindowRateLimiter:
    limiter = SlidingWindowRateLimiter(max_requests=max_requests, window_seconds=window_seconds)
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    return limiter


# ── Limiter ─────────────────────────────────────────────────
def test_allows_up_to_limit_then_blocks():
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=lambda: 1000.0)

    assert limiter.allow("ip:1.2.3.4") == (True, 0)
    assert limiter.allow("ip:1.2.3.4") == (True, 0)
    assert limiter.allow("ip:1.2.3.4") == (False, 60)
    assert limiter.allow("ip:5.6.7.8") == (True, 0)


def test_window_slides():
    clock = {"now": 1000.0}
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=lambda: clock["now"])

    assert limiter.allow("ip:a")[0] is True
    clock["now"] += 45
    assert limiter.allow("ip:a") == (False, 15)
    clock["now"] += 16
    assert limiter.allow("ip:a")[0] is True


def test_disabled_limiter_never_blocks():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, enabled=False)

    assert all(limiter.allow("ip:a")[0] for _ in range(5))


def test_default_allowance_is_100_per_15_minutes(client):
    limiter = app.state.rate_limiter

    assert limiter.max_requests == 100
    assert limiter.window_seconds == 900


# ── API ─────────────────────────────────────────────────────
def test_excess_requests_get_429_envelope(client):
    limit_to(2)

    assert client.get("/api/health").status_code == 200
    assert client.get("/api/projects", headers=auth("alice-token")).status_code == 200

    blocked = client.get("/api/health")

    assert blocked.status_code == 429
    assert blocked.json() == {
        "success": False,
        "message": "Too many requests from this IP, please try again later.",
        "error": "rate_limited",
    }
    assert int(blocked.headers["Retry-After"]) >= 1


def test_blocked_request_does_not_reach_handler(client):
    limit_to(1)
    client.get("/api/health")

    response = client.post(
        "/api/teams",
        json={"teamName": "Squad", "members": [{"userId": "u1", "userName": "U"}]},
        headers=auth("admin-token"),
    )

    assert response.status_code == 429
    app.dependency_overrides.pop(get_rate_limiter)
    assert client.get("/api/teams", headers=auth("admin-token")).json()["teams"] == []
