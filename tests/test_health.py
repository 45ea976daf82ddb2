"""Tests for health endpoints, middleware and the error envelope."""

from onesignal_gateway.middleware import route_group


def test_health_check(client, fake_onesignal):
    """Test the root health endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "OK",
        "service": "onesignal-gateway",
        "timestamp": "2024-01-01T12:00:00.000Z",
        "environment": "development",
    }
    assert fake_onesignal.requests == []


def test_request_id_is_generated(client):
    response = client.get("/health")

    assert response.headers["X-Request-ID"]
    assert response.headers["X-Process-Time"].endswith("ms")


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


def test_cors_preflight(client):
    response = client.options(
        "/api/notifications/push",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]


def test_cors_on_simple_request(client):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})

    assert response.headers["access-control-allow-origin"] == "*"


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found", "code": "HTTP_ERROR", "success": False}


def test_wrong_method_uses_envelope(client):
    response = client.get("/api/notifications/push")

    assert response.status_code == 405
    assert response.json()["success"] is False


def test_docs_hidden_outside_debug(client):
    assert client.get("/docs").status_code == 404


def test_route_group():
    assert route_group("/api/notifications/push/n-1") == "notifications"
    assert route_group("/api/journeys/create-user") == "journeys"
    assert route_group("/health") == "health"
    assert route_group("/api/nope") == "other"
    assert route_group("/") == "other"
