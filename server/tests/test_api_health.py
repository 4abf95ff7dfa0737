"""Service endpoint tests: health, readiness, info and metrics."""

import pytest


@pytest.mark.asyncio
async def test_api_health_endpoints(test_client):
    """Test the health endpoints."""
    response = await test_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "tour-booking-workflow"

    response = await test_client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"

    response = await test_client.get("/info")
    assert response.status_code == 200
    data = response.json()
    assert "service" in data
    assert "version" in data
    assert data["endpoints"]["metrics"] == "/metrics"


@pytest.mark.asyncio
async def test_request_id_is_echoed(test_client):
    """A caller-supplied request id comes back on the response."""
    response = await test_client.get("/ready", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_generated(test_client):
    response = await test_client.get("/health")

    assert response.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client, tour_id, user_headers):
    """Business counters show up after a booking is made."""
    booking = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json={"guests": 1, "paymentMethod": "momo"},
        headers=user_headers,
    )
    assert booking.status_code == 200

    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    body = response.text
    assert "http_requests_total" in body
    assert 'bookings_created_total{payment_method="momo"}' in body


@pytest.mark.asyncio
async def test_unknown_route_has_message(test_client):
    response = await test_client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json()["message"]
