"""Tests for identity resolution, role guards and id parsing."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from tour_booking.core.config import settings
from tour_booking.core.dependencies import Principal, parse_positive_id
from tour_booking.core.exceptions import ValidationError


def _headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.parametrize("value, expected", [("1", 1), ("42", 42), (" 7 ", 7), ("2147483647", 2147483647)])
def test_parse_positive_id(value, expected):
    assert parse_positive_id(value, "tour") == expected


@pytest.mark.parametrize(
    "value",
    ["0", "-3", "abc", "1.5", "", "12abc", "\u00b2", "\uff11\uff12", "2147483648", "9" * 23]
)
def test_parse_positive_id_rejects(value):
    with pytest.raises(ValidationError) as exc_info:
        parse_positive_id(value, "tour")
    assert exc_info.value.problem_details["message"] == "Invalid tour id"


def test_admin_role_is_case_insensitive():
    assert Principal(user_id=1, role="Admin").is_admin
    assert not Principal(user_id=1, role="user").is_admin


@pytest.mark.asyncio
async def test_missing_token_is_unauthorized(test_client):
    response = await test_client.get("/api/account/overview")

    assert response.status_code == 401
    data = response.json()
    assert data["status"] == 401
    assert data["message"] == "Unauthorized"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_wrong_scheme_is_unauthorized(test_client):
    response = await test_client.get("/api/account/overview", headers={"Authorization": "Basic abc"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_with_wrong_secret_is_unauthorized(test_client):
    token = jwt.encode({"sub": "1", "role": "user"}, "not-the-secret", algorithm="HS256")

    response = await test_client.get("/api/account/overview", headers=_headers(token))

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_unauthorized(test_client):
    token = jwt.encode(
        {"sub": "1", "exp": datetime.now(timezone.utc) - timedelta(minutes=5)},
        settings.bearer_token_secret,
        algorithm="HS256",
    )

    response = await test_client.get("/api/account/overview", headers=_headers(token))

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("subject", ["alice", str(10**30), "-5", "0", "2147483648"])
async def test_invalid_subject_is_rejected(test_client, subject):
    token = jwt.encode({"sub": subject}, settings.bearer_token_secret, algorithm="HS256")

    response = await test_client.get("/api/account/overview", headers=_headers(token))

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid user identifier"


@pytest.mark.asyncio
async def test_non_admin_is_forbidden(test_client, user_headers):
    response = await test_client.get("/api/admin/bookings", headers=user_headers)

    assert response.status_code == 403
    data = response.json()
    assert data["message"] == "Forbidden"
    assert data["required_role"] == "admin"


@pytest.mark.asyncio
async def test_admin_may_list_bookings(test_client, admin_headers):
    response = await test_client.get("/api/admin/bookings", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"bookings": []}


@pytest.mark.asyncio
async def test_out_of_range_subject_cannot_book(test_client, tour_id):
    token = jwt.encode({"sub": str(10**30)}, settings.bearer_token_secret, algorithm="HS256")

    response = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json={"guests": 1},
        headers=_headers(token)
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid user identifier"
