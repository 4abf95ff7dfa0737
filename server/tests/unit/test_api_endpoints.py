"""Integration tests for the booking and admin endpoints."""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from tour_booking.models import Booking, Payment


async def _reload_booking(session, booking_id) -> Booking:
    stmt = select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
    return (await session.execute(stmt)).scalar_one()


async def _reload_payments(session, booking_id) -> list:
    stmt = (
        select(Payment)
        .where(Payment.booking_id == booking_id)
        .execution_options(populate_existing=True)
    )
    return list((await session.execute(stmt)).scalars().all())


async def _count(session, column) -> int:
    return (await session.execute(select(func.count(column)))).scalar_one()


@pytest.mark.asyncio
async def test_create_bank_booking_endpoint(test_client, test_session, tour_id, user_headers, sample_booking_data):
    """Two guests at 1,000,000 paid by bank."""
    response = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json=sample_booking_data,
        headers=user_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Booking created successfully"
    assert data["consultation"] is False

    booking = data["booking"]
    assert booking["Subtotal"] == 2000000
    assert booking["Taxes"] == 160000
    assert booking["TotalAmount"] == 2160000
    assert booking["Status"] == "confirmed"
    assert booking["BookingReference"].startswith("TRV-")
    assert booking["DepartureDate"].startswith("2030-06-01")

    assert data["deposit"] == {"amount": 108000, "method": "bank"}
    assert data["tour"]["id"] == tour_id
    assert data["tour"]["price"] == 1000000
    assert data["tour"]["guests"] == 2

    payments = await _reload_payments(test_session, booking["BookingID"])
    assert len(payments) == 1
    assert payments[0].status == "Paid"
    assert payments[0].amount == Decimal("108000.00")


@pytest.mark.asyncio
async def test_create_consultation_booking_endpoint(test_client, test_session, tour_id, user_headers):
    response = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json={"guests": 3, "paymentMethod": "consultation"},
        headers=user_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Consultation request received"
    assert data["consultation"] is True
    assert data["deposit"] is None
    assert data["booking"]["Status"] == "pending_consultation"
    assert data["booking"]["TotalAmount"] == 3240000
    assert await _count(test_session, Payment.id) == 0


@pytest.mark.asyncio
async def test_create_booking_without_body_uses_defaults(test_client, tour_id, user_headers):
    response = await test_client.post(f"/api/tours/{tour_id}/bookings", headers=user_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["tour"]["guests"] == 1
    assert data["deposit"]["method"] == "bank"
    assert data["booking"]["Subtotal"] == 1000000


@pytest.mark.asyncio
@pytest.mark.parametrize("guests, expected", [("abc", 1), (-5, 1), (0, 1), (2.7, 2), ("4", 4), (None, 1)])
async def test_create_booking_coerces_guests(test_client, tour_id, user_headers, guests, expected):
    response = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json={"guests": guests, "paymentMethod": "momo"},
        headers=user_headers
    )

    assert response.status_code == 200
    assert response.json()["tour"]["guests"] == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("guests", [101, 1e300, 10**30, "9" * 25])
async def test_create_booking_rejects_oversized_party(test_client, test_session, tour_id, user_headers, guests):
    response = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json={"guests": guests, "paymentMethod": "momo"},
        headers=user_headers
    )

    assert response.status_code == 400
    assert response.json()["violations"]
    assert await _count(test_session, Booking.id) == 0


@pytest.mark.asyncio
async def test_create_booking_invalid_json(test_client, test_session, tour_id, user_headers):
    response = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        content=b"{not json",
        headers={**user_headers, "Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert "violations" in response.json()
    assert await _count(test_session, Booking.id) == 0


@pytest.mark.asyncio
async def test_create_booking_missing_auth(test_client, test_session, tour_id, sample_booking_data):
    response = await test_client.post(f"/api/tours/{tour_id}/bookings", json=sample_booking_data)

    assert response.status_code == 401
    data = response.json()
    assert data["status"] == 401
    assert data["message"] == "Unauthorized"
    assert await _count(test_session, Booking.id) == 0


@pytest.mark.asyncio
async def test_create_booking_bad_tour_id(test_client, user_headers):
    response = await test_client.post("/api/tours/abc/bookings", json={}, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid tour id"


@pytest.mark.asyncio
async def test_create_booking_unknown_tour(test_client, user_headers):
    response = await test_client.post("/api/tours/9999/bookings", json={}, headers=user_headers)

    assert response.status_code == 404
    assert response.json()["resource_type"] == "tour"


@pytest.mark.asyncio
async def test_admin_marks_deposit_paid(
    test_client, test_session, tour_id, user_headers, admin_headers, distrust_client_payment
):
    """paymentStatus=paid confirms a pending_deposit booking and its payment rows."""
    created = await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json={"guests": 1, "paymentMethod": "bank"},
        headers=user_headers
    )
    booking_id = created.json()["booking"]["BookingID"]
    assert created.json()["booking"]["Status"] == "pending_deposit"

    response = await test_client.patch(
        f"/api/admin/bookings/{booking_id}/status",
        json={"paymentStatus": "paid"},
        headers=admin_headers
    )

    assert response.status_code == 200
    snapshot = response.json()["booking"]
    assert snapshot["BookingID"] == booking_id
    assert snapshot["Status"] == "confirmed"
    assert snapshot["PaymentStatus"] == "paid"

    payments = await _reload_payments(test_session, booking_id)
    assert [p.status for p in payments] == ["Paid"]
    assert payments[0].confirmation_date is not None


@pytest.mark.asyncio
async def test_non_admin_cannot_update_status(
    test_client, test_session, tour_id, user_headers, distrust_client_payment
):
    created = await test_client.post(f"/api/tours/{tour_id}/bookings", json={}, headers=user_headers)
    booking_id = created.json()["booking"]["BookingID"]

    forbidden = await test_client.patch(
        f"/api/admin/bookings/{booking_id}/status",
        json={"status": "confirmed"},
        headers=user_headers
    )
    anonymous = await test_client.patch(
        f"/api/admin/bookings/{booking_id}/status",
        json={"status": "confirmed"}
    )

    assert forbidden.status_code == 403
    assert anonymous.status_code == 401
    booking = await _reload_booking(test_session, booking_id)
    assert booking.status == "pending_deposit"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, message",
    [
        ({"status": "shipped"}, "Invalid status"),
        ({"paymentStatus": "overdue"}, "Invalid payment status"),
        ({"status": "", "paymentStatus": ""}, "No updates provided"),
        ({}, "No updates provided"),
    ],
)
async def test_invalid_status_update_persists_nothing(
    test_client, test_session, tour_id, user_headers, admin_headers, distrust_client_payment, body, message
):
    created = await test_client.post(f"/api/tours/{tour_id}/bookings", json={}, headers=user_headers)
    booking_id = created.json()["booking"]["BookingID"]

    response = await test_client.patch(
        f"/api/admin/bookings/{booking_id}/status",
        json=body,
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == message
    booking = await _reload_booking(test_session, booking_id)
    assert booking.status == "pending_deposit"
    assert booking.payment_status == "pending"


@pytest.mark.asyncio
async def test_update_status_unknown_booking(test_client, admin_headers):
    response = await test_client.patch(
        "/api/admin/bookings/424242/status",
        json={"status": "cancelled"},
        headers=admin_headers
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("booking_id", ["first", "\u00b2", "\uff11\uff12", "9" * 23])
async def test_update_status_bad_booking_id(test_client, admin_headers, booking_id):
    response = await test_client.patch(
        f"/api/admin/bookings/{booking_id}/status",
        json={"status": "cancelled"},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid booking id"


@pytest.mark.asyncio
async def test_admin_booking_list(test_client, test_session, tour_id, user_id, user_headers, admin_headers):
    await test_client.post(f"/api/tours/{tour_id}/bookings", json={"guests": 2}, headers=user_headers)
    await test_client.post(
        f"/api/tours/{tour_id}/bookings",
        json={"paymentMethod": "consultation"},
        headers=user_headers
    )

    # A legacy row with free-form statuses
    test_session.add(Booking(
        reference="LEGACY-1",
        user_id=user_id,
        tour_id=tour_id,
        guests=1,
        subtotal=Decimal("1000000"),
        taxes=Decimal("80000"),
        total_amount=Decimal("1080000"),
        departure_date=datetime(2020, 1, 1),
        status="CANCELED",
        payment_status=None,
        booking_type=None,
        booking_date=datetime(2020, 1, 1),
    ))
    await test_session.commit()

    response = await test_client.get("/api/admin/bookings", headers=admin_headers)

    assert response.status_code == 200
    bookings = response.json()["bookings"]
    assert len(bookings) == 3

    consultation, bank, legacy = bookings
    assert consultation["status"] == "pending_consultation"
    assert consultation["payments"] == []

    assert bank["status"] == "confirmed"
    assert bank["paymentStatus"] == "paid"
    assert bank["totalAmount"] == 2160000
    assert bank["customer"]["id"] == user_id
    assert bank["tour"]["id"] == tour_id
    assert bank["payments"][0]["status"] == "paid"
    assert bank["payments"][0]["method"] == "Bank Transfer"

    assert legacy["reference"] == "LEGACY-1"
    assert legacy["status"] == "cancelled"
    assert legacy["paymentStatus"] == "pending"
    assert legacy["bookingType"] == "online"
