"""Unit tests for admin status transitions and the payment cascade."""

import logging

import pytest
from sqlalchemy import select

from tour_booking.core.exceptions import NotFoundError, ValidationError
from tour_booking.models import Booking, Payment
from tour_booking.schemas.booking import CreateBookingRequest
from tour_booking.services.booking_service import BookingService
from tour_booking.services.booking_status_service import BookingStatusService, build_status_update


async def _create_booking(session, tour_id, user_id, method="bank") -> int:
    result = await BookingService(session).create_booking(
        tour_id, user_id, CreateBookingRequest(payment_method=method)
    )
    return result.booking.id


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


def test_paid_forces_confirmed():
    assert build_status_update(None, "paid") == {"payment_status": "paid", "status": "confirmed"}
    assert build_status_update("cancelled", "paid")["status"] == "confirmed"


def test_build_status_update_rejects_unknown_values():
    with pytest.raises(ValidationError) as exc_info:
        build_status_update("shipped", None)
    assert exc_info.value.problem_details["message"] == "Invalid status"

    with pytest.raises(ValidationError) as exc_info:
        build_status_update(None, "overdue")
    assert exc_info.value.problem_details["message"] == "Invalid payment status"

    with pytest.raises(ValidationError) as exc_info:
        build_status_update(None, None)
    assert exc_info.value.problem_details["message"] == "No updates provided"


@pytest.mark.asyncio
async def test_mark_paid_confirms_and_cascades(test_session, tour_id, user_id, distrust_client_payment):
    """Marking a pending deposit paid confirms the booking and its payment rows."""
    booking_id = await _create_booking(test_session, tour_id, user_id)
    service = BookingStatusService(test_session)

    result = await service.update_status(booking_id, payment_status="paid")

    assert result.previous_status == "pending_deposit"
    assert result.payments_marked_paid == 1

    booking = await _reload_booking(test_session, booking_id)
    assert booking.status == "confirmed"
    assert booking.payment_status == "paid"

    payments = await _reload_payments(test_session, booking_id)
    assert [p.status for p in payments] == ["Paid"]
    assert payments[0].confirmation_date is not None


@pytest.mark.asyncio
async def test_confirming_marks_payments_paid(test_session, tour_id, user_id, distrust_client_payment):
    booking_id = await _create_booking(test_session, tour_id, user_id, method="momo")
    service = BookingStatusService(test_session)

    result = await service.update_status(booking_id, status="confirmed")

    assert result.payments_marked_paid == 1
    booking = await _reload_booking(test_session, booking_id)
    assert booking.status == "confirmed"
    assert booking.payment_status == "pending"
    payments = await _reload_payments(test_session, booking_id)
    assert payments[0].status == "Paid"


@pytest.mark.asyncio
async def test_already_paid_rows_are_not_recounted(test_session, tour_id, user_id):
    booking_id = await _create_booking(test_session, tour_id, user_id)
    service = BookingStatusService(test_session)

    result = await service.update_status(booking_id, status="confirmed", payment_status="paid")

    assert result.payments_marked_paid == 0


@pytest.mark.asyncio
async def test_other_payment_status_is_copied_to_rows(test_session, tour_id, user_id):
    booking_id = await _create_booking(test_session, tour_id, user_id)
    service = BookingStatusService(test_session)

    await service.update_status(booking_id, payment_status="refunded")

    booking = await _reload_booking(test_session, booking_id)
    assert booking.status == "confirmed"
    assert booking.payment_status == "refunded"
    payments = await _reload_payments(test_session, booking_id)
    assert [p.status for p in payments] == ["refunded"]


@pytest.mark.asyncio
async def test_cancel_leaves_payment_rows(test_session, tour_id, user_id, distrust_client_payment):
    booking_id = await _create_booking(test_session, tour_id, user_id)
    service = BookingStatusService(test_session)

    await service.update_status(booking_id, status="cancelled")

    booking = await _reload_booking(test_session, booking_id)
    assert booking.status == "cancelled"
    payments = await _reload_payments(test_session, booking_id)
    assert [p.status for p in payments] == ["pending"]


@pytest.mark.asyncio
async def test_consultation_booking_can_be_moved_to_deposit(test_session, tour_id, user_id):
    booking_id = await _create_booking(test_session, tour_id, user_id, method="consultation")
    service = BookingStatusService(test_session)

    result = await service.update_status(booking_id, status="pending_deposit")

    assert result.booking.status == "pending_deposit"
    assert result.payments_marked_paid == 0


@pytest.mark.asyncio
async def test_off_workflow_transition_is_applied_and_logged(test_session, tour_id, user_id, caplog):
    booking_id = await _create_booking(test_session, tour_id, user_id)
    service = BookingStatusService(test_session)

    with caplog.at_level(logging.WARNING, logger="tour_booking.services.booking_status_service"):
        result = await service.update_status(booking_id, status="pending_consultation")

    assert result.booking.status == "pending_consultation"
    assert "Booking status moved outside the admin workflow" in caplog.text


@pytest.mark.asyncio
async def test_invalid_status_changes_nothing(test_session, tour_id, user_id, distrust_client_payment):
    booking_id = await _create_booking(test_session, tour_id, user_id)
    service = BookingStatusService(test_session)

    with pytest.raises(ValidationError):
        await service.update_status(booking_id, status="shipped", payment_status="paid")

    booking = await _reload_booking(test_session, booking_id)
    assert booking.status == "pending_deposit"
    assert booking.payment_status == "pending"


@pytest.mark.asyncio
async def test_update_status_booking_not_found(test_session):
    service = BookingStatusService(test_session)

    with pytest.raises(NotFoundError):
        await service.update_status(12345, status="cancelled")
