"""Admin router for the back-office booking list and status transitions."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, DatabaseSession, Principal, parse_positive_id
from ..core.exceptions import InternalServerError, PersistenceError, ProblemDetailsException
from ..core.observability import metrics_collector
from ..models.booking import Booking
from ..schemas.booking import (
    AdminBookingCustomer,
    AdminBookingItem,
    AdminBookingList,
    AdminBookingPayment,
    AdminBookingTour,
    BookingStatusSnapshot,
    UpdateBookingStatusRequest,
    UpdateBookingStatusResponse,
)
from ..schemas.common import to_number
from ..services.booking_service import BookingService, normalize_admin_status
from ..services.booking_status_service import BookingStatusService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/bookings", tags=["admin"])


def _convert_booking_to_admin_item(booking: Booking) -> AdminBookingItem:
    """Convert a booking with its tour, customer and payments to a list row."""
    return AdminBookingItem(
        id=booking.id,
        reference=booking.reference,
        booking_date=booking.booking_date,
        departure_date=booking.departure_date,
        guests=booking.guests,
        total_amount=to_number(booking.total_amount),
        status=normalize_admin_status(booking.status),
        payment_status=(booking.payment_status or "pending").lower(),
        booking_type=(booking.booking_type or "online").lower(),
        payment_method_id=booking.payment_method_id,
        tour=AdminBookingTour(
            id=booking.tour.id,
            title=booking.tour.title,
            slug=booking.tour.slug,
        ) if booking.tour else None,
        customer=AdminBookingCustomer(
            id=booking.user.id,
            name=booking.user.full_name,
            email=booking.user.email,
        ) if booking.user else None,
        payments=[
            AdminBookingPayment(
                id=payment.id,
                amount=to_number(payment.amount),
                status=(payment.status or "pending").lower(),
                method=payment.method,
                confirmation_date=payment.confirmation_date,
            )
            for payment in booking.payments
        ],
    )


def _convert_booking_to_snapshot(booking: Booking) -> BookingStatusSnapshot:
    return BookingStatusSnapshot(
        booking_id=booking.id,
        status=booking.status,
        payment_status=booking.payment_status,
        booking_reference=booking.reference,
        payment_method_id=booking.payment_method_id,
    )


@router.get("", response_model=AdminBookingList)
async def list_bookings(
    principal: Principal = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """List every booking, newest first, with statuses normalized for display."""
    booking_service = BookingService(db)

    try:
        bookings = await booking_service.list_bookings()
        response_data = AdminBookingList(
            bookings=[_convert_booking_to_admin_item(booking) for booking in bookings]
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="Bookings could not be loaded",
            operation="list_bookings"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error in admin booking list",
            extra={"admin_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.patch("/{booking_id}/status", response_model=UpdateBookingStatusResponse)
async def update_booking_status(
    booking_id: str,
    request: UpdateBookingStatusRequest,
    principal: Principal = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Move a booking and/or its payment status.

    Marking the payment paid confirms the booking and flips its payment rows to Paid.
    """
    booking_id_num = parse_positive_id(booking_id, "booking")
    status_service = BookingStatusService(db)

    try:
        result = await status_service.update_status(
            booking_id_num,
            status=request.status,
            payment_status=request.payment_status
        )
        response_data = UpdateBookingStatusResponse(
            booking=_convert_booking_to_snapshot(result.booking)
        )

        metrics_collector.record_status_update(result.booking.status or "unknown")
        metrics_collector.record_payments_marked_paid(result.payments_marked_paid)

        logger.info(
            "Admin updated booking status",
            extra={
                "admin_id": principal.user_id,
                "booking_id": booking_id_num,
                "from_status": result.previous_status,
                "status": result.booking.status
            }
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="The booking status could not be updated",
            operation="update_booking_status"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error in booking status update",
            extra={
                "admin_id": principal.user_id,
                "booking_id": booking_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError() from e
