"""Booking router for tour booking intake."""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, Principal, RequiredAuth, parse_positive_id
from ..core.exceptions import InternalServerError, PersistenceError, ProblemDetailsException
from ..core.observability import metrics_collector
from ..models.payment import PaymentMethod
from ..schemas.booking import (
    BookedTourSummary,
    BookingSummary,
    CreateBookingRequest,
    CreateBookingResponse,
    DepositInfo,
)
from ..schemas.common import to_number
from ..services.booking_service import BookingIntakeResult, BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tours", tags=["booking"])

BOOKING_CREATED_MESSAGE = "Booking created successfully"
CONSULTATION_REQUESTED_MESSAGE = "Consultation request received"


def _convert_intake_to_schema(result: BookingIntakeResult) -> CreateBookingResponse:
    """Convert an intake result to the confirmation schema."""
    booking = result.booking
    tour = result.tour
    consultation = result.method is PaymentMethod.CONSULTATION

    return CreateBookingResponse(
        message=CONSULTATION_REQUESTED_MESSAGE if consultation else BOOKING_CREATED_MESSAGE,
        booking=BookingSummary(
            booking_id=booking.id,
            booking_reference=booking.reference,
            departure_date=booking.departure_date,
            subtotal=to_number(booking.subtotal),
            taxes=to_number(booking.taxes),
            total_amount=to_number(booking.total_amount),
            status=booking.status,
        ),
        deposit=None if consultation else DepositInfo(
            amount=to_number(result.quote.deposit),
            method=result.method,
        ),
        consultation=consultation,
        tour=BookedTourSummary(
            id=tour.id,
            title=tour.title,
            slug=tour.slug,
            location=tour.location,
            duration=tour.duration,
            price=to_number(result.quote.unit_price),
            guests=result.quote.guests,
        ),
    )


@router.post("/{tour_id}/bookings", response_model=CreateBookingResponse)
async def create_booking(
    tour_id: str,
    request: Optional[CreateBookingRequest] = None,
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Book a tour for the signed-in user.

    Bank and MoMo bookings record a deposit payment; consultation bookings
    record none and wait for follow-up.
    """
    tour_id_num = parse_positive_id(tour_id, "tour")
    request = request or CreateBookingRequest()
    booking_service = BookingService(db)

    try:
        result = await booking_service.create_booking(tour_id_num, principal.user_id, request)
        response_data = _convert_intake_to_schema(result)

        metrics_collector.record_booking_created(result.method.value)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="The booking could not be saved. Please try again later.",
            operation="create_booking"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error in booking creation",
            extra={
                "tour_id": tour_id,
                "user_id": principal.user_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError() from e
