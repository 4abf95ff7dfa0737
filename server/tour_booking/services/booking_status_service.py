"""Admin status transitions for bookings and their payments."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.booking import Booking, BookingStatus, PaymentStatus, is_workflow_transition
from ..models.payment import PAYMENT_ROW_PAID, Payment

logger = logging.getLogger(__name__)

ALLOWED_BOOKING_STATUSES = frozenset(s.value for s in BookingStatus)
ALLOWED_PAYMENT_STATUSES = frozenset(s.value for s in PaymentStatus)


def build_status_update(status: Optional[str], payment_status: Optional[str]) -> Dict[str, str]:
    """
    Validate a requested transition and return the booking columns to set.

    A paid payment status always forces the booking to confirmed.

    Raises:
        ValidationError: If a value is outside its enumeration or nothing was requested
    """
    updates: Dict[str, str] = {}

    if status:
        if status not in ALLOWED_BOOKING_STATUSES:
            raise ValidationError("Invalid status", errors={"status": status})
        updates["status"] = status

    if payment_status:
        if payment_status not in ALLOWED_PAYMENT_STATUSES:
            raise ValidationError("Invalid payment status", errors={"paymentStatus": payment_status})
        updates["payment_status"] = payment_status

    if not updates:
        raise ValidationError("No updates provided")

    if payment_status == PaymentStatus.PAID.value:
        updates["status"] = BookingStatus.CONFIRMED.value

    return updates


@dataclass
class StatusUpdateResult:
    booking: Booking
    previous_status: Optional[str]
    payments_marked_paid: int


class BookingStatusService:
    """Service applying admin status updates with the paid/confirmed cascade."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def update_status(
        self,
        booking_id: int,
        status: Optional[str] = None,
        payment_status: Optional[str] = None
    ) -> StatusUpdateResult:
        """
        Update a booking's status and cascade onto its payment rows.

        The booking update and the payment cascade commit together.

        Args:
            booking_id: Booking to update
            status: Requested booking status
            payment_status: Requested payment status

        Returns:
            The updated booking and how many payment rows were marked paid

        Raises:
            ValidationError: If the request is invalid; nothing is read or written
            NotFoundError: If booking not found
            SQLAlchemyError: If the store rejects the writes
        """
        updates = build_status_update(status, payment_status)
        now = datetime.utcnow()
        marked_paid = 0

        try:
            stmt = select(Booking).where(Booking.id == booking_id).with_for_update()
            result = await self.db.execute(stmt)
            booking = result.scalar_one_or_none()

            if not booking:
                logger.warning(
                    "Booking not found for status update",
                    extra={"booking_id": booking_id}
                )
                raise NotFoundError(
                    resource_type="booking",
                    resource_id=str(booking_id)
                )

            previous_status = booking.status
            target_status = updates.get("status")
            if target_status and not is_workflow_transition(previous_status, target_status):
                logger.warning(
                    "Booking status moved outside the admin workflow",
                    extra={
                        "booking_id": booking_id,
                        "from_status": previous_status,
                        "to_status": target_status
                    }
                )

            for column, value in updates.items():
                setattr(booking, column, value)
            booking.updated_at = now
            await self.db.flush()

            requested_payment_status = updates.get("payment_status")
            if (requested_payment_status == PaymentStatus.PAID.value
                    or target_status == BookingStatus.CONFIRMED.value):
                payment_stmt = (
                    update(Payment)
                    .where(
                        Payment.booking_id == booking_id,
                        or_(Payment.status.is_(None), Payment.status != PAYMENT_ROW_PAID)
                    )
                    .values(status=PAYMENT_ROW_PAID, confirmation_date=now)
                )
                payment_result = await self.db.execute(payment_stmt)
                marked_paid = payment_result.rowcount or 0

            elif requested_payment_status:
                payment_stmt = (
                    update(Payment)
                    .where(Payment.booking_id == booking_id)
                    .values(status=requested_payment_status)
                )
                await self.db.execute(payment_stmt)

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Booking status update failed - transaction rolled back",
                extra={
                    "booking_id": booking_id,
                    "updates": updates,
                    "error": str(e)
                },
                exc_info=True
            )
            raise

        logger.info(
            "Booking status updated",
            extra={
                "booking_id": booking_id,
                "from_status": previous_status,
                "status": booking.status,
                "payment_status": booking.payment_status,
                "payments_marked_paid": marked_paid
            }
        )

        return StatusUpdateResult(
            booking=booking,
            previous_status=previous_status,
            payments_marked_paid=marked_paid
        )
