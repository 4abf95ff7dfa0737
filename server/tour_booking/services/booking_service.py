"""Booking service: intake pricing, persistence and the admin booking list."""

import logging
import secrets
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..models.booking import Booking, BookingStatus, PaymentStatus
from ..models.payment import PAYMENT_ROW_PAID, Payment, PaymentMethod
from ..models.payment_method import UserPaymentMethod
from ..models.tour import Tour
from ..schemas.booking import CreateBookingRequest
from .tour_service import TourService

logger = logging.getLogger(__name__)

TAX_RATE = Decimal("0.08")
DEPOSIT_RATE = Decimal("0.05")
CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Quantize a monetary amount to cents, rounding half up."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BookingQuote:
    """Derived pricing of a booking."""

    unit_price: Decimal
    guests: int
    subtotal: Decimal
    taxes: Decimal
    total: Decimal
    deposit: Decimal


def quote_booking(unit_price: Any, guests: int, method: PaymentMethod) -> BookingQuote:
    """
    Price a booking.

    subtotal = unit price x guests, taxes = 8% of subtotal,
    total = subtotal + taxes, deposit = 5% of total (0 for consultation).
    """
    unit = to_money(unit_price)
    subtotal = to_money(unit * guests)
    taxes = to_money(subtotal * TAX_RATE)
    total = subtotal + taxes

    if method is PaymentMethod.CONSULTATION:
        deposit = to_money(0)
    else:
        deposit = to_money(total * DEPOSIT_RATE)

    return BookingQuote(
        unit_price=unit,
        guests=guests,
        subtotal=subtotal,
        taxes=taxes,
        total=total,
        deposit=deposit,
    )


@dataclass(frozen=True)
class InitialStatus:
    booking_status: str
    payment_status: str
    payment_row_status: Optional[str]


def initial_status(method: PaymentMethod, trust_client_payment: bool = True) -> InitialStatus:
    """
    Statuses a new booking starts with.

    Consultation bookings never get a payment row. Bank and MoMo bookings are
    confirmed with a Paid deposit when the client-declared payment is trusted;
    otherwise they wait in pending_deposit for an admin to mark them paid.
    """
    if method is PaymentMethod.CONSULTATION:
        return InitialStatus(
            booking_status=BookingStatus.PENDING_CONSULTATION.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_row_status=None,
        )

    if trust_client_payment:
        return InitialStatus(
            booking_status=BookingStatus.CONFIRMED.value,
            payment_status=PaymentStatus.PAID.value,
            payment_row_status=PAYMENT_ROW_PAID,
        )

    return InitialStatus(
        booking_status=BookingStatus.PENDING_DEPOSIT.value,
        payment_status=PaymentStatus.PENDING.value,
        payment_row_status=PaymentStatus.PENDING.value,
    )


def normalize_admin_status(status: Optional[str]) -> str:
    """Collapse a raw booking status into the back-office vocabulary."""
    if not status:
        return "pending"
    normalized = status.lower()
    if "consult" in normalized:
        return BookingStatus.PENDING_CONSULTATION.value
    if "confirm" in normalized:
        return BookingStatus.CONFIRMED.value
    if "cancel" in normalized:
        return BookingStatus.CANCELLED.value
    return normalized


@dataclass
class BookingIntakeResult:
    booking: Booking
    tour: Tour
    quote: BookingQuote
    method: PaymentMethod


class BookingService:
    """Service for booking intake and the admin booking list."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)

    def _new_reference(self) -> str:
        return f"{settings.booking_reference_prefix}-{int(time.time() * 1000)}"

    async def _reference_exists(self, reference: str) -> bool:
        stmt = select(Booking.id).where(Booking.reference == reference)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def _generate_reference(self) -> str:
        """Generate a timestamp reference, suffixing it until it is unused."""
        base = self._new_reference()
        reference = base
        while await self._reference_exists(reference):
            reference = f"{base}-{secrets.token_hex(2).upper()}"
        return reference

    async def _find_payment_method_id(self, user_id: int, method: PaymentMethod) -> Optional[int]:
        """Return the id of the user's account on file matching the method, if any."""
        if method is PaymentMethod.CONSULTATION:
            return None
        stmt = select(UserPaymentMethod.id).where(
            UserPaymentMethod.user_id == user_id,
            UserPaymentMethod.type == method.value
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def _build_deposit_payment(
        self,
        booking: Booking,
        quote: BookingQuote,
        method: PaymentMethod,
        row_status: Optional[str]
    ) -> Payment:
        """Build the deposit payment row recorded alongside a new booking."""
        return Payment(
            booking_id=booking.id,
            amount=quote.deposit,
            method=method.label,
            status=row_status,
        )

    async def create_booking(
        self,
        tour_id: int,
        user_id: int,
        request: CreateBookingRequest
    ) -> BookingIntakeResult:
        """
        Create a booking and, unless it is a consultation, its deposit payment.

        Both rows are written in one transaction; a failure rolls back both.

        Args:
            tour_id: Tour being booked
            user_id: Authenticated user making the booking
            request: Guests, departure date and payment method

        Returns:
            The persisted booking with its tour and pricing

        Raises:
            NotFoundError: If tour not found
            SQLAlchemyError: If the store rejects the writes
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(tour_id)

        method = request.payment_method
        quote = quote_booking(tour.price, request.guests, method)
        statuses = initial_status(method, settings.trust_client_payment)

        reference = await self._generate_reference()
        payment_method_id = await self._find_payment_method_id(user_id, method)

        booking = Booking(
            reference=reference,
            user_id=user_id,
            tour_id=tour.id,
            payment_method_id=payment_method_id,
            guests=quote.guests,
            subtotal=quote.subtotal,
            taxes=quote.taxes,
            total_amount=quote.total,
            departure_date=request.departure_date,
            status=statuses.booking_status,
            payment_status=statuses.payment_status,
        )

        try:
            self.db.add(booking)
            await self.db.flush()

            if method is not PaymentMethod.CONSULTATION:
                self.db.add(self._build_deposit_payment(booking, quote, method, statuses.payment_row_status))

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Booking creation failed - transaction rolled back",
                extra={
                    "tour_id": tour_id,
                    "user_id": user_id,
                    "payment_method": method.value,
                    "reference": reference,
                    "error": str(e)
                },
                exc_info=True
            )
            raise

        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": booking.id,
                "reference": booking.reference,
                "tour_id": tour.id,
                "user_id": user_id,
                "guests": quote.guests,
                "total": str(quote.total),
                "deposit": str(quote.deposit),
                "payment_method": method.value,
                "status": booking.status
            }
        )

        return BookingIntakeResult(booking=booking, tour=tour, quote=quote, method=method)

    async def list_bookings(self) -> List[Booking]:
        """
        List all bookings newest first with tour, customer and payments loaded.

        Returns:
            List of booking entities
        """
        stmt = (
            select(Booking)
            .options(
                selectinload(Booking.tour),
                selectinload(Booking.user),
                selectinload(Booking.payments)
            )
            .order_by(Booking.booking_date.desc(), Booking.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
