"""Booking model definition and lifecycle enumerations."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .payment import Payment
    from .payment_method import UserPaymentMethod
    from .tour import Tour
    from .user import User


class BookingStatus(str, Enum):
    """Booking lifecycle status."""
    PENDING_CONSULTATION = "pending_consultation"
    PENDING_DEPOSIT = "pending_deposit"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status as set on a booking by the back-office."""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


# Admin workflow graph; terminal states map to an empty set
BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    BookingStatus.PENDING_CONSULTATION.value: frozenset({
        BookingStatus.PENDING_DEPOSIT.value,
        BookingStatus.CANCELLED.value,
    }),
    BookingStatus.PENDING_DEPOSIT.value: frozenset({
        BookingStatus.CONFIRMED.value,
        BookingStatus.CANCELLED.value,
    }),
    BookingStatus.CONFIRMED.value: frozenset(),
    BookingStatus.CANCELLED.value: frozenset(),
}


def is_workflow_transition(current: str | None, target: str) -> bool:
    """Return True if ``current -> target`` follows the admin workflow graph."""
    if current is None or current == target:
        return True
    return target in BOOKING_TRANSITIONS.get(current, frozenset())


class Booking(Base):
    """A user's reservation for a tour departure with its derived pricing."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    reference: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tour_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tours.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    payment_method_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_payment_methods.id", ondelete="SET NULL"),
        nullable=True
    )

    # Pricing
    guests: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    taxes: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    departure_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    # Free-form strings: legacy rows carry values outside the enumerations
    status: Mapped[str | None] = mapped_column(String(40), nullable=True, index=True)
    payment_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    booking_type: Mapped[str | None] = mapped_column(String(20), nullable=True, default="online")

    # Timestamps
    booking_date: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    __table_args__ = (
        CheckConstraint("guests >= 1", name="ck_booking_guests_positive"),
        CheckConstraint("subtotal >= 0", name="ck_booking_subtotal_non_negative"),
        CheckConstraint("length(reference) > 0", name="ck_booking_reference_not_empty"),
    )

    # Relationships
    tour: Mapped["Tour"] = relationship("Tour", back_populates="bookings")
    user: Mapped["User"] = relationship("User", back_populates="bookings")
    payment_method: Mapped["UserPaymentMethod | None"] = relationship("UserPaymentMethod")
    payments: Mapped[list["Payment"]] = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Payment.id"
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, reference='{self.reference}', tour_id={self.tour_id}, "
            f"guests={self.guests}, status={self.status}, payment_status={self.payment_status})>"
        )
