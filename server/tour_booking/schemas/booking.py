"""Booking-related Pydantic schemas."""

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.payment import PaymentMethod
from .common import CamelModel

# Largest party a single booking can hold
MAX_GUESTS = 100


def coerce_guest_count(value: Any) -> int:
    """
    Coerce a client-supplied guest count to an integer of at least 1.

    Numbers and numeric strings are floored; anything non-numeric,
    non-finite or below 1 counts as a single guest.
    """
    if isinstance(value, bool) or value is None:
        return 1

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 1
        try:
            value = float(value)
        except ValueError:
            return 1

    if isinstance(value, Decimal):
        if not value.is_finite():
            return 1
        value = float(value)

    if not isinstance(value, (int, float)):
        return 1

    if isinstance(value, float) and not math.isfinite(value):
        return 1

    return max(1, math.floor(value))


def coerce_departure_date(value: Any) -> datetime:
    """Parse an ISO date string into naive UTC, falling back to now."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return datetime.utcnow()
    else:
        return datetime.utcnow()

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_payment_method(value: Any) -> PaymentMethod:
    """Map the requested payment method onto a known one; unknown values mean bank."""
    if isinstance(value, PaymentMethod):
        return value
    if isinstance(value, str):
        try:
            return PaymentMethod(value)
        except ValueError:
            pass
    return PaymentMethod.BANK


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


class CreateBookingRequest(CamelModel):
    """Request schema for booking a tour."""

    guests: int = Field(1, description=f"Number of guests, 1 to {MAX_GUESTS}")
    departure_date: datetime = Field(
        default_factory=datetime.utcnow,
        description="Departure date (ISO 8601); defaults to now"
    )
    payment_method: PaymentMethod = Field(
        PaymentMethod.BANK,
        description="bank, momo or consultation; anything else is treated as bank"
    )

    @field_validator("guests", mode="before")
    @classmethod
    def validate_guests(cls, v: Any) -> int:
        count = coerce_guest_count(v)
        if count > MAX_GUESTS:
            raise ValueError(f"Guests must be at most {MAX_GUESTS}")
        return count

    @field_validator("departure_date", mode="before")
    @classmethod
    def validate_departure_date(cls, v: Any) -> datetime:
        return coerce_departure_date(v)

    @field_validator("payment_method", mode="before")
    @classmethod
    def validate_payment_method(cls, v: Any) -> PaymentMethod:
        return normalize_payment_method(v)


class BookingSummary(BaseModel):
    """Booking row returned after intake; keys keep the column names."""

    model_config = ConfigDict(populate_by_name=True)

    booking_id: int = Field(..., alias="BookingID")
    booking_reference: str = Field(..., alias="BookingReference")
    departure_date: datetime = Field(..., alias="DepartureDate")
    subtotal: float = Field(..., alias="Subtotal")
    taxes: float = Field(..., alias="Taxes")
    total_amount: float = Field(..., alias="TotalAmount")
    status: str = Field(..., alias="Status")


class DepositInfo(CamelModel):
    """Deposit collected at booking time."""

    amount: float = Field(..., ge=0, description="Deposit amount")
    method: PaymentMethod = Field(..., description="Payment method used for the deposit")


class BookedTourSummary(CamelModel):
    """Tour details echoed back in the booking confirmation."""

    id: int
    title: str
    slug: str
    location: Optional[str] = None
    duration: Optional[str] = None
    price: float = Field(..., description="Unit price per guest")
    guests: int = Field(..., ge=1)


class CreateBookingResponse(CamelModel):
    """Response schema for booking intake."""

    message: str
    booking: BookingSummary
    deposit: Optional[DepositInfo] = None
    consultation: bool
    tour: BookedTourSummary


class UpdateBookingStatusRequest(CamelModel):
    """Admin request to move a booking and/or its payment status."""

    status: Optional[str] = Field(None, description="New booking status")
    payment_status: Optional[str] = Field(None, description="New payment status")

    @field_validator("status", "payment_status", mode="before")
    @classmethod
    def blank_is_absent(cls, v: Any) -> Any:
        return _blank_to_none(v)


class BookingStatusSnapshot(BaseModel):
    """Booking row returned after a status update."""

    model_config = ConfigDict(populate_by_name=True)

    booking_id: int = Field(..., alias="BookingID")
    status: Optional[str] = Field(None, alias="Status")
    payment_status: Optional[str] = Field(None, alias="PaymentStatus")
    booking_reference: str = Field(..., alias="BookingReference")
    payment_method_id: Optional[int] = Field(None, alias="PaymentMethodID")


class UpdateBookingStatusResponse(CamelModel):
    booking: BookingStatusSnapshot


class AdminBookingTour(CamelModel):
    id: int
    title: str
    slug: str


class AdminBookingCustomer(CamelModel):
    id: int
    name: Optional[str] = None
    email: str


class AdminBookingPayment(CamelModel):
    id: int
    amount: float
    status: str
    method: Optional[str] = None
    confirmation_date: Optional[datetime] = None


class AdminBookingItem(CamelModel):
    """One row of the back-office booking list."""

    id: int
    reference: str
    booking_date: datetime
    departure_date: datetime
    guests: int
    total_amount: float
    status: str
    payment_status: str
    booking_type: str
    payment_method_id: Optional[int] = None
    tour: Optional[AdminBookingTour] = None
    customer: Optional[AdminBookingCustomer] = None
    payments: List[AdminBookingPayment] = Field(default_factory=list)


class AdminBookingList(CamelModel):
    bookings: List[AdminBookingItem]

