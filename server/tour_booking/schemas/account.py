"""Account overview Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import CamelModel


class AccountTour(CamelModel):
    """Tour fields shown next to a booking in the account page."""

    id: int
    slug: str
    title: str
    location: Optional[str] = None
    image: Optional[str] = None
    duration: Optional[str] = None
    average_rating: float = 0
    price: float = 0
    original_price: Optional[float] = None


class AccountBooking(CamelModel):
    """A booking of the current user with display status and own rating."""

    id: int
    reference: str
    booking_date: datetime
    departure_date: datetime
    guests: int
    total_amount: float
    status: str = Field(..., description="upcoming, completed, cancelled or the raw status")
    tour: Optional[AccountTour] = None
    rating: Optional[int] = Field(None, description="The user's own rating for the tour")


class SavedTour(CamelModel):
    """A wishlist entry flattened with its tour."""

    id: int
    slug: str
    title: str
    location: Optional[str] = None
    image: Optional[str] = None
    duration: Optional[str] = None
    average_rating: float = 0
    review_count: int = 0
    price: float = 0
    original_price: Optional[float] = None
    added_date: datetime


class AccountStats(CamelModel):
    total_bookings: int
    saved_tours_count: int
    average_saved_rating: float


class AccountOverview(CamelModel):
    """Read-only account snapshot."""

    stats: AccountStats
    bookings: List[AccountBooking]
    upcoming_trips: List[AccountBooking]
    recent_saved: List[SavedTour]
    favorite_tours: List[SavedTour]
    saved_tours: List[SavedTour]
