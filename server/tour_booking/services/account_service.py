"""Account aggregator: read-only overview of a user's bookings and saved tours."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.booking import Booking
from ..models.review import Review
from ..models.tour import Tour
from ..models.wishlist import WishlistEntry

logger = logging.getLogger(__name__)

UPCOMING_TRIPS_LIMIT = 3
RECENT_SAVED_LIMIT = 4
FAVORITE_TOURS_LIMIT = 4


def normalize_account_status(status: Optional[str]) -> str:
    """Map a raw booking status onto upcoming, completed or cancelled for display."""
    if not isinstance(status, str):
        return "pending"
    normalized = status.lower()
    if "cancel" in normalized:
        return "cancelled"
    if "complete" in normalized:
        return "completed"
    if "upcoming" in normalized or "confirmed" in normalized:
        return "upcoming"
    return normalized or "pending"


def average_saved_rating(ratings: Sequence[Optional[Decimal]]) -> float:
    """Mean of the saved tours' ratings rounded to 2 decimals; 0 with nothing saved."""
    if not ratings:
        return 0.0
    total = sum((Decimal(str(r or 0)) for r in ratings), Decimal("0"))
    mean = total / len(ratings)
    return float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass
class AccountBookingRow:
    booking: Booking
    tour: Tour
    rating: Optional[int]
    status: str


@dataclass
class SavedTourRow:
    entry: WishlistEntry
    tour: Tour


@dataclass
class AccountSnapshot:
    bookings: List[AccountBookingRow]
    upcoming_trips: List[AccountBookingRow]
    saved_tours: List[SavedTourRow]
    recent_saved: List[SavedTourRow]
    favorite_tours: List[SavedTourRow]
    average_saved_rating: float

    @property
    def total_bookings(self) -> int:
        return len(self.bookings)

    @property
    def saved_tours_count(self) -> int:
        return len(self.saved_tours)


class AccountService:
    """Service assembling the account overview. Never writes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load_bookings(self, user_id: int) -> List[AccountBookingRow]:
        stmt = (
            select(Booking, Tour, Review.rating)
            .join(Tour, Booking.tour_id == Tour.id)
            .outerjoin(
                Review,
                and_(Review.tour_id == Booking.tour_id, Review.user_id == Booking.user_id)
            )
            .where(Booking.user_id == user_id)
            .order_by(Booking.departure_date.asc(), Booking.id.asc())
        )
        result = await self.db.execute(stmt)
        return [
            AccountBookingRow(
                booking=booking,
                tour=tour,
                rating=rating,
                status=normalize_account_status(booking.status)
            )
            for booking, tour, rating in result.all()
        ]

    async def _load_saved_tours(self, user_id: int) -> List[SavedTourRow]:
        stmt = (
            select(WishlistEntry, Tour)
            .join(Tour, WishlistEntry.tour_id == Tour.id)
            .where(WishlistEntry.user_id == user_id)
            .order_by(WishlistEntry.added_date.desc(), WishlistEntry.id.desc())
        )
        result = await self.db.execute(stmt)
        return [SavedTourRow(entry=entry, tour=tour) for entry, tour in result.all()]

    async def get_overview(self, user_id: int, now: Optional[datetime] = None) -> AccountSnapshot:
        """
        Build the account snapshot of a user.

        Args:
            user_id: Authenticated user
            now: Reference time for upcoming trips; defaults to the current UTC time

        Returns:
            Bookings oldest departure first, the next trips, and saved tours newest first
        """
        now = now or datetime.utcnow()

        bookings = await self._load_bookings(user_id)
        upcoming = [row for row in bookings if row.booking.departure_date >= now][:UPCOMING_TRIPS_LIMIT]

        saved = await self._load_saved_tours(user_id)
        favorites = sorted(
            saved,
            key=lambda row: row.tour.average_rating or Decimal("0"),
            reverse=True
        )[:FAVORITE_TOURS_LIMIT]

        snapshot = AccountSnapshot(
            bookings=bookings,
            upcoming_trips=upcoming,
            saved_tours=saved,
            recent_saved=saved[:RECENT_SAVED_LIMIT],
            favorite_tours=favorites,
            average_saved_rating=average_saved_rating([row.tour.average_rating for row in saved]),
        )

        logger.debug(
            "Account overview assembled",
            extra={
                "user_id": user_id,
                "total_bookings": snapshot.total_bookings,
                "upcoming_trips": len(upcoming),
                "saved_tours": snapshot.saved_tours_count
            }
        )

        return snapshot
