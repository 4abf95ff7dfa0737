"""Review service: rating upsert and tour rating aggregates."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import upsert_insert
from ..models.review import Review
from .tour_service import TourService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingSummary:
    average_rating: Decimal
    review_count: int
    user_rating: Optional[int]


def round_rating(value) -> Decimal:
    """Round an average rating to 2 decimals, half up."""
    return Decimal(str(value or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ReviewService:
    """Service for tour ratings."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)

    async def _aggregate(self, tour_id: int) -> tuple[Decimal, int]:
        stmt = select(func.avg(Review.rating), func.count(Review.id)).where(Review.tour_id == tour_id)
        result = await self.db.execute(stmt)
        average, count = result.one()
        return round_rating(average), int(count or 0)

    async def get_user_rating(self, tour_id: int, user_id: int) -> Optional[int]:
        stmt = select(Review.rating).where(Review.tour_id == tour_id, Review.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_summary(self, tour_id: int, user_id: Optional[int] = None) -> RatingSummary:
        """
        Get a tour's rating aggregate and, for a signed-in caller, their own rating.

        Args:
            tour_id: Tour identifier
            user_id: Caller, or None for anonymous requests
        """
        average, count = await self._aggregate(tour_id)
        user_rating = await self.get_user_rating(tour_id, user_id) if user_id is not None else None
        return RatingSummary(average_rating=average, review_count=count, user_rating=user_rating)

    async def submit_review(
        self,
        tour_id: int,
        user_id: int,
        rating: int,
        comment: Optional[str] = None
    ) -> RatingSummary:
        """
        Insert or replace the user's review, then refresh the tour's stored aggregate.

        The review upsert and the aggregate refresh commit together.

        Raises:
            NotFoundError: If tour not found
            SQLAlchemyError: If the store rejects the writes
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(tour_id)
        now = datetime.utcnow()

        stmt = upsert_insert(self.db, Review).values(
            tour_id=tour_id,
            user_id=user_id,
            rating=rating,
            comment=comment,
            review_date=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["tour_id", "user_id"],
            set_={
                "rating": stmt.excluded.rating,
                "comment": stmt.excluded.comment,
                "review_date": stmt.excluded.review_date,
            }
        )

        try:
            await self.db.execute(stmt)
            average, count = await self._aggregate(tour_id)

            tour.average_rating = average
            tour.review_count = count
            tour.updated_at = now

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to save review",
                extra={"tour_id": tour_id, "user_id": user_id, "error": str(e)},
                exc_info=True
            )
            raise

        logger.info(
            "Review saved",
            extra={
                "tour_id": tour_id,
                "user_id": user_id,
                "rating": rating,
                "average_rating": str(average),
                "review_count": count
            }
        )

        return RatingSummary(average_rating=average, review_count=count, user_rating=rating)
