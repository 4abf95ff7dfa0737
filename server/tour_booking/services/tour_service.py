"""Tour service for business logic operations."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.tour import Tour

logger = logging.getLogger(__name__)


class TourService:
    """Service for tour lookups; tours are read-only in the booking workflow."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_tour_by_id(self, tour_id: int) -> Optional[Tour]:
        """
        Get a tour by ID.

        Args:
            tour_id: Tour identifier

        Returns:
            Tour entity or None if not found
        """
        stmt = select(Tour).where(Tour.id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: int) -> Tour:
        """
        Get a tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": tour_id}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=str(tour_id)
            )
        return tour
