"""Wishlist service for saving and removing tours."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import upsert_insert
from ..models.wishlist import WishlistEntry
from .tour_service import TourService

logger = logging.getLogger(__name__)


@dataclass
class WishlistSaveResult:
    entry: WishlistEntry
    created: bool


class WishlistService:
    """Service for wishlist-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)

    async def get_entry(self, user_id: int, tour_id: int) -> Optional[WishlistEntry]:
        """Get the user's wishlist entry for a tour, if saved."""
        stmt = select(WishlistEntry).where(
            WishlistEntry.user_id == user_id,
            WishlistEntry.tour_id == tour_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def save_tour(self, user_id: int, tour_id: int) -> WishlistSaveResult:
        """
        Save a tour for the user; saving twice keeps a single entry.

        Raises:
            NotFoundError: If tour not found
            SQLAlchemyError: If the store rejects the write
        """
        await self.tour_service.get_tour_by_id_or_raise(tour_id)

        stmt = (
            upsert_insert(self.db, WishlistEntry)
            .values(user_id=user_id, tour_id=tour_id, added_date=datetime.utcnow())
            .on_conflict_do_nothing(index_elements=["user_id", "tour_id"])
            .returning(WishlistEntry.id)
        )

        try:
            result = await self.db.execute(stmt)
            inserted_id = result.scalar_one_or_none()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to save tour to wishlist",
                extra={"user_id": user_id, "tour_id": tour_id, "error": str(e)},
                exc_info=True
            )
            raise

        entry = await self.get_entry(user_id, tour_id)
        created = inserted_id is not None

        logger.info(
            "Tour saved to wishlist" if created else "Tour already in wishlist",
            extra={
                "user_id": user_id,
                "tour_id": tour_id,
                "wishlist_id": entry.id
            }
        )

        return WishlistSaveResult(entry=entry, created=created)

    async def remove_tour(self, user_id: int, tour_id: int) -> bool:
        """
        Remove a saved tour. Removing an unsaved tour is not an error.

        Returns:
            True if an entry was deleted
        """
        stmt = delete(WishlistEntry).where(
            WishlistEntry.user_id == user_id,
            WishlistEntry.tour_id == tour_id
        )

        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to remove tour from wishlist",
                extra={"user_id": user_id, "tour_id": tour_id, "error": str(e)},
                exc_info=True
            )
            raise

        removed = (result.rowcount or 0) > 0

        logger.info(
            "Tour removed from wishlist",
            extra={"user_id": user_id, "tour_id": tour_id, "removed": removed}
        )

        return removed
