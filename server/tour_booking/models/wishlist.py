"""Wishlist model definition."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .tour import Tour


class WishlistEntry(Base):
    """A tour saved by a user, independent of any booking."""

    __tablename__ = "wishlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tour_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    added_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        index=True  # Index for newest-first listing
    )

    __table_args__ = (
        UniqueConstraint("user_id", "tour_id", name="uq_wishlist_user_tour"),
    )

    tour: Mapped["Tour"] = relationship("Tour", back_populates="wishlist_entries")

    def __repr__(self) -> str:
        return (
            f"<WishlistEntry(id={self.id}, user_id={self.user_id}, "
            f"tour_id={self.tour_id}, added_date={self.added_date})>"
        )
