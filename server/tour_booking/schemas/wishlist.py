"""Wishlist-related Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class WishlistSaveResponse(CamelModel):
    """Response schema for saving a tour to the wishlist."""

    message: str
    created: bool = Field(..., description="False when the tour was already saved")
    wishlist_id: int
    added_date: datetime


class WishlistStatus(CamelModel):
    """Whether the current user has saved a tour."""

    saved: bool
    wishlist_id: Optional[int] = None
    added_date: Optional[datetime] = None


class WishlistRemoveResponse(CamelModel):
    message: str
    removed: bool
