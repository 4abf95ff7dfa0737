"""Review-related Pydantic schemas."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from .common import CamelModel

MIN_RATING = 1
MAX_RATING = 5


def coerce_rating(value: Any) -> int:
    """
    Round a numeric rating half-up and clamp it into 1..5.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValueError("Rating must be a number")

    if isinstance(value, str):
        value = value.strip()

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError("Rating must be a number")

    if not math.isfinite(number):
        raise ValueError("Rating must be a number")

    rounded = int(Decimal(str(number)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return min(MAX_RATING, max(MIN_RATING, rounded))


class SubmitReviewRequest(CamelModel):
    """Request schema for rating a tour."""

    rating: int = Field(..., description="Star rating; rounded and clamped into 1..5")
    comment: Optional[str] = Field(None, description="Optional free-text comment")

    @field_validator("rating", mode="before")
    @classmethod
    def validate_rating(cls, v: Any) -> int:
        return coerce_rating(v)

    @field_validator("comment", mode="before")
    @classmethod
    def strip_comment(cls, v: Any) -> Optional[str]:
        if not isinstance(v, str):
            return None
        return v.strip()


class ReviewSummary(CamelModel):
    """Rating aggregate of a tour plus the caller's own rating."""

    average_rating: float
    review_count: int
    user_rating: Optional[int] = None
