"""Service layer package."""

from .account_service import AccountService
from .booking_service import BookingService
from .booking_status_service import BookingStatusService
from .payment_method_service import PaymentMethodService
from .review_service import ReviewService
from .tour_service import TourService
from .wishlist_service import WishlistService

__all__ = [
    "AccountService",
    "BookingService",
    "BookingStatusService",
    "PaymentMethodService",
    "ReviewService",
    "TourService",
    "WishlistService",
]
