"""Models module exporting all database models."""

from .booking import BOOKING_TRANSITIONS, Booking, BookingStatus, PaymentStatus, is_workflow_transition
from .payment import PAYMENT_ROW_PAID, Payment, PaymentMethod
from .payment_method import PaymentAccountType, UserPaymentMethod
from .review import Review
from .tour import Tour
from .user import User
from .wishlist import WishlistEntry

__all__ = [
    # Core entities
    "Tour",
    "User",

    # Booking workflow
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "BOOKING_TRANSITIONS",
    "is_workflow_transition",
    "Payment",
    "PaymentMethod",
    "PAYMENT_ROW_PAID",

    # Account features
    "Review",
    "WishlistEntry",
    "UserPaymentMethod",
    "PaymentAccountType",
]
