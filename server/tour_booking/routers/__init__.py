"""FastAPI routers package."""

from .account import router as account_router
from .admin import router as admin_router
from .booking import router as booking_router
from .metrics import router as metrics_router
from .review import router as review_router
from .wishlist import router as wishlist_router

__all__ = [
    "account_router",
    "admin_router",
    "booking_router",
    "metrics_router",
    "review_router",
    "wishlist_router",
]
