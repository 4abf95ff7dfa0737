"""Pydantic schemas for request/response validation."""

from .account import *  # noqa: F403
from .booking import *  # noqa: F403
from .common import *  # noqa: F403
from .payment_method import *  # noqa: F403
from .review import *  # noqa: F403
from .wishlist import *  # noqa: F403
