"""Payment-method-on-file model definition."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .user import User


class PaymentAccountType(str, Enum):
    """Kinds of payout account a user can keep on file."""
    BANK = "bank"
    MOMO = "momo"


class UserPaymentMethod(Base):
    """Bank or MoMo account details stored for a user; one row per type."""

    __tablename__ = "user_payment_methods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    # Bank transfer details
    bank_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # MoMo wallet details
    momo_owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    momo_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    __table_args__ = (
        UniqueConstraint("user_id", "type", name="uq_user_payment_method_type"),
    )

    user: Mapped["User"] = relationship("User", back_populates="payment_methods")

    def __repr__(self) -> str:
        return f"<UserPaymentMethod(id={self.id}, user_id={self.user_id}, type='{self.type}')>"
