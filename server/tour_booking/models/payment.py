"""Payment model definition."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking


class PaymentMethod(str, Enum):
    """Payment path chosen by the customer at booking time."""
    BANK = "bank"
    MOMO = "momo"
    CONSULTATION = "consultation"

    @property
    def label(self) -> str | None:
        """Label stored on payment rows; consultation never creates one."""
        return PAYMENT_METHOD_LABELS.get(self)


PAYMENT_METHOD_LABELS = {
    PaymentMethod.BANK: "Bank Transfer",
    PaymentMethod.MOMO: "MoMo",
}

# Status written on payment rows once the money is confirmed
PAYMENT_ROW_PAID = "Paid"


class Payment(Base):
    """A payment recorded against a booking."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    booking_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)

    payment_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow
    )
    confirmation_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payments")

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, booking_id={self.booking_id}, amount={self.amount}, "
            f"method='{self.method}', status='{self.status}')>"
        )
