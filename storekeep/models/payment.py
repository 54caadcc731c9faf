"""
Payment Model
Payments recorded against a rental
"""
import uuid
import datetime as dt
from enum import Enum

from sqlalchemy import Boolean, Date, Float, ForeignKey, String, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storekeep.db.base import Base, CreatedAtMixin


class PaymentMethod(str, Enum):
    """Payment method enum"""
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"


class Payment(Base, CreatedAtMixin):
    """Payment received for a rental"""
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    rental_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("rentals.id"), nullable=False, index=True)

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, default=dt.date.today, nullable=False)
    method: Mapped[str] = mapped_column(String(20), nullable=False)
    is_late: Mapped[bool] = mapped_column(Boolean, default=False, nullable=True)

    rental = relationship("Rental", back_populates="payments")
