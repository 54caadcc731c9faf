"""
Rental Model
One customer renting one unit over a date range
"""
import uuid
from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy import Date, Float, ForeignKey, String, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storekeep.db.base import Base, TimestampMixin


class RentalStatus(str, Enum):
    """Persisted rental status; "upcoming" and "cancelled" are display-only labels"""
    ACTIVE = "active"
    COMPLETED = "completed"


class Rental(Base, TimestampMixin):
    __tablename__ = "rentals"
    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_rentals_total_amount_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    unit_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("units.id"), nullable=False, index=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=RentalStatus.ACTIVE.value, nullable=False, index=True)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)

    unit = relationship("Unit", back_populates="rentals")
    customer = relationship("Customer", back_populates="rentals")
    payments = relationship("Payment", back_populates="rental")
