"""
Building Model - a storage facility site
"""
import uuid

from sqlalchemy import Boolean, Integer, String, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storekeep.db.base import Base, TimestampMixin


class Building(Base, TimestampMixin):
    __tablename__ = "buildings"
    __table_args__ = (
        CheckConstraint("floors >= 1", name="ck_buildings_floors_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    floors: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_climate_controlled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=True)

    units = relationship("Unit", back_populates="building")
