import uuid
from enum import Enum

from sqlalchemy import Boolean, Float, ForeignKey, String, Uuid, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storekeep.db.base import Base, TimestampMixin


class UnitStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"


class UnitSize(str, Enum):
    """Fixed unit dimensions in feet"""
    XS = "5x5"
    S = "5x10"
    M = "10x10"
    L = "10x15"
    XL = "10x20"
    XXL = "15x15"
    XXXL = "15x20"


class Unit(Base, TimestampMixin):
    __tablename__ = "units"
    __table_args__ = (
        UniqueConstraint("building_id", "number", name="uq_units_building_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    building_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("buildings.id"), nullable=False, index=True)

    number: Mapped[str] = mapped_column(String(50), nullable=False)
    size: Mapped[str] = mapped_column(String(10), nullable=False)
    price_per_month: Mapped[float] = mapped_column(Float, nullable=False)
    is_climate_controlled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=True)
    status: Mapped[UnitStatus] = mapped_column(
        SQLEnum(
            UnitStatus,
            name="unit_status",
            values_callable=lambda members: [m.value for m in members],
        ),
        default=UnitStatus.AVAILABLE,
        nullable=False,
        index=True,
    )

    building = relationship("Building", back_populates="units")
    rentals = relationship("Rental", back_populates="unit")
