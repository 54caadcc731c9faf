from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from storekeep.models.unit import UnitSize, UnitStatus


class UnitBase(BaseModel):
    building_id: UUID
    number: str = Field(..., min_length=1, max_length=50)
    size: UnitSize
    price_per_month: float = Field(..., gt=0)
    is_climate_controlled: bool = False


class UnitCreate(UnitBase):
    status: UnitStatus = UnitStatus.AVAILABLE


class UnitUpdate(BaseModel):
    """Editable unit details; status changes go through the status endpoint"""
    number: Optional[str] = Field(None, min_length=1, max_length=50)
    size: Optional[UnitSize] = None
    price_per_month: Optional[float] = Field(None, gt=0)
    is_climate_controlled: Optional[bool] = None


class UnitStatusChange(BaseModel):
    status: UnitStatus


class UnitStatusChangeResponse(BaseModel):
    id: UUID
    previous_status: UnitStatus
    status: UnitStatus
    completed_rentals: List[UUID] = []


class UnitResponse(UnitBase):
    id: UUID
    status: UnitStatus
    is_climate_controlled: Optional[bool] = False
    building_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
