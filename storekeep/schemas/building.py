from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional


class BuildingBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    floors: int = Field(1, ge=1)
    is_climate_controlled: bool = False


class BuildingCreate(BuildingBase):
    pass


class BuildingUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    floors: Optional[int] = Field(None, ge=1)
    is_climate_controlled: Optional[bool] = None


class BuildingResponse(BuildingBase):
    id: UUID
    is_climate_controlled: Optional[bool] = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BuildingStatsResponse(BuildingResponse):
    total_units: int = 0
    available_units: int = 0
    occupancy_rate: int = 0
