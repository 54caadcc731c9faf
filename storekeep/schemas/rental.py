"""
Rental Pydantic Schemas - API Request/Response Models
"""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from storekeep.models.rental import RentalStatus


class RentalCreate(BaseModel):
    unit_id: UUID
    customer_id: UUID
    start_date: date = Field(default_factory=date.today)
    end_date: Optional[date] = None
    total_amount: Optional[float] = Field(None, ge=0, description="Defaults to the pro-rated unit price")

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RentalQuoteRequest(BaseModel):
    unit_id: UUID
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RentalQuoteResponse(BaseModel):
    unit_id: UUID
    monthly_price: float
    start_date: date
    end_date: date
    total_amount: float


class RentalEnd(BaseModel):
    end_date: Optional[date] = None


class RentalResponse(BaseModel):
    id: UUID
    unit_id: UUID
    customer_id: UUID
    start_date: date
    end_date: Optional[date] = None
    status: RentalStatus
    display_status: str = Field(..., description="active, upcoming or completed")
    total_amount: float
    customer_name: Optional[str] = None
    unit_number: Optional[str] = None
    building_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RentalListResponse(BaseModel):
    rentals: List[RentalResponse]
    auto_completed: int = Field(0, description="Expired rentals completed while loading the list")


class ReconcileResponse(BaseModel):
    success: bool = True
    completed: int
