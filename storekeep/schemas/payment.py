"""
Payment Request/Response Schemas
"""
from datetime import date as date_type, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from storekeep.models.payment import PaymentMethod


class PaymentCreate(BaseModel):
    rental_id: UUID
    amount: float = Field(..., gt=0, description="Payment amount")
    method: PaymentMethod = PaymentMethod.CREDIT_CARD
    date: Optional[date_type] = Field(None, description="Defaults to today")
    is_late: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "rental_id": "550e8400-e29b-41d4-a716-446655440000",
                "amount": 120.0,
                "method": "credit_card",
                "date": "2024-03-01",
            }
        }


class PaymentResponse(BaseModel):
    id: UUID
    rental_id: UUID
    amount: float
    date: date_type
    method: PaymentMethod
    is_late: Optional[bool] = False
    status: str = "completed"
    customer_name: Optional[str] = None
    unit_number: Optional[str] = None
    created_at: Optional[datetime] = None
