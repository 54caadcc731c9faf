from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel


class RevenueTrend(BaseModel):
    value: str
    direction: str


class DashboardStats(BaseModel):
    total_units: int
    occupied_units: int
    occupancy_rate: int
    total_customers: int
    monthly_revenue: int
    revenue_trend: RevenueTrend


class RevenuePoint(BaseModel):
    name: str
    year: int
    month: int
    revenue: float


class RecentRental(BaseModel):
    id: UUID
    status: str
    start_date: date
    end_date: Optional[date] = None
    total_amount: float
    customer_name: str
    customer_email: str
    unit_number: str
    unit_size: str
    building_name: str


class OverduePayment(BaseModel):
    id: UUID
    rental_id: UUID
    customer_name: str
    unit_number: str
    due_date: date
    amount: float
    days_overdue: int


class DashboardOverview(BaseModel):
    stats: DashboardStats
    unit_status: Dict[str, int]
    revenue: List[RevenuePoint]
    recent_rentals: List[RecentRental]
    overdue_payments: List[OverduePayment]
