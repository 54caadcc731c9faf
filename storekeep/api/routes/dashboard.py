from typing import Dict, List

from fastapi import APIRouter, Depends

from storekeep.dependencies import get_current_operator, get_reporting
from storekeep.schemas.dashboard import (
    DashboardOverview, DashboardStats, OverduePayment, RecentRental, RevenuePoint,
)
from storekeep.services.reporting_service import ReportingService

router = APIRouter(dependencies=[Depends(get_current_operator)])


@router.get("/", response_model=DashboardOverview)
def overview(reporting: ReportingService = Depends(get_reporting)):
    """Everything the dashboard landing page shows, in one call"""
    return {
        "stats": reporting.dashboard_stats(),
        "unit_status": reporting.unit_status_breakdown(),
        "revenue": reporting.monthly_revenue(),
        "recent_rentals": reporting.recent_rentals(),
        "overdue_payments": reporting.overdue_payments(),
    }


@router.get("/stats", response_model=DashboardStats)
def stats(reporting: ReportingService = Depends(get_reporting)):
    return reporting.dashboard_stats()


@router.get("/unit-status", response_model=Dict[str, int])
def unit_status(reporting: ReportingService = Depends(get_reporting)):
    return reporting.unit_status_breakdown()


@router.get("/revenue", response_model=List[RevenuePoint])
def revenue(reporting: ReportingService = Depends(get_reporting)):
    return reporting.monthly_revenue()


@router.get("/recent-rentals", response_model=List[RecentRental])
def recent_rentals(reporting: ReportingService = Depends(get_reporting)):
    return reporting.recent_rentals()


@router.get("/overdue-payments", response_model=List[OverduePayment])
def overdue_payments(reporting: ReportingService = Depends(get_reporting)):
    return reporting.overdue_payments()
