"""
Dashboard Reporting

Aggregates shown on the dashboard and list pages:
  • unit status breakdown and headline stats (units, occupancy, customers, revenue)
  • trailing six-month revenue series and month-over-month trend
  • most recent rentals and oldest late payments
  • per-building occupancy and per-customer active rental counts

All figures are computed from plain rows fetched through Storage.
"""
import calendar
import logging
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

from storekeep.models.rental import RentalStatus
from storekeep.models.unit import UnitStatus
from storekeep.services.rental_ledger import as_date
from storekeep.services.storage import Row, Storage

logger = logging.getLogger(__name__)

OCCUPIED_STATUSES = (UnitStatus.RENTED.value, UnitStatus.RESERVED.value)
REVENUE_MONTHS = 6


def _shift_month(year: int, month: int, offset: int):
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_bounds(year: int, month: int):
    """First and last day of a calendar month"""
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def revenue_trend(series: List[Dict[str, Any]]) -> Dict[str, str]:
    """
    Month-over-month change of the last two points of a revenue series.

    A zero previous month counts as 100% up.
    """
    if len(series) < 2:
        return {"value": "0%", "direction": "up"}
    current = series[-1]["revenue"]
    previous = series[-2]["revenue"]
    if previous == 0:
        return {"value": "100%", "direction": "up"}
    change = (current - previous) / previous * 100
    return {
        "value": f"{abs(round(change))}%",
        "direction": "up" if change >= 0 else "down",
    }


class ReportingService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def _index(self, table: str, ids) -> Dict[str, Row]:
        ids = sorted({i for i in ids if i})
        if not ids:
            return {}
        return {row["id"]: row for row in self.storage.select(table, {"id": ids})}

    # ── units ────────────────────────────────────────────────────────────────

    def unit_status_breakdown(self) -> Dict[str, int]:
        counts = Counter(u["status"] for u in self.storage.select("units"))
        return {status.value: counts.get(status.value, 0) for status in UnitStatus}

    def building_occupancy(self) -> List[Dict[str, Any]]:
        units = self.storage.select("units")
        result = []
        for building in self.storage.select("buildings", order_by="name"):
            own = [u for u in units if u["building_id"] == building["id"]]
            total = len(own)
            available = sum(1 for u in own if u["status"] == UnitStatus.AVAILABLE.value)
            result.append({
                **building,
                "total_units": total,
                "available_units": available,
                "occupancy_rate": round((total - available) / total * 100) if total else 0,
            })
        return result

    # ── customers ────────────────────────────────────────────────────────────

    def customer_active_rentals(self) -> Dict[str, int]:
        active = self.storage.select("rentals", {"status": RentalStatus.ACTIVE.value})
        return dict(Counter(r["customer_id"] for r in active))

    # ── revenue ──────────────────────────────────────────────────────────────

    def revenue_between(self, start: date, end: date) -> float:
        total = 0.0
        for payment in self.storage.select("payments"):
            paid_on = as_date(payment["date"])
            if paid_on and start <= paid_on <= end:
                total += float(payment["amount"])
        return total

    def monthly_revenue(self, today: Optional[date] = None, months: int = REVENUE_MONTHS) -> List[Dict[str, Any]]:
        """Revenue per calendar month, oldest first, ending with today's month"""
        today = today or date.today()
        payments = [
            (as_date(p["date"]), float(p["amount"]))
            for p in self.storage.select("payments")
        ]
        series = []
        for offset in range(months - 1, -1, -1):
            year, month = _shift_month(today.year, today.month, -offset)
            first, last = month_bounds(year, month)
            revenue = sum(amount for paid_on, amount in payments if paid_on and first <= paid_on <= last)
            series.append({
                "name": calendar.month_abbr[month],
                "year": year,
                "month": month,
                "revenue": round(revenue, 2),
            })
        return series

    # ── headline stats ───────────────────────────────────────────────────────

    def dashboard_stats(self, today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        units = self.storage.select("units")
        total_units = len(units)
        occupied = sum(1 for u in units if u["status"] in OCCUPIED_STATUSES)
        first, last = month_bounds(today.year, today.month)
        series = self.monthly_revenue(today)
        return {
            "total_units": total_units,
            "occupied_units": occupied,
            "occupancy_rate": round(occupied / total_units * 100) if total_units else 0,
            "total_customers": self.storage.count("customers"),
            "monthly_revenue": round(self.revenue_between(first, last)),
            "revenue_trend": revenue_trend(series),
        }

    # ── activity ─────────────────────────────────────────────────────────────

    def recent_rentals(self, limit: int = 4) -> List[Dict[str, Any]]:
        rentals = self.storage.select("rentals", order_by="start_date", descending=True, limit=limit)
        customers = self._index("customers", [r["customer_id"] for r in rentals])
        units = self._index("units", [r["unit_id"] for r in rentals])
        buildings = self._index("buildings", [u["building_id"] for u in units.values()])

        result = []
        for rental in rentals:
            customer = customers.get(rental["customer_id"], {})
            unit = units.get(rental["unit_id"], {})
            building = buildings.get(unit.get("building_id"), {})
            result.append({
                "id": rental["id"],
                "status": rental["status"],
                "start_date": as_date(rental["start_date"]),
                "end_date": as_date(rental.get("end_date")),
                "total_amount": rental["total_amount"],
                "customer_name": customer.get("name", "Unknown"),
                "customer_email": customer.get("email", "Unknown"),
                "unit_number": unit.get("number", "Unknown"),
                "unit_size": unit.get("size", "Unknown"),
                "building_name": building.get("name", "Unknown Building"),
            })
        return result

    def overdue_payments(self, today: Optional[date] = None, limit: int = 3) -> List[Dict[str, Any]]:
        today = today or date.today()
        payments = self.storage.select("payments", {"is_late": True}, order_by="date", limit=limit)
        rentals = self._index("rentals", [p["rental_id"] for p in payments])
        customers = self._index("customers", [r["customer_id"] for r in rentals.values()])
        units = self._index("units", [r["unit_id"] for r in rentals.values()])

        result = []
        for payment in payments:
            rental = rentals.get(payment["rental_id"], {})
            due = as_date(payment["date"])
            days_overdue = (today - due).days if due else 0
            result.append({
                "id": payment["id"],
                "rental_id": payment["rental_id"],
                "customer_name": customers.get(rental.get("customer_id"), {}).get("name", "Unknown"),
                "unit_number": units.get(rental.get("unit_id"), {}).get("number", "Unknown"),
                "due_date": due,
                "amount": payment["amount"],
                "days_overdue": max(days_overdue, 1),
            })
        return result
