import asyncio
from datetime import date, timedelta

import pytest

from conftest import TODAY
from storekeep.services.expiry_scheduler import run_expiry_check, start_expiry_scheduler
from storekeep.services.reporting_service import ReportingService, month_bounds, revenue_trend


@pytest.fixture
def reporting(storage):
    return ReportingService(storage)


def _pay(storage, rental_id, amount, paid_on, is_late=False):
    return storage.add("payments", rental_id=rental_id, amount=amount, method="cash", date=paid_on, is_late=is_late)


# ==================== revenue trend ====================

@pytest.mark.parametrize("series, expected", [
    ([], {"value": "0%", "direction": "up"}),
    ([{"revenue": 100}], {"value": "0%", "direction": "up"}),
    ([{"revenue": 0}, {"revenue": 50}], {"value": "100%", "direction": "up"}),
    ([{"revenue": 200}, {"revenue": 250}], {"value": "25%", "direction": "up"}),
    ([{"revenue": 200}, {"revenue": 150}], {"value": "25%", "direction": "down"}),
])
def test_revenue_trend(series, expected):
    assert revenue_trend(series) == expected


def test_month_bounds_leap_february():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


# ==================== revenue ====================

def test_monthly_revenue_six_months_oldest_first(storage, reporting):
    _pay(storage, "r1", 100.0, date(2024, 6, 2))
    _pay(storage, "r1", 50.0, date(2024, 6, 30))
    _pay(storage, "r1", 75.0, date(2024, 1, 31))
    _pay(storage, "r1", 999.0, date(2023, 12, 31))

    series = reporting.monthly_revenue(TODAY)

    assert [p["name"] for p in series] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
    assert series[0]["revenue"] == 75.0
    assert series[-1]["revenue"] == 150.0
    assert sum(p["revenue"] for p in series) == 225.0


def test_monthly_revenue_across_year_boundary(reporting):
    series = reporting.monthly_revenue(date(2024, 2, 10))
    assert [(p["year"], p["month"]) for p in series] == [
        (2023, 9), (2023, 10), (2023, 11), (2023, 12), (2024, 1), (2024, 2),
    ]


def test_dashboard_stats(storage, reporting, facility):
    building_id = facility["building"]["id"]
    for number, status in [("B-1", "rented"), ("B-2", "reserved"), ("B-3", "maintenance")]:
        storage.add("units", building_id=building_id, number=number, size="5x5", price_per_month=40.0, status=status)
    _pay(storage, "r1", 200.0, date(2024, 5, 3))
    _pay(storage, "r1", 250.4, date(2024, 6, 3))

    stats = reporting.dashboard_stats(TODAY)

    assert stats["total_units"] == 4
    assert stats["occupied_units"] == 2
    assert stats["occupancy_rate"] == 50
    assert stats["total_customers"] == 1
    assert stats["monthly_revenue"] == 250
    assert stats["revenue_trend"] == {"value": "25%", "direction": "up"}


def test_dashboard_stats_empty(reporting):
    stats = reporting.dashboard_stats(TODAY)
    assert stats["occupancy_rate"] == 0
    assert stats["monthly_revenue"] == 0


# ==================== occupancy ====================

def test_unit_status_breakdown_lists_every_status(storage, reporting, facility):
    assert reporting.unit_status_breakdown() == {"available": 1, "rented": 0, "reserved": 0, "maintenance": 0}


def test_building_occupancy(storage, reporting, facility):
    building_id = facility["building"]["id"]
    storage.add("units", building_id=building_id, number="B-1", size="5x5", price_per_month=40.0, status="rented")
    storage.add("units", building_id=building_id, number="B-2", size="5x5", price_per_month=40.0, status="maintenance")
    storage.add("buildings", name="Empty Annex", address="2 Dock Rd", floors=1)

    rows = {b["name"]: b for b in reporting.building_occupancy()}

    assert rows["North Depot"]["total_units"] == 3
    assert rows["North Depot"]["available_units"] == 1
    assert rows["North Depot"]["occupancy_rate"] == 67
    assert rows["Empty Annex"]["occupancy_rate"] == 0


def test_customer_active_rentals(storage, reporting, facility):
    customer_id = facility["customer"]["id"]
    for status in ("active", "active", "completed"):
        storage.add("rentals", customer_id=customer_id, unit_id="u", status=status,
                    start_date=date(2024, 1, 1), total_amount=1.0)
    assert reporting.customer_active_rentals() == {customer_id: 2}


# ==================== activity ====================

def test_recent_rentals_newest_four(storage, reporting, facility):
    for day in range(1, 7):
        storage.add("rentals", customer_id=facility["customer"]["id"], unit_id=facility["unit"]["id"],
                    status="completed", start_date=date(2024, 1, day), end_date=date(2024, 1, 28),
                    total_amount=10.0)

    recent = reporting.recent_rentals()

    assert [r["start_date"].day for r in recent] == [6, 5, 4, 3]
    assert recent[0]["customer_name"] == "Ada Park"
    assert recent[0]["building_name"] == "North Depot"


def test_recent_rentals_missing_references(storage, reporting):
    storage.add("rentals", customer_id="gone", unit_id="gone", status="active",
                start_date=date(2024, 1, 1), total_amount=10.0)

    recent = reporting.recent_rentals()

    assert recent[0]["customer_name"] == "Unknown"
    assert recent[0]["building_name"] == "Unknown Building"


def test_overdue_payments_oldest_first(storage, reporting, facility):
    rental = storage.add("rentals", customer_id=facility["customer"]["id"], unit_id=facility["unit"]["id"],
                         status="active", start_date=date(2024, 1, 1), total_amount=10.0)
    _pay(storage, rental["id"], 10.0, date(2024, 6, 1), is_late=True)
    _pay(storage, rental["id"], 10.0, TODAY, is_late=True)
    _pay(storage, rental["id"], 10.0, date(2024, 5, 1), is_late=False)

    overdue = reporting.overdue_payments(TODAY)

    assert [p["days_overdue"] for p in overdue] == [14, 1]
    assert overdue[0]["unit_number"] == "A-101"


# ==================== expiry scheduler ====================

def _expired_rental(storage, facility, end_date):
    storage.tables["units"][facility["unit"]["id"]]["status"] = "rented"
    return storage.add("rentals", customer_id=facility["customer"]["id"], unit_id=facility["unit"]["id"],
                       status="active", start_date=end_date - timedelta(days=30), end_date=end_date,
                       total_amount=10.0)


def test_run_expiry_check(storage, facility):
    rental = _expired_rental(storage, facility, TODAY - timedelta(days=1))

    assert run_expiry_check(storage, TODAY) == 1
    assert storage.row("rentals", rental["id"])["status"] == "completed"
    assert storage.row("units", facility["unit"]["id"])["status"] == "available"


def test_expiry_scheduler_runs_in_background(storage, storage_factory, facility):
    rental = _expired_rental(storage, facility, date.today() - timedelta(days=2))

    async def scenario():
        task = start_expiry_scheduler(storage_factory, 0.01)
        await asyncio.sleep(0.2)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert storage.row("rentals", rental["id"])["status"] == "completed"


def test_run_expiry_check_defaults_to_today(storage, facility):
    rental = _expired_rental(storage, facility, date.today() - timedelta(days=1))

    assert run_expiry_check(storage) == 1
    assert storage.row("rentals", rental["id"])["end_date"] == date.today()
