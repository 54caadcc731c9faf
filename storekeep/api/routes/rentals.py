"""
Rental Routes

  GET    /api/rentals/              – list (expired active rentals are completed first)
  POST   /api/rentals/              – create on an available unit
  POST   /api/rentals/quote         – pro-rated amount for a unit and date range
  POST   /api/rentals/reconcile     – complete every expired active rental now
  GET    /api/rentals/{id}          – rental detail
  POST   /api/rentals/{id}/end      – complete a rental and free its unit
  DELETE /api/rentals/{id}          – delete a rental and its payments
"""
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from storekeep.dependencies import get_current_operator, get_ledger, get_storage
from storekeep.models.rental import RentalStatus
from storekeep.schemas.rental import (
    ReconcileResponse, RentalCreate, RentalEnd, RentalListResponse,
    RentalQuoteRequest, RentalQuoteResponse, RentalResponse,
)
from storekeep.services.rental_ledger import RentalLedger, as_date
from storekeep.services.storage import Storage

router = APIRouter(dependencies=[Depends(get_current_operator)])
logger = logging.getLogger(__name__)


def display_status(rental: dict, today: date) -> str:
    """Active rentals that have not started yet are shown as upcoming"""
    if rental["status"] == RentalStatus.ACTIVE.value and as_date(rental["start_date"]) > today:
        return "upcoming"
    return rental["status"]


def _enrich(storage: Storage, rentals: List[dict], today: date) -> List[dict]:
    customer_ids = sorted({r["customer_id"] for r in rentals})
    unit_ids = sorted({r["unit_id"] for r in rentals})
    customers = {c["id"]: c for c in storage.select("customers", {"id": customer_ids})} if customer_ids else {}
    units = {u["id"]: u for u in storage.select("units", {"id": unit_ids})} if unit_ids else {}
    building_ids = sorted({u["building_id"] for u in units.values()})
    buildings = {b["id"]: b for b in storage.select("buildings", {"id": building_ids})} if building_ids else {}

    enriched = []
    for rental in rentals:
        unit = units.get(rental["unit_id"], {})
        enriched.append({
            **rental,
            "display_status": display_status(rental, today),
            "customer_name": customers.get(rental["customer_id"], {}).get("name"),
            "unit_number": unit.get("number"),
            "building_name": buildings.get(unit.get("building_id"), {}).get("name"),
        })
    return enriched


@router.get("/", response_model=RentalListResponse)
def list_rentals(
    status_filter: Optional[str] = Query(None, alias="status"),
    building: Optional[str] = None,
    q: Optional[str] = None,
    storage: Storage = Depends(get_storage),
    ledger: RentalLedger = Depends(get_ledger),
):
    """
    All rentals, newest first.

    Filters: status (active, upcoming, completed), building name, and
    a free-text search over customer name and unit number.
    """
    today = ledger.today()
    rentals, auto_completed = ledger.list_rentals(today)
    rentals = _enrich(storage, rentals, today)

    if status_filter:
        rentals = [r for r in rentals if r["display_status"] == status_filter.lower()]
    if building:
        rentals = [r for r in rentals if r["building_name"] == building]
    if q:
        needle = q.lower()
        rentals = [
            r for r in rentals
            if needle in (r["customer_name"] or "").lower() or needle in (r["unit_number"] or "").lower()
        ]
    return {"rentals": rentals, "auto_completed": auto_completed}


@router.post("/", response_model=RentalResponse, status_code=status.HTTP_201_CREATED)
def create_rental(
    rental_in: RentalCreate,
    storage: Storage = Depends(get_storage),
    ledger: RentalLedger = Depends(get_ledger),
):
    """Create a rental on an available unit and mark the unit rented"""
    rental = ledger.create_rental(
        str(rental_in.unit_id),
        str(rental_in.customer_id),
        rental_in.start_date,
        rental_in.end_date,
        rental_in.total_amount,
    )
    return _enrich(storage, [rental], ledger.today())[0]


@router.post("/quote", response_model=RentalQuoteResponse)
def quote_rental(quote_in: RentalQuoteRequest, ledger: RentalLedger = Depends(get_ledger)):
    """Pro-rated total for renting a unit between two dates"""
    return ledger.quote(str(quote_in.unit_id), quote_in.start_date, quote_in.end_date)


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile_rentals(storage: Storage = Depends(get_storage), ledger: RentalLedger = Depends(get_ledger)):
    """Complete every active rental whose end date has passed"""
    active = storage.select("rentals", {"status": RentalStatus.ACTIVE.value})
    return {"completed": ledger.reconcile_expired_rentals(active, ledger.today())}


@router.get("/{rental_id}", response_model=RentalResponse)
def get_rental(
    rental_id: UUID,
    storage: Storage = Depends(get_storage),
    ledger: RentalLedger = Depends(get_ledger),
):
    return _enrich(storage, [ledger.get_rental(str(rental_id))], ledger.today())[0]


@router.post("/{rental_id}/end", response_model=RentalResponse)
def end_rental(
    rental_id: UUID,
    body: Optional[RentalEnd] = None,
    storage: Storage = Depends(get_storage),
    ledger: RentalLedger = Depends(get_ledger),
):
    """Mark a rental completed (end date defaults to today) and free its unit"""
    rental = ledger.get_rental(str(rental_id))
    ledger.complete_rental(rental["id"], rental["unit_id"], body.end_date if body else None)
    return get_rental(rental_id, storage, ledger)


@router.delete("/{rental_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_rental(rental_id: UUID, ledger: RentalLedger = Depends(get_ledger)):
    """Delete a rental with its payments; an active rental's unit becomes available"""
    rental = ledger.get_rental(str(rental_id))
    ledger.remove_rental(rental["id"], rental["unit_id"], rental["status"])
    return None
