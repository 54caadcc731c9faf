import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from storekeep.dependencies import get_current_operator, get_ledger, get_storage
from storekeep.models.payment import PaymentMethod
from storekeep.schemas.payment import PaymentCreate, PaymentResponse
from storekeep.services.rental_ledger import RentalLedger
from storekeep.services.storage import Storage

router = APIRouter(dependencies=[Depends(get_current_operator)])
logger = logging.getLogger(__name__)


def _with_rental_details(storage: Storage, payments: List[dict]) -> List[dict]:
    rental_ids = sorted({p["rental_id"] for p in payments})
    rentals = {r["id"]: r for r in storage.select("rentals", {"id": rental_ids})} if rental_ids else {}
    customer_ids = sorted({r["customer_id"] for r in rentals.values()})
    unit_ids = sorted({r["unit_id"] for r in rentals.values()})
    customers = {c["id"]: c for c in storage.select("customers", {"id": customer_ids})} if customer_ids else {}
    units = {u["id"]: u for u in storage.select("units", {"id": unit_ids})} if unit_ids else {}

    result = []
    for payment in payments:
        rental = rentals.get(payment["rental_id"], {})
        result.append({
            **payment,
            "status": "overdue" if payment.get("is_late") else "completed",
            "customer_name": customers.get(rental.get("customer_id"), {}).get("name", "Unknown Customer"),
            "unit_number": units.get(rental.get("unit_id"), {}).get("number", "Unknown Unit"),
        })
    return result


@router.get("/", response_model=List[PaymentResponse])
def list_payments(
    status_filter: Optional[str] = Query(None, alias="status", description="completed or overdue"),
    method: Optional[PaymentMethod] = None,
    rental_id: Optional[UUID] = None,
    q: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    """All payments, newest first, with customer and unit"""
    filters = {}
    if method:
        filters["method"] = method.value
    if rental_id:
        filters["rental_id"] = str(rental_id)

    payments = _with_rental_details(
        storage, storage.select("payments", filters, order_by="date", descending=True)
    )
    if status_filter:
        payments = [p for p in payments if p["status"] == status_filter.lower()]
    if q:
        needle = q.lower()
        payments = [
            p for p in payments
            if needle in p["customer_name"].lower() or needle in p["unit_number"].lower()
        ]
    return payments


@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def record_payment(
    payment_in: PaymentCreate,
    storage: Storage = Depends(get_storage),
    ledger: RentalLedger = Depends(get_ledger),
):
    """Record a payment against a rental"""
    payment = ledger.record_payment(
        str(payment_in.rental_id),
        payment_in.amount,
        payment_in.method.value,
        payment_in.date,
        payment_in.is_late,
    )
    return _with_rental_details(storage, [payment])[0]
