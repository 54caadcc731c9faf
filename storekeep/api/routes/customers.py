import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from storekeep.core.exceptions import ConflictError, NotFoundError
from storekeep.dependencies import get_current_operator, get_reporting, get_storage
from storekeep.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from storekeep.services.reporting_service import ReportingService
from storekeep.services.storage import Storage

router = APIRouter(dependencies=[Depends(get_current_operator)])
logger = logging.getLogger(__name__)


def _get_customer_or_404(storage: Storage, customer_id: UUID) -> dict:
    customer = storage.select_one("customers", {"id": str(customer_id)})
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


@router.get("/", response_model=List[CustomerResponse])
def list_customers(
    q: Optional[str] = None,
    storage: Storage = Depends(get_storage),
    reporting: ReportingService = Depends(get_reporting),
):
    """All customers with their number of active rentals"""
    active = reporting.customer_active_rentals()
    customers = storage.select("customers", order_by="name")
    if q:
        needle = q.lower()
        customers = [
            c for c in customers
            if needle in c["name"].lower() or needle in c["email"].lower()
        ]
    return [{**c, "active_rentals": active.get(c["id"], 0)} for c in customers]


@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(customer_in: CustomerCreate, storage: Storage = Depends(get_storage)):
    customer = storage.insert("customers", customer_in.model_dump())
    logger.info(f"Customer {customer['id']} created")
    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: UUID, storage: Storage = Depends(get_storage)):
    customer = _get_customer_or_404(storage, customer_id)
    active = storage.select("rentals", {"customer_id": customer["id"], "status": "active"})
    return {**customer, "active_rentals": len(active)}


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: UUID,
    customer_update: CustomerUpdate,
    storage: Storage = Depends(get_storage),
):
    _get_customer_or_404(storage, customer_id)
    patch = customer_update.model_dump(exclude_unset=True)
    if patch:
        storage.update("customers", {"id": str(customer_id)}, patch)
    return get_customer(customer_id, storage)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: UUID, storage: Storage = Depends(get_storage)):
    """Delete a customer with no rental history"""
    _get_customer_or_404(storage, customer_id)
    if storage.select_one("rentals", {"customer_id": str(customer_id)}):
        raise ConflictError("This customer has rentals on record and cannot be deleted.")
    storage.delete("customers", {"id": str(customer_id)})
    logger.info(f"Customer {customer_id} deleted")
    return None
