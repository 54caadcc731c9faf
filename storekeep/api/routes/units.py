import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from storekeep.core.exceptions import ConflictError, NotFoundError
from storekeep.dependencies import get_current_operator, get_ledger, get_storage
from storekeep.models.unit import UnitSize, UnitStatus
from storekeep.schemas.unit import (
    UnitCreate, UnitResponse, UnitStatusChange, UnitStatusChangeResponse, UnitUpdate,
)
from storekeep.services.rental_ledger import RentalLedger
from storekeep.services.storage import Storage

router = APIRouter(dependencies=[Depends(get_current_operator)])
logger = logging.getLogger(__name__)


def _with_building_names(storage: Storage, units: List[dict]) -> List[dict]:
    building_ids = sorted({u["building_id"] for u in units})
    names = {}
    if building_ids:
        names = {b["id"]: b["name"] for b in storage.select("buildings", {"id": building_ids})}
    return [{**u, "building_name": names.get(u["building_id"])} for u in units]


def _ensure_number_free(storage: Storage, building_id: str, number: str, unit_id: Optional[str] = None):
    for other in storage.select("units", {"building_id": building_id, "number": number}):
        if other["id"] != unit_id:
            raise ConflictError(f"Unit {number} already exists in this building")


def _get_unit_or_404(storage: Storage, unit_id: UUID) -> dict:
    unit = storage.select_one("units", {"id": str(unit_id)})
    if not unit:
        raise NotFoundError("Unit not found")
    return unit


@router.get("/", response_model=List[UnitResponse])
def list_units(
    building_id: Optional[UUID] = None,
    status_filter: Optional[UnitStatus] = Query(None, alias="status"),
    size: Optional[UnitSize] = None,
    q: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    """List units, filtered by building, status, size and unit/building name search"""
    filters = {}
    if building_id:
        filters["building_id"] = str(building_id)
    if status_filter:
        filters["status"] = status_filter.value
    if size:
        filters["size"] = size.value

    units = _with_building_names(storage, storage.select("units", filters, order_by="number"))
    if q:
        needle = q.lower()
        units = [
            u for u in units
            if needle in u["number"].lower() or needle in (u["building_name"] or "").lower()
        ]
    return units


@router.post("/", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
def create_unit(unit_in: UnitCreate, storage: Storage = Depends(get_storage)):
    """Add a unit to a building"""
    building_id = str(unit_in.building_id)
    if not storage.select_one("buildings", {"id": building_id}):
        raise NotFoundError("Building not found")
    _ensure_number_free(storage, building_id, unit_in.number)

    unit = storage.insert("units", unit_in.model_dump(mode="json"))
    logger.info(f"Unit {unit['number']} created in building {building_id}")
    return _with_building_names(storage, [unit])[0]


@router.get("/{unit_id}", response_model=UnitResponse)
def get_unit(unit_id: UUID, storage: Storage = Depends(get_storage)):
    return _with_building_names(storage, [_get_unit_or_404(storage, unit_id)])[0]


@router.put("/{unit_id}", response_model=UnitResponse)
def update_unit(unit_id: UUID, unit_update: UnitUpdate, storage: Storage = Depends(get_storage)):
    """Update unit details (number, size, price, climate control)"""
    unit = _get_unit_or_404(storage, unit_id)
    patch = unit_update.model_dump(mode="json", exclude_unset=True)
    if "number" in patch:
        _ensure_number_free(storage, unit["building_id"], patch["number"], unit["id"])
    if patch:
        storage.update("units", {"id": str(unit_id)}, patch)
    return get_unit(unit_id, storage)


@router.patch("/{unit_id}/status", response_model=UnitStatusChangeResponse)
def change_unit_status(
    unit_id: UUID,
    change: UnitStatusChange,
    storage: Storage = Depends(get_storage),
    ledger: RentalLedger = Depends(get_ledger),
):
    """Override a unit's status; leaving "rented" completes its active rental"""
    unit = _get_unit_or_404(storage, unit_id)
    completed = ledger.change_unit_status(unit["id"], unit["status"], change.status.value)
    return {
        "id": unit["id"],
        "previous_status": unit["status"],
        "status": change.status,
        "completed_rentals": completed,
    }


@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_unit(unit_id: UUID, ledger: RentalLedger = Depends(get_ledger)):
    """Delete a unit that has no rentals on record"""
    ledger.delete_unit(str(unit_id))
    return None
