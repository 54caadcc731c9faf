import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from storekeep.core.exceptions import ConflictError, NotFoundError
from storekeep.dependencies import get_current_operator, get_reporting, get_storage
from storekeep.schemas.building import (
    BuildingCreate, BuildingResponse, BuildingStatsResponse, BuildingUpdate,
)
from storekeep.services.reporting_service import ReportingService
from storekeep.services.storage import Storage

router = APIRouter(dependencies=[Depends(get_current_operator)])
logger = logging.getLogger(__name__)


def _get_building_or_404(storage: Storage, building_id: UUID) -> dict:
    building = storage.select_one("buildings", {"id": str(building_id)})
    if not building:
        raise NotFoundError("Building not found")
    return building


@router.get("/", response_model=List[BuildingStatsResponse])
def list_buildings(
    q: Optional[str] = None,
    reporting: ReportingService = Depends(get_reporting),
):
    """All buildings with unit counts and occupancy, optionally searched by name or address"""
    buildings = reporting.building_occupancy()
    if q:
        needle = q.lower()
        buildings = [
            b for b in buildings
            if needle in b["name"].lower() or needle in b["address"].lower()
        ]
    return buildings


@router.post("/", response_model=BuildingResponse, status_code=status.HTTP_201_CREATED)
def create_building(building_in: BuildingCreate, storage: Storage = Depends(get_storage)):
    """Create a new building"""
    building = storage.insert("buildings", building_in.model_dump())
    logger.info(f"Building {building['id']} created: {building['name']}")
    return building


@router.get("/{building_id}", response_model=BuildingResponse)
def get_building(building_id: UUID, storage: Storage = Depends(get_storage)):
    return _get_building_or_404(storage, building_id)


@router.put("/{building_id}", response_model=BuildingResponse)
def update_building(
    building_id: UUID,
    building_update: BuildingUpdate,
    storage: Storage = Depends(get_storage),
):
    """Update a building"""
    _get_building_or_404(storage, building_id)
    patch = building_update.model_dump(exclude_unset=True)
    if patch:
        storage.update("buildings", {"id": str(building_id)}, patch)
    return _get_building_or_404(storage, building_id)


@router.delete("/{building_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_building(building_id: UUID, storage: Storage = Depends(get_storage)):
    """Delete a building that has no units"""
    _get_building_or_404(storage, building_id)
    if storage.select_one("units", {"building_id": str(building_id)}):
        raise ConflictError("This building still has units. Please delete them first.")
    storage.delete("buildings", {"id": str(building_id)})
    logger.info(f"Building {building_id} deleted")
    return None
