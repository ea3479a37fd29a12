"""Store location endpoints."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.inventory import run_transfer
from app.core.deps import get_current_user, repository, require_capability, require_role
from app.models.location import Location
from app.models.role import Capability, Role
from app.repositories.inventory import InventoryRepository
from app.repositories.locations import LocationRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import MessageResponse
from app.schemas.location import (
    LocationCreate,
    LocationResponse,
    LocationTransferRequest,
    LocationUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])

location_managers = require_capability(Capability.MANAGE_LOCATIONS)


async def _get_or_404(locations: LocationRepository, location_id: int) -> Location:
    location = await locations.get(location_id)
    if location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return location


@router.get("")
async def list_locations(
    current_user: CurrentUser = Depends(get_current_user),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    return {"locations": await locations.list_active()}


@router.get("/{location_id}", response_model=LocationResponse)
async def get_location(
    location_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    return LocationResponse.model_validate(await _get_or_404(locations, location_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_location(
    body: LocationCreate,
    current_user: CurrentUser = Depends(location_managers),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    location = await locations.create(**body.model_dump())
    logger.info("Location %s created by %s", location.name, current_user.username)
    return {"message": "Location created successfully", "location": LocationResponse.model_validate(location)}


@router.put("/{location_id}")
async def update_location(
    location_id: int,
    body: LocationUpdate,
    current_user: CurrentUser = Depends(location_managers),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    location = await _get_or_404(locations, location_id)
    location = await locations.update(location, changes)
    return {"message": "Location updated successfully", "location": LocationResponse.model_validate(location)}


@router.delete("/{location_id}", response_model=MessageResponse)
async def delete_location(
    location_id: int,
    current_user: CurrentUser = Depends(require_role(Role.ADMIN)),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    """Soft delete: the location is marked inactive."""
    location = await _get_or_404(locations, location_id)
    await locations.deactivate(location)
    logger.info("Location %s deactivated by %s", location.name, current_user.username)
    return MessageResponse(message="Location deleted successfully")


@router.get("/{location_id}/inventory")
async def location_inventory(
    location_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    location = await _get_or_404(locations, location_id)
    return {"location": location.name, "inventory": await locations.inventory(location_id)}


@router.post("/{from_location_id}/transfer/{to_location_id}")
async def transfer_between_locations(
    from_location_id: int,
    to_location_id: int,
    body: LocationTransferRequest,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    locations: LocationRepository = Depends(repository(LocationRepository)),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    await _get_or_404(locations, from_location_id)
    await _get_or_404(locations, to_location_id)
    return await run_transfer(
        inventory,
        body.item_id,
        from_location_id,
        to_location_id,
        body.quantity,
        current_user,
        body.notes,
    )


@router.get("/{location_id}/sales")
async def location_sales(
    location_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(require_capability(Capability.VIEW_REPORTS, Capability.MANAGE_SALES)),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    await _get_or_404(locations, location_id)
    return {"sales": await locations.sales(location_id, start_date, end_date)}
