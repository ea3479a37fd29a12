"""Shop settings endpoints."""

import logging

from fastapi import APIRouter, Depends

from app.core.deps import get_current_user, repository, require_capability
from app.models.role import Capability
from app.repositories.settings import SettingsRepository
from app.schemas.auth import CurrentUser
from app.schemas.setting import ShopSettingsResponse, ShopSettingsUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=ShopSettingsResponse)
async def get_settings(
    current_user: CurrentUser = Depends(get_current_user),
    shop: SettingsRepository = Depends(repository(SettingsRepository)),
):
    """Current shop settings, or the defaults when none were saved yet."""
    row = await shop.latest()
    return ShopSettingsResponse.from_row(row) if row is not None else ShopSettingsResponse()


@router.put("")
async def update_settings(
    body: ShopSettingsUpdate,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_SETTINGS)),
    shop: SettingsRepository = Depends(repository(SettingsRepository)),
):
    row = await shop.upsert(body.to_columns())
    logger.info("Shop settings updated by %s", current_user.username)
    return {"message": "Settings updated successfully", "settings": ShopSettingsResponse.from_row(row)}
