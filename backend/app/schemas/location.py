"""Location schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.location import LocationStatus


class LocationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1)
    phone: str | None = None
    manager_id: int | None = None
    settings: dict = Field(default_factory=dict)


class LocationUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = None
    phone: str | None = None
    manager_id: int | None = None
    status: LocationStatus | None = None
    settings: dict | None = None


class LocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str | None = None
    phone: str | None = None
    manager_id: int | None = None
    settings: dict | None = None
    status: LocationStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LocationTransferRequest(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)
    notes: str | None = None
