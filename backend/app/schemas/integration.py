"""Integration request schemas."""

from pydantic import BaseModel, Field


class MarkSyncedRequest(BaseModel):
    sale_ids: list[int] = Field(min_length=1)
