"""Messaging request schemas."""

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    phone: str = Field(min_length=1)
    message: str = Field(min_length=1)


class SendTemplateRequest(BaseModel):
    phone: str = Field(min_length=1)
    template: str = Field(min_length=1)
    data: dict = Field(default_factory=dict)


class OrderConfirmationRequest(BaseModel):
    sale_id: int
