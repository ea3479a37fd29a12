"""Outbound message and integration call logs."""

import enum

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import CreatedAtMixin, IntPrimaryKeyMixin, TimestampMixin, str_enum


class MessageStatus(str, enum.Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"


class MessageLog(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "message_logs"

    recipient: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    channel: Mapped[str] = mapped_column(String(20), default="whatsapp", nullable=False)
    template_name: Mapped[str | None] = mapped_column(String(100), index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[MessageStatus] = mapped_column(str_enum(MessageStatus), nullable=False, index=True)
    provider_message_id: Mapped[str | None] = mapped_column(String(255), index=True)
    error: Mapped[str | None] = mapped_column(Text)
    sale_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("sales.id", ondelete="SET NULL"))
    sent_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="SET NULL"))

    def __repr__(self) -> str:
        return f"<MessageLog {self.id} to={self.recipient} status={self.status}>"


class IntegrationLog(IntPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "integration_logs"

    integration: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    event_type: Mapped[str | None] = mapped_column(String(100))
    payload: Mapped[dict | None] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(String(20), default="received", nullable=False)

    def __repr__(self) -> str:
        return f"<IntegrationLog {self.integration} {self.event_type}>"
