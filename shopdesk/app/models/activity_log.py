from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopdesk.app.core.database import Base


class LogType(str, enum.Enum):
    ADD = "add"
    BUY = "buy"
    SELL = "sell"
    BILL = "bill"
    CREDIT = "credit"
    PAYMENT = "payment"
    DELETE = "delete"
    UPDATE = "update"
    ERROR = "error"


class ActivityLog(Base):
    """Append-only audit trail entry. Rows are never updated or deleted."""

    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    type: Mapped[LogType] = mapped_column(
        Enum(LogType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    related_item_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    related_item_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    related_item_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_activity_logs_timestamp", "timestamp"),
        Index("ix_activity_logs_type", "type"),
    )
