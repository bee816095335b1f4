from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from shopdesk.app.models.activity_log import LogType


class LogEntryCreate(BaseModel):
    type: LogType
    description: str
    related_item_id: str | None = None
    related_item_name: str | None = None
    related_item_type: str | None = None
    details: dict[str, Any] | None = None


class ActivityLogOut(BaseModel):
    id: UUID
    type: LogType
    description: str
    timestamp: datetime
    related_item_id: str | None
    related_item_name: str | None
    related_item_type: str | None
    details: dict[str, Any] | None

    class Config:
        from_attributes = True


class LogPageOut(BaseModel):
    logs: list[ActivityLogOut]
    page: int
    total_pages: int
    total_logs: int
