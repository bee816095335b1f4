from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shopdesk.app.core.config import settings
from shopdesk.app.core.database import get_db
from shopdesk.app.schemas.activity_log import LogPageOut
from shopdesk.app.services.activity_log import MAX_PAGE_SIZE, query_logs

router = APIRouter()


@router.get("/", response_model=LogPageOut)
def list_logs(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=MAX_PAGE_SIZE),
    type: str | None = Query(None, description="Log type, or 'all'"),
    date_from: date | None = Query(None, alias="startDate"),
    date_to: date | None = Query(None, alias="endDate"),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
) -> LogPageOut:
    return query_logs(
        db,
        log_type=type,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=page,
        limit=limit or settings.LOGS_PAGE_SIZE,
    )
