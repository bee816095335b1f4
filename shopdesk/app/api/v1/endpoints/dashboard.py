from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shopdesk.app.core.database import get_db
from shopdesk.app.schemas.dashboard import DashboardStatsOut
from shopdesk.app.services.dashboard import get_stats

router = APIRouter()


@router.get("/stats", response_model=DashboardStatsOut)
def dashboard_stats(db: Session = Depends(get_db)) -> DashboardStatsOut:
    return get_stats(db)
