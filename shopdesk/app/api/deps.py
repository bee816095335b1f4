from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from shopdesk.app.core.database import get_db
from shopdesk.app.services.activity_log import DatabaseLogSink, LogSink
from shopdesk.app.services.file_service import FileStorageService


def get_log_sink(db: Session = Depends(get_db)) -> LogSink:
    """Activity log sink bound to the request's session."""
    return DatabaseLogSink(db)


def get_storage() -> FileStorageService:
    return FileStorageService()
