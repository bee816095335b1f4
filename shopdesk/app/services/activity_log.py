"""Activity log sink and query.

Every mutating service reports what it did through a ``LogSink``. The sink is
best-effort: a failed log write is reported through the process logger and
swallowed, so it can never fail or mask the business operation.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopdesk.app.core.dates import end_of_day, start_of_day, utcnow
from shopdesk.app.core.exceptions import ShopdeskError, ValidationError
from shopdesk.app.models.activity_log import ActivityLog, LogType
from shopdesk.app.schemas.activity_log import ActivityLogOut, LogEntryCreate, LogPageOut

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class LogSink(Protocol):
    def append(self, entry: LogEntryCreate) -> None: ...


class DatabaseLogSink:
    """Write entries to the ``activity_logs`` table.

    Each entry gets its own commit. Services call the sink only after their
    own transaction has committed (or been rolled back), so the entry never
    shares a transaction with the operation it describes.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def append(self, entry: LogEntryCreate) -> None:
        try:
            self._db.add(
                ActivityLog(
                    type=entry.type,
                    description=entry.description,
                    timestamp=utcnow(),
                    related_item_id=entry.related_item_id,
                    related_item_name=entry.related_item_name,
                    related_item_type=entry.related_item_type,
                    details=entry.details,
                )
            )
            self._db.commit()
        except Exception:
            self._db.rollback()
            logger.exception("Failed to write %s activity log entry", entry.type.value)


def resolve_sink(db: Session, sink: LogSink | None) -> LogSink:
    return sink if sink is not None else DatabaseLogSink(db)


def emit(sink: LogSink, entry: LogEntryCreate) -> None:
    """Dispatch *entry*, swallowing any failure of a custom sink."""
    try:
        sink.append(entry)
    except Exception:
        logger.exception("Activity log sink rejected %s entry", entry.type.value)


def report_failure(
    sink: LogSink,
    context: str,
    exc: Exception,
    *,
    related_item_id: str | None = None,
    related_item_name: str | None = None,
    related_item_type: str | None = None,
) -> None:
    """Log an ``error`` entry for an operation that failed outside a transaction."""
    message = exc.message if isinstance(exc, ShopdeskError) else str(exc)
    logger.warning("Failed to %s: %s", context, message)
    emit(
        sink,
        LogEntryCreate(
            type=LogType.ERROR,
            description=f"Failed to {context}: {message}",
            related_item_id=related_item_id,
            related_item_name=related_item_name,
            related_item_type=related_item_type,
        ),
    )


def record_failure(
    db: Session,
    sink: LogSink,
    context: str,
    exc: Exception,
    **related: str | None,
) -> None:
    """Roll back the failed transaction and log an ``error`` entry for it."""
    db.rollback()
    report_failure(sink, context, exc, **related)


def query_logs(
    db: Session,
    *,
    log_type: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> LogPageOut:
    """Return one page of entries, newest first.

    ``log_type == "all"`` disables the type filter. ``date_to`` is inclusive of
    the whole day.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    filters = []
    if log_type and log_type != "all":
        try:
            filters.append(ActivityLog.type == LogType(log_type))
        except ValueError:
            raise ValidationError(f"Unknown log type: {log_type}") from None
    if date_from is not None:
        filters.append(ActivityLog.timestamp >= start_of_day(date_from))
    if date_to is not None:
        filters.append(ActivityLog.timestamp <= end_of_day(date_to))
    if search:
        filters.append(ActivityLog.description.icontains(search, autoescape=True))

    total_logs = db.scalar(
        select(func.count()).select_from(ActivityLog).where(*filters)
    ) or 0
    rows = db.scalars(
        select(ActivityLog)
        .where(*filters)
        .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return LogPageOut(
        logs=[ActivityLogOut.model_validate(r) for r in rows],
        page=page,
        total_pages=math.ceil(total_logs / limit),
        total_logs=total_logs,
    )
