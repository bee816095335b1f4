from __future__ import annotations

import logging
import threading
from collections.abc import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from shopdesk.app.core.config import settings

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(autoflush=False)

_engine: Engine | None = None
_engine_lock = threading.Lock()


class Base(DeclarativeBase):
    pass


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use.

    Concurrent first callers block on the lock and all receive the same
    engine; the session factory is bound exactly once.
    """
    global _engine
    if _engine is not None:
        return _engine
    with _engine_lock:
        if _engine is None:
            connect_args = {}
            if settings.DATABASE_URL.startswith("sqlite"):
                # Sync endpoints run in a threadpool
                connect_args["check_same_thread"] = False
            logger.info("Creating database engine")
            _engine = create_engine(
                settings.DATABASE_URL,
                echo=settings.DATABASE_ECHO,
                connect_args=connect_args,
            )
            SessionLocal.configure(bind=_engine)
    return _engine


def dispose_engine() -> None:
    """Release pooled connections. Called on application shutdown."""
    global _engine
    with _engine_lock:
        if _engine is not None:
            logger.info("Disposing database engine")
            _engine.dispose()
            _engine = None


def import_models() -> None:
    """Import every model module so ``Base.metadata`` knows all tables."""
    from shopdesk.app.models import activity_log, bill, credit, product  # noqa: F401


def init_db() -> None:
    """Create every table directly, bypassing Alembic (local development)."""
    import_models()
    Base.metadata.create_all(bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
