"""Shared test fixtures.

Each test gets its own in-memory SQLite database, so tests never pollute each
other or a real database.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shopdesk.app.core.database import Base, get_db, import_models
from shopdesk.app.main import app
from shopdesk.app.models.credit import Credit, CreditType
from shopdesk.app.models.product import Product
from shopdesk.app.schemas.activity_log import LogEntryCreate
from shopdesk.app.schemas.credit import CreditCreate, CreditItemIn
from shopdesk.app.services.credit_ledger import create_credit


# ─── Activity log sinks ──────────────────────────────────────────────────────


class RecordingSink:
    """Keeps every entry in memory instead of writing it to the database."""

    def __init__(self) -> None:
        self.entries: list[LogEntryCreate] = []

    def append(self, entry: LogEntryCreate) -> None:
        self.entries.append(entry)

    def types(self) -> list[str]:
        return [e.type.value for e in self.entries]


class FailingSink:
    def append(self, entry: LogEntryCreate) -> None:
        raise RuntimeError("log store unavailable")


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def failing_sink() -> FailingSink:
    return FailingSink()


# ─── Fresh in-memory database per test ───────────────────────────────────────


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    # StaticPool keeps the single in-memory connection alive across sessions
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine: Engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test session."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ─── Catalogue fixtures ──────────────────────────────────────────────────────


@pytest.fixture()
def product_a(db: Session) -> Product:
    p = Product(
        name="Product A",
        quantity=10,
        price=Decimal("5.0000"),
        category="Groceries",
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def product_b(db: Session) -> Product:
    p = Product(
        name="Product B",
        quantity=2,
        price=Decimal("20.0000"),
        category="Household",
    )
    db.add(p)
    db.commit()
    return p


# ─── Credit fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def credit_given(db: Session, sink: RecordingSink) -> Credit:
    """100.00 given to Alice, nothing paid yet."""
    data = CreditCreate(
        name="Alice",
        phone_number="0501111111",
        date=datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc),
        type=CreditType.GIVEN,
        items=[
            CreditItemIn(product_name="Rice", quantity=4, unit_price=Decimal("25")),
        ],
    )
    return create_credit(db, data, sink=sink)
