from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopdesk.app.api.deps import get_log_sink
from shopdesk.app.core.database import get_db
from shopdesk.app.models.credit import Credit
from shopdesk.app.schemas.credit import (
    CreditCreate,
    CreditOut,
    CreditSummaryOut,
    CreditUpdate,
    PaymentCreate,
)
from shopdesk.app.services import credit_ledger, credit_query
from shopdesk.app.services.activity_log import LogSink

router = APIRouter()


def credit_filters(
    type: str | None = Query(None, description="given or taken"),
    name: str | None = Query(None),
    phone: str | None = Query(None, alias="phoneNumber"),
    date_from: date | None = Query(None, alias="startDate"),
    date_to: date | None = Query(None, alias="endDate"),
    sort: str = Query("desc", description="asc or desc by date"),
) -> dict:
    return {
        "credit_type": type,
        "name": name,
        "phone": phone,
        "date_from": date_from,
        "date_to": date_to,
        "sort": sort,
    }


@router.get("/", response_model=list[CreditOut])
def list_credits(
    filters: dict = Depends(credit_filters),
    db: Session = Depends(get_db),
) -> list[Credit]:
    return credit_query.list_credits(db, **filters)


@router.get("/summary", response_model=CreditSummaryOut)
def credit_summary(
    filters: dict = Depends(credit_filters),
    db: Session = Depends(get_db),
) -> CreditSummaryOut:
    """Outstanding totals over the same filtered set the list returns."""
    return credit_query.summarize_credits(db, **filters)


@router.post("/", response_model=CreditOut, status_code=status.HTTP_201_CREATED)
def create_credit(
    payload: CreditCreate,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> Credit:
    return credit_ledger.create_credit(db, payload, sink=sink)


@router.get("/{credit_id}", response_model=CreditOut)
def get_credit(credit_id: UUID, db: Session = Depends(get_db)) -> Credit:
    return credit_ledger.get_credit(db, credit_id)


@router.put("/{credit_id}", response_model=CreditOut)
def update_credit(
    credit_id: UUID,
    payload: CreditUpdate,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> Credit:
    return credit_ledger.update_credit(db, credit_id, payload, sink=sink)


@router.delete("/{credit_id}")
def delete_credit(
    credit_id: UUID,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> dict:
    credit_ledger.delete_credit(db, credit_id, sink=sink)
    return {"message": "Credit entry deleted successfully"}


@router.post("/{credit_id}/payment", response_model=CreditOut)
def record_payment(
    credit_id: UUID,
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> Credit:
    return credit_ledger.record_payment(db, credit_id, payload.amount, sink=sink)
