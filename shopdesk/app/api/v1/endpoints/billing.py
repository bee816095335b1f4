from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopdesk.app.api.deps import get_log_sink
from shopdesk.app.core.database import get_db
from shopdesk.app.models.bill import Bill
from shopdesk.app.schemas.bill import BillCreate, BillOut, CheckoutOut
from shopdesk.app.services import billing
from shopdesk.app.services.activity_log import LogSink

router = APIRouter()


@router.get("/", response_model=list[BillOut])
def list_bills(db: Session = Depends(get_db)) -> list[Bill]:
    return billing.list_bills(db)


@router.post("/", response_model=BillOut, status_code=status.HTTP_201_CREATED)
def create_bill(
    payload: BillCreate,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> Bill:
    return billing.create_bill(db, payload, sink=sink)


@router.post(
    "/checkout", response_model=CheckoutOut, status_code=status.HTTP_201_CREATED
)
def checkout(
    payload: BillCreate,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> CheckoutOut:
    """Record the bill, then sell every linked line item.

    Sell failures do not undo the bill; they are listed in
    ``stock_failures``.
    """
    return billing.checkout(db, payload, sink=sink)


@router.get("/{bill_id}", response_model=BillOut)
def get_bill(bill_id: UUID, db: Session = Depends(get_db)) -> Bill:
    return billing.get_bill(db, bill_id)
