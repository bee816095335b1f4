"""Bill recording and the bill-then-sell checkout sequence."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from shopdesk.app.core.dates import utcnow
from shopdesk.app.core.exceptions import (
    NotFoundError,
    ShopdeskError,
    UnexpectedError,
    ValidationError,
)
from shopdesk.app.models.activity_log import LogType
from shopdesk.app.models.bill import Bill, BillItem
from shopdesk.app.schemas.activity_log import LogEntryCreate
from shopdesk.app.schemas.bill import BillCreate, BillOut, CheckoutOut, StockFailureOut
from shopdesk.app.services import stock
from shopdesk.app.services.activity_log import LogSink, emit, record_failure, resolve_sink

logger = logging.getLogger(__name__)


def create_bill(
    db: Session,
    data: BillCreate,
    *,
    sink: LogSink | None = None,
) -> Bill:
    """Persist a bill exactly as submitted.

    The total is trusted, not recomputed from the lines, and stock is left
    untouched: decrementing it is a separate ``sell`` per line.
    """
    sink = resolve_sink(db, sink)
    customer_name = data.customer_name.strip()
    try:
        if not customer_name:
            raise ValidationError("Customer name is required")
        if not data.items:
            raise ValidationError("Bill must contain at least one item")

        bill = Bill(
            customer_name=customer_name,
            date=data.date or utcnow(),
            total=data.total,
            items=[
                BillItem(
                    position=position,
                    product_id=item.product_id,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    line_total=item.line_total,
                )
                for position, item in enumerate(data.items)
            ],
        )
        db.add(bill)
        db.commit()
    except ValidationError as exc:
        record_failure(db, sink, "create bill", exc, related_item_type="bill")
        raise
    except SQLAlchemyError as exc:
        record_failure(db, sink, "create bill", exc, related_item_type="bill")
        raise UnexpectedError("Failed to create bill") from exc

    bill_id = bill.id
    emit(
        sink,
        LogEntryCreate(
            type=LogType.BILL,
            description=(
                f"Created bill of {data.total:.2f} for customer {customer_name} "
                f"with {len(data.items)} items"
            ),
            related_item_id=str(bill_id),
            related_item_name=customer_name,
            related_item_type="bill",
            details={"total": str(data.total), "item_count": len(data.items)},
        ),
    )
    return get_bill(db, bill_id)


def get_bill(db: Session, bill_id: UUID) -> Bill:
    bill = db.get(Bill, bill_id, populate_existing=True)
    if bill is None:
        raise NotFoundError("Bill not found")
    return bill


def list_bills(db: Session) -> list[Bill]:
    """All bills, most recent first."""
    return list(
        db.scalars(
            select(Bill)
            .options(selectinload(Bill.items))
            .order_by(Bill.date.desc(), Bill.created_at.desc())
        ).all()
    )


def checkout(
    db: Session,
    data: BillCreate,
    *,
    sink: LogSink | None = None,
) -> CheckoutOut:
    """Record a bill, then sell each linked line item independently.

    This is deliberately not transactional. Once the bill is stored it stays
    stored; a failing sell is reported in ``stock_failures`` and neither the
    bill nor earlier sells are rolled back.
    """
    sink = resolve_sink(db, sink)
    bill = create_bill(db, data, sink=sink)
    bill_out = BillOut.model_validate(bill)

    failures: list[StockFailureOut] = []
    for item in data.items:
        if item.product_id is None:
            continue
        try:
            stock.sell(db, item.product_id, item.quantity, sink=sink)
        except ShopdeskError as exc:
            logger.warning(
                "Checkout of bill %s: sell of %s failed: %s",
                bill_out.id,
                item.product_id,
                exc.message,
            )
            failures.append(
                StockFailureOut(
                    product_id=item.product_id,
                    name=item.name,
                    quantity=item.quantity,
                    error=exc.message,
                )
            )
    return CheckoutOut(bill=bill_out, stock_failures=failures)
