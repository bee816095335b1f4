"""Credit ledger: creation, payments, edits and deletion of credit entries.

Invariants maintained for every credit at all times:

    remaining_amount == total_amount - amount_paid
    is_paid == (amount_paid >= total_amount)

Whenever ``amount_paid`` or ``total_amount`` changes, both derived columns are
written by the same UPDATE statement, computed from the row's current values
inside the database. Overpayment is allowed: ``remaining_amount`` may go
negative, in which case the credit stays paid.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopdesk.app.core.dates import utcnow
from shopdesk.app.core.exceptions import (
    InvalidAmountError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from shopdesk.app.models.activity_log import LogType
from shopdesk.app.models.credit import Credit, CreditItem, CreditPayment, CreditType
from shopdesk.app.models.money import from_minor_units, to_minor_units
from shopdesk.app.schemas.activity_log import LogEntryCreate
from shopdesk.app.schemas.credit import CreditCreate, CreditItemIn, CreditUpdate
from shopdesk.app.services.activity_log import LogSink, emit, record_failure, resolve_sink

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CREDIT_NOT_FOUND = "Credit entry not found"


def _fmt(amount: Decimal) -> str:
    return f"{amount:.2f}"


def _direction(credit_type: CreditType) -> str:
    return "given to" if credit_type == CreditType.GIVEN else "taken from"


def _as_amount(value: Decimal | int | float | str | None) -> Decimal:
    try:
        # Amounts finer than the stored scale are rounded before the sign check
        amount = from_minor_units(to_minor_units(value))
    except (ArithmeticError, ValueError, TypeError):
        raise InvalidAmountError("Valid payment amount is required") from None
    if amount <= 0:
        raise InvalidAmountError("Valid payment amount is required")
    return amount


def _build_items(items: list[CreditItemIn]) -> list[CreditItem]:
    for item in items:
        if item.quantity <= 0:
            raise ValidationError(f"Quantity for '{item.product_name}' must be positive")
        if item.unit_price <= 0:
            raise ValidationError(f"Price for '{item.product_name}' must be positive")
    return [
        CreditItem(
            position=position,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
        )
        for position, item in enumerate(items)
    ]


def get_credit(db: Session, credit_id: UUID) -> Credit:
    credit = db.get(Credit, credit_id, populate_existing=True)
    if credit is None:
        raise NotFoundError(CREDIT_NOT_FOUND)
    return credit


def create_credit(
    db: Session,
    data: CreditCreate,
    *,
    sink: LogSink | None = None,
) -> Credit:
    """Persist a new credit entry with its items.

    ``total_amount`` defaults to the sum of the item totals. An opening
    ``amount_paid`` is recorded as the first payment so that the payment
    history always adds up to ``amount_paid``.
    """
    sink = resolve_sink(db, sink)
    name = data.name.strip()
    try:
        if not name:
            raise ValidationError("Name is required")
        if not data.items:
            raise ValidationError("Credit must contain at least one item")
        items = _build_items(data.items)

        total = (
            data.total_amount
            if data.total_amount is not None
            else sum((item.total_price for item in data.items), ZERO)
        )
        now = utcnow()
        credit = Credit(
            name=name,
            phone_number=data.phone_number.strip(),
            date=data.date or now,
            type=data.type,
            total_amount=total,
            amount_paid=data.amount_paid,
            remaining_amount=total - data.amount_paid,
            is_paid=data.amount_paid >= total,
            images=list(data.images),
            items=items,
        )
        if data.amount_paid > 0:
            credit.payment_history.append(
                CreditPayment(amount=data.amount_paid, date=now, sequence=0)
            )
        db.add(credit)
        db.commit()
    except ValidationError as exc:
        record_failure(db, sink, "create credit entry", exc, related_item_type="credit")
        raise
    except SQLAlchemyError as exc:
        record_failure(db, sink, "create credit entry", exc, related_item_type="credit")
        raise UnexpectedError("Failed to create credit entry") from exc

    credit_id = credit.id
    emit(
        sink,
        LogEntryCreate(
            type=LogType.CREDIT,
            description=(
                f"Credit of {_fmt(total)} {_direction(data.type)} {name} "
                f"with {len(items)} items"
            ),
            related_item_id=str(credit_id),
            related_item_name=name,
            related_item_type="credit",
            details={
                "type": data.type.value,
                "total_amount": str(total),
                "amount_paid": str(data.amount_paid),
                "remaining_amount": str(total - data.amount_paid),
            },
        ),
    )
    return get_credit(db, credit_id)


def record_payment(
    db: Session,
    credit_id: UUID,
    amount: Decimal | int | float | str | None,
    *,
    sink: LogSink | None = None,
) -> Credit:
    """Apply a payment to a credit entry.

    The running totals are updated by a single UPDATE ... RETURNING, so two
    payments racing on the same credit both land. The history row is written
    in the same transaction.
    """
    sink = resolve_sink(db, sink)
    try:
        amount = _as_amount(amount)
        new_paid = Credit.amount_paid + amount
        row = db.execute(
            update(Credit)
            .where(Credit.id == credit_id)
            .values(
                amount_paid=new_paid,
                remaining_amount=Credit.total_amount - new_paid,
                is_paid=new_paid >= Credit.total_amount,
            )
            .returning(
                Credit.name,
                Credit.amount_paid,
                Credit.remaining_amount,
                Credit.is_paid,
            )
            .execution_options(synchronize_session=False)
        ).one_or_none()
        if row is None:
            raise NotFoundError(CREDIT_NOT_FOUND)

        # Next sequence is computed by the INSERT itself, after the UPDATE above
        # has taken the credit row
        next_sequence = (
            select(func.coalesce(func.max(CreditPayment.sequence), -1) + 1)
            .where(CreditPayment.credit_id == credit_id)
            .scalar_subquery()
        )
        db.execute(
            insert(CreditPayment).values(
                credit_id=credit_id,
                amount=amount,
                date=utcnow(),
                sequence=next_sequence,
            )
        )
        db.commit()
    except (InvalidAmountError, NotFoundError) as exc:
        record_failure(
            db,
            sink,
            "record payment",
            exc,
            related_item_id=str(credit_id),
            related_item_type="credit",
        )
        raise
    except SQLAlchemyError as exc:
        record_failure(
            db,
            sink,
            "record payment",
            exc,
            related_item_id=str(credit_id),
            related_item_type="credit",
        )
        raise UnexpectedError("Failed to process payment") from exc

    name, new_paid_value, new_remaining, is_paid = row
    logger.info("Payment of %s recorded on credit %s", amount, credit_id)
    emit(
        sink,
        LogEntryCreate(
            type=LogType.PAYMENT,
            description=(
                f"Payment of {_fmt(amount)} recorded for {name}: paid "
                f"{_fmt(new_paid_value - amount)} -> {_fmt(new_paid_value)}, "
                f"remaining {_fmt(new_remaining + amount)} -> {_fmt(new_remaining)}"
            ),
            related_item_id=str(credit_id),
            related_item_name=name,
            related_item_type="credit",
            details={
                "amount": str(amount),
                "previous_paid": str(new_paid_value - amount),
                "new_paid": str(new_paid_value),
                "previous_remaining": str(new_remaining + amount),
                "new_remaining": str(new_remaining),
                "is_paid": bool(is_paid),
            },
        ),
    )
    return get_credit(db, credit_id)


def update_credit(
    db: Session,
    credit_id: UUID,
    patch: CreditUpdate,
    *,
    sink: LogSink | None = None,
) -> Credit:
    """Overwrite the supplied fields of a credit entry (PUT semantics).

    If ``total_amount`` or ``amount_paid`` is among them, the derived columns
    are recomputed in the same UPDATE from whichever side was not patched.
    Replacing ``items`` does not recompute ``total_amount``.
    """
    sink = resolve_sink(db, sink)
    changes = patch.model_dump(exclude_unset=True)
    changes.pop("items", None)
    try:
        credit = get_credit(db, credit_id)
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationError("Name is required")
        if patch.items is not None and not patch.items:
            raise ValidationError("Credit must contain at least one item")

        old_values = {field: str(getattr(credit, field)) for field in changes}
        name = changes.get("name", credit.name)

        values = dict(changes)
        if "total_amount" in values or "amount_paid" in values:
            total = values.get("total_amount", Credit.total_amount)
            paid = values.get("amount_paid", Credit.amount_paid)
            values["remaining_amount"] = total - paid
            values["is_paid"] = paid >= total
        if values:
            db.execute(
                update(Credit)
                .where(Credit.id == credit_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        if patch.items is not None:
            credit.items = _build_items(patch.items)
        db.commit()
    except (NotFoundError, ValidationError) as exc:
        record_failure(
            db,
            sink,
            "update credit entry",
            exc,
            related_item_id=str(credit_id),
            related_item_type="credit",
        )
        raise
    except SQLAlchemyError as exc:
        record_failure(
            db,
            sink,
            "update credit entry",
            exc,
            related_item_id=str(credit_id),
            related_item_type="credit",
        )
        raise UnexpectedError("Failed to update credit entry") from exc

    fields = list(changes) + (["items"] if patch.items is not None else [])
    if fields:
        emit(
            sink,
            LogEntryCreate(
                type=LogType.UPDATE,
                description=f"Updated credit entry for {name}: {', '.join(fields)}",
                related_item_id=str(credit_id),
                related_item_name=name,
                related_item_type="credit",
                details={
                    "old": old_values,
                    "new": {f: str(v) for f, v in changes.items()},
                },
            ),
        )
    return get_credit(db, credit_id)


def delete_credit(
    db: Session,
    credit_id: UUID,
    *,
    sink: LogSink | None = None,
) -> None:
    """Hard-delete a credit entry together with its items and payments."""
    sink = resolve_sink(db, sink)
    try:
        credit = get_credit(db, credit_id)
        # Captured before removal; the row is unrecoverable afterwards
        snapshot = {
            "name": credit.name,
            "phone_number": credit.phone_number,
            "total_amount": str(credit.total_amount),
            "remaining_amount": str(credit.remaining_amount),
            "type": credit.type.value,
        }
        total = credit.total_amount
        credit_type = credit.type
        db.delete(credit)
        db.commit()
    except NotFoundError as exc:
        record_failure(
            db,
            sink,
            "delete credit entry",
            exc,
            related_item_id=str(credit_id),
            related_item_type="credit",
        )
        raise
    except SQLAlchemyError as exc:
        record_failure(
            db,
            sink,
            "delete credit entry",
            exc,
            related_item_id=str(credit_id),
            related_item_type="credit",
        )
        raise UnexpectedError("Failed to delete credit entry") from exc

    emit(
        sink,
        LogEntryCreate(
            type=LogType.DELETE,
            description=(
                f"Deleted credit entry of {_fmt(total)} "
                f"{_direction(credit_type)} {snapshot['name']}"
            ),
            related_item_id=str(credit_id),
            related_item_name=snapshot["name"],
            related_item_type="credit",
            details=snapshot,
        ),
    )
