"""Credit listing and balance aggregation.

Aggregates are a pure fold over whatever credits are passed in. No running
totals are stored anywhere, so they cannot drift from the records.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shopdesk.app.core.dates import end_of_day, start_of_day
from shopdesk.app.core.exceptions import ValidationError
from shopdesk.app.models.credit import Credit, CreditType
from shopdesk.app.schemas.credit import CreditAggregates, CreditSummaryOut

ZERO = Decimal("0")


def list_credits(
    db: Session,
    *,
    credit_type: CreditType | str | None = None,
    name: str | None = None,
    phone: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    sort: str = "desc",
) -> list[Credit]:
    """Return credits matching every supplied filter, ordered by ``date``.

    Name and phone filters are case-insensitive substring matches. Date
    bounds are inclusive; ``date_to`` covers the whole day.
    """
    if sort not in ("asc", "desc"):
        raise ValidationError("sort must be 'asc' or 'desc'")

    query = select(Credit).options(
        selectinload(Credit.items), selectinload(Credit.payment_history)
    )
    if credit_type:
        try:
            query = query.where(Credit.type == CreditType(credit_type))
        except ValueError:
            raise ValidationError("type must be 'given' or 'taken'") from None
    if name:
        query = query.where(Credit.name.icontains(name, autoescape=True))
    if phone:
        query = query.where(Credit.phone_number.icontains(phone, autoescape=True))
    if date_from is not None:
        query = query.where(Credit.date >= start_of_day(date_from))
    if date_to is not None:
        query = query.where(Credit.date <= end_of_day(date_to))

    if sort == "desc":
        query = query.order_by(Credit.date.desc(), Credit.id.desc())
    else:
        query = query.order_by(Credit.date.asc(), Credit.id.asc())
    return list(db.scalars(query).all())


def compute_aggregates(credits: Iterable[Credit]) -> CreditAggregates:
    """Sum outstanding balances per credit type.

    ``net_balance`` is ``total_taken - total_given``.
    """
    total_given = ZERO
    total_taken = ZERO
    for credit in credits:
        if credit.type == CreditType.GIVEN:
            total_given += credit.remaining_amount
        else:
            total_taken += credit.remaining_amount
    return CreditAggregates(
        total_given=total_given,
        total_taken=total_taken,
        net_balance=total_taken - total_given,
    )


def summarize_credits(db: Session, **filters) -> CreditSummaryOut:
    credits = list_credits(db, **filters)
    aggregates = compute_aggregates(credits)
    return CreditSummaryOut(count=len(credits), **aggregates.model_dump())
