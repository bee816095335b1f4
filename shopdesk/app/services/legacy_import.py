"""One-time import of credit documents exported from the old document store.

Old documents mix two naming conventions (``phoneNumber``/``phone``,
``remainingAmount``/``remaining``, ``unitPrice``/``price``,
``productName``/``itemName``). ``normalize_legacy_credit`` maps them onto the
canonical fields once, so nothing downstream needs to read both spellings.
Stored derived values are discarded and recomputed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from shopdesk.app.core.dates import utcnow
from shopdesk.app.core.exceptions import ValidationError
from shopdesk.app.models.activity_log import LogType
from shopdesk.app.models.credit import Credit, CreditItem, CreditPayment, CreditType
from shopdesk.app.schemas.activity_log import LogEntryCreate
from shopdesk.app.services.activity_log import LogSink, emit, resolve_sink

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
_datetime = TypeAdapter(datetime)


def _unwrap(value: Any) -> Any:
    """Strip extended-JSON wrappers such as ``{"$date": ...}``."""
    if isinstance(value, dict) and len(value) == 1:
        (key, inner), = value.items()
        if key in ("$date", "$oid", "$numberDecimal", "$numberInt", "$numberLong", "$numberDouble"):
            return _unwrap(inner)
    return value


def _first(doc: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if doc.get(key) is not None:
            return _unwrap(doc[key])
    return default


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else ZERO


def _when(value: Any, fallback: datetime) -> datetime:
    if value is None:
        return fallback
    if isinstance(value, (int, float)):
        # Epoch milliseconds
        return _datetime.validate_python(value / 1000)
    return _datetime.validate_python(value)


def normalize_legacy_credit(doc: dict[str, Any]) -> dict[str, Any]:
    """Map one exported credit document onto canonical field names."""
    name = str(_first(doc, "name", default="")).strip()
    if not name:
        raise ValidationError("Legacy credit has no name")
    try:
        credit_type = CreditType(_first(doc, "type"))
    except ValueError:
        raise ValidationError(
            f"Legacy credit for {name} has an unknown type"
        ) from None

    created = _when(_first(doc, "createdAt"), utcnow())
    items = []
    for raw in doc.get("items") or []:
        quantity = int(_decimal(_first(raw, "quantity", default=0)))
        unit_price = _decimal(_first(raw, "unitPrice", "price"))
        items.append(
            {
                "product_name": str(_first(raw, "productName", "itemName", "name", default="Item")),
                "quantity": quantity,
                "unit_price": unit_price,
                "total_price": _decimal(
                    _first(raw, "totalPrice", default=unit_price * quantity)
                ),
            }
        )

    total = _first(doc, "totalAmount")
    total_amount = (
        _decimal(total)
        if total is not None
        else sum((item["total_price"] for item in items), ZERO)
    )

    date = _when(_first(doc, "date"), created)
    history = [
        {"amount": _decimal(_first(p, "amount")), "date": _when(_first(p, "date"), date)}
        for p in doc.get("paymentHistory") or []
    ]
    paid_in_history = sum((p["amount"] for p in history), ZERO)
    amount_paid = max(_decimal(_first(doc, "amountPaid")), paid_in_history)
    if amount_paid > paid_in_history:
        # Opening payment that was never written to the history
        history.insert(0, {"amount": amount_paid - paid_in_history, "date": date})

    return {
        "name": name,
        "phone_number": str(_first(doc, "phoneNumber", "phone", default="")).strip(),
        "date": date,
        "type": credit_type,
        "items": items,
        "total_amount": total_amount,
        "amount_paid": amount_paid,
        "images": [str(_unwrap(i)) for i in doc.get("images") or []],
        "payment_history": history,
    }


def import_legacy_credits(
    db: Session,
    documents: list[dict[str, Any]],
    *,
    sink: LogSink | None = None,
) -> int:
    """Insert normalized credits in one transaction and return how many."""
    sink = resolve_sink(db, sink)
    normalized = [normalize_legacy_credit(doc) for doc in documents]

    for data in normalized:
        total = data["total_amount"]
        paid = data["amount_paid"]
        db.add(
            Credit(
                name=data["name"],
                phone_number=data["phone_number"],
                date=data["date"],
                type=data["type"],
                total_amount=total,
                amount_paid=paid,
                remaining_amount=total - paid,
                is_paid=paid >= total,
                images=data["images"],
                items=[
                    CreditItem(position=position, **item)
                    for position, item in enumerate(data["items"])
                ],
                payment_history=[
                    CreditPayment(sequence=sequence, **payment)
                    for sequence, payment in enumerate(data["payment_history"])
                ],
            )
        )
    db.commit()
    logger.info("Imported %d legacy credit entries", len(normalized))

    if normalized:
        emit(
            sink,
            LogEntryCreate(
                type=LogType.CREDIT,
                description=f"Imported {len(normalized)} legacy credit entries",
                related_item_type="credit",
                details={"count": len(normalized)},
            ),
        )
    return len(normalized)
