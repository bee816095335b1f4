"""Tests for normalizing and importing old document-store credit exports."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from shopdesk.app.core.exceptions import ValidationError
from shopdesk.app.models.credit import CreditType
from shopdesk.app.services.credit_query import list_credits
from shopdesk.app.services.legacy_import import (
    import_legacy_credits,
    normalize_legacy_credit,
)

OLD_STYLE = {
    "_id": {"$oid": "65f0c0ffee0000000000abcd"},
    "name": "Khalid",
    "phone": "0504444444",
    "date": {"$date": "2025-11-02T09:30:00.000Z"},
    "type": "given",
    "items": [
        {"product": "none", "itemName": "Rice", "quantity": 2, "price": 30, "totalPrice": 60},
        {"productName": "Oil", "quantity": 1, "unitPrice": 40},
    ],
    "totalAmount": 100,
    "amountPaid": 50,
    # Stale value; must be ignored
    "remaining": 80,
    "isPaid": True,
    "paymentHistory": [
        {"amount": 20, "date": {"$date": "2025-11-10T12:00:00.000Z"}},
    ],
}

NEW_STYLE = {
    "name": "Lina",
    "phoneNumber": "0505555555",
    "date": "2025-12-01T00:00:00Z",
    "type": "taken",
    "items": [{"productName": "Sugar", "quantity": 5, "unitPrice": 2}],
    "amountPaid": 0,
    "remainingAmount": 10,
    "images": ["http://localhost:8000/uploads/x.png"],
}


class TestNormalize:
    def test_legacy_spellings_mapped(self) -> None:
        data = normalize_legacy_credit(OLD_STYLE)
        assert data["phone_number"] == "0504444444"
        assert data["type"] == CreditType.GIVEN
        assert [i["product_name"] for i in data["items"]] == ["Rice", "Oil"]
        assert data["items"][1]["unit_price"] == Decimal("40")
        assert data["items"][1]["total_price"] == Decimal("40")

    def test_unrecorded_payment_becomes_opening_entry(self) -> None:
        data = normalize_legacy_credit(OLD_STYLE)
        amounts = [p["amount"] for p in data["payment_history"]]
        assert amounts == [Decimal("30"), Decimal("20")]
        assert data["amount_paid"] == Decimal("50")

    def test_total_falls_back_to_items(self) -> None:
        data = normalize_legacy_credit(NEW_STYLE)
        assert data["total_amount"] == Decimal("10")
        assert data["payment_history"] == []

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            normalize_legacy_credit({**NEW_STYLE, "type": "loan"})
        assert excinfo.value.__suppress_context__ is True

    def test_missing_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            normalize_legacy_credit({**NEW_STYLE, "name": ""})


class TestImport:
    def test_import_recomputes_derived_fields(self, db: Session, sink) -> None:
        count = import_legacy_credits(db, [OLD_STYLE, NEW_STYLE], sink=sink)
        assert count == 2

        by_name = {c.name: c for c in list_credits(db)}
        khalid = by_name["Khalid"]
        assert khalid.remaining_amount == Decimal("50")
        assert khalid.is_paid is False
        assert sum(p.amount for p in khalid.payment_history) == khalid.amount_paid

        lina = by_name["Lina"]
        assert lina.phone_number == "0505555555"
        assert lina.images == ["http://localhost:8000/uploads/x.png"]
        assert lina.remaining_amount == Decimal("10")

        assert sink.types() == ["credit"]
        assert sink.entries[0].details == {"count": 2}

    def test_bad_document_imports_nothing(self, db: Session, sink) -> None:
        with pytest.raises(ValidationError):
            import_legacy_credits(db, [NEW_STYLE, {**NEW_STYLE, "type": "?"}], sink=sink)
        assert list_credits(db) == []
