from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator

from shopdesk.app.models.credit import CreditType


# ─── Requests ────────────────────────────────────────────────────────────────
# Legacy spellings from the old frontend are accepted as aliases; the
# canonical snake_case name is always listed first.


class CreditItemIn(BaseModel):
    product_id: UUID | None = Field(
        None, validation_alias=AliasChoices("product_id", "productId")
    )
    product_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("product_name", "productName", "itemName"),
    )
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(
        gt=0, validation_alias=AliasChoices("unit_price", "unitPrice", "price")
    )

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


class CreditCreate(BaseModel):
    name: str
    phone_number: str = Field(
        "", validation_alias=AliasChoices("phone_number", "phoneNumber", "phone")
    )
    date: datetime | None = None
    type: CreditType
    # Emptiness is a business rule, checked by the ledger service
    items: list[CreditItemIn]
    total_amount: Decimal | None = Field(
        None, ge=0, validation_alias=AliasChoices("total_amount", "totalAmount")
    )
    amount_paid: Decimal = Field(
        Decimal("0"), ge=0, validation_alias=AliasChoices("amount_paid", "amountPaid")
    )
    images: list[str] = Field(default_factory=list)


class CreditUpdate(BaseModel):
    """Full-record edit. ``type`` and the payment history are not editable."""

    name: str | None = None
    phone_number: str | None = Field(
        None, validation_alias=AliasChoices("phone_number", "phoneNumber", "phone")
    )
    date: datetime | None = None
    items: list[CreditItemIn] | None = None
    total_amount: Decimal | None = Field(
        None, ge=0, validation_alias=AliasChoices("total_amount", "totalAmount")
    )
    amount_paid: Decimal | None = Field(
        None, ge=0, validation_alias=AliasChoices("amount_paid", "amountPaid")
    )
    images: list[str] | None = None

    @field_validator(
        "name", "phone_number", "date", "items", "total_amount", "amount_paid", "images"
    )
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class PaymentCreate(BaseModel):
    # Positivity is checked by the ledger service (InvalidAmountError)
    amount: Decimal


# ─── Responses ───────────────────────────────────────────────────────────────


class CreditItemOut(BaseModel):
    product_id: UUID | None
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class CreditPaymentOut(BaseModel):
    amount: Decimal
    date: datetime

    class Config:
        from_attributes = True


class CreditOut(BaseModel):
    id: UUID
    name: str
    phone_number: str
    date: datetime
    type: CreditType
    items: list[CreditItemOut]
    total_amount: Decimal
    amount_paid: Decimal
    remaining_amount: Decimal
    is_paid: bool
    images: list[str]
    payment_history: list[CreditPaymentOut]
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True


class CreditAggregates(BaseModel):
    total_given: Decimal
    total_taken: Decimal
    net_balance: Decimal


class CreditSummaryOut(CreditAggregates):
    count: int
