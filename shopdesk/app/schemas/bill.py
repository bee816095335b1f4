from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field


class BillItemIn(BaseModel):
    product_id: UUID | None = Field(
        None, validation_alias=AliasChoices("product_id", "productId")
    )
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    line_total: Decimal = Field(
        ge=0, validation_alias=AliasChoices("line_total", "lineTotal")
    )


class BillCreate(BaseModel):
    customer_name: str = Field(
        validation_alias=AliasChoices("customer_name", "customerName")
    )
    date: datetime | None = None
    # Emptiness is checked by the billing service
    items: list[BillItemIn]
    # Trusted as sent; not recomputed from the items
    total: Decimal = Field(ge=0)


class BillItemOut(BaseModel):
    product_id: UUID | None
    name: str
    price: Decimal
    quantity: int
    line_total: Decimal

    class Config:
        from_attributes = True


class BillOut(BaseModel):
    id: UUID
    customer_name: str
    date: datetime
    items: list[BillItemOut]
    total: Decimal
    created_at: datetime | None

    class Config:
        from_attributes = True


class StockFailureOut(BaseModel):
    product_id: UUID
    name: str
    quantity: int
    error: str


class CheckoutOut(BaseModel):
    bill: BillOut
    stock_failures: list[StockFailureOut]
