from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopdesk.app.core.database import Base
from shopdesk.app.models.money import Money


class CreditType(str, enum.Enum):
    GIVEN = "given"
    TAKEN = "taken"


class Credit(Base):
    """Credit given to, or taken from, a counterparty.

    ``remaining_amount`` and ``is_paid`` are derived from ``total_amount`` and
    ``amount_paid``. They are only ever written by the ledger service, in the
    same statement that changes either input.
    """

    __tablename__ = "credits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    type: Mapped[CreditType] = mapped_column(
        Enum(CreditType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0")
    )
    remaining_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    items: Mapped[list[CreditItem]] = relationship(
        back_populates="credit",
        cascade="all, delete-orphan",
        order_by="CreditItem.position",
    )
    payment_history: Mapped[list[CreditPayment]] = relationship(
        back_populates="credit",
        cascade="all, delete-orphan",
        order_by=lambda: [CreditPayment.date, CreditPayment.sequence],
    )

    __table_args__ = (
        Index("ix_credits_date", "date"),
        Index("ix_credits_type", "type"),
        Index("ix_credits_name", "name"),
    )


class CreditItem(Base):
    __tablename__ = "credit_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    credit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("credits.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # NULL when the credit form did not link a catalogue product
    product_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False)

    credit: Mapped[Credit] = relationship(back_populates="items")

    __table_args__ = (Index("ix_credit_items_credit", "credit_id"),)


class CreditPayment(Base):
    """One entry of a credit's append-only payment history."""

    __tablename__ = "credit_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    credit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("credits.id", ondelete="CASCADE"), nullable=False
    )
    # Per-credit insertion order; tie-breaker for payments in the same clock tick
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    credit: Mapped[Credit] = relationship(back_populates="payment_history")

    __table_args__ = (
        Index("ix_credit_payments_credit", "credit_id"),
        UniqueConstraint("credit_id", "sequence", name="uq_credit_payments_sequence"),
    )
