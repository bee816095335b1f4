"""Money column type.

Amounts are stored as integers in ten-thousandths of a currency unit, so
arithmetic done inside the database (``amount_paid + :amount``) is exact on
every backend, SQLite included. Python code only ever sees ``Decimal``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

SCALE = 4
_QUANTUM = Decimal(1).scaleb(-SCALE)


def to_minor_units(value: Decimal | int | float | str) -> int:
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"Non-finite money amount: {value}")
    return int(amount.quantize(_QUANTUM, rounding=ROUND_HALF_UP).scaleb(SCALE))


def from_minor_units(value: int) -> Decimal:
    return Decimal(int(value)).scaleb(-SCALE)


class Money(TypeDecorator):
    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_minor_units(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return from_minor_units(value)
