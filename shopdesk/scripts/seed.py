"""Seed the database with a small demo catalogue.

Usage:
    python -m shopdesk.scripts.seed
"""

from __future__ import annotations

from decimal import Decimal

from shopdesk.app.core.database import SessionLocal, init_db
from shopdesk.app.models.product import Product

PRODUCTS: list[tuple[str, str, int, Decimal]] = [
    # Groceries
    ("Basmati Rice 5kg", "Groceries", 40, Decimal("12.5000")),
    ("Sunflower Oil 1L", "Groceries", 25, Decimal("3.7500")),
    ("Sugar 1kg", "Groceries", 3, Decimal("1.2000")),
    # Household
    ("Dish Soap", "Household", 18, Decimal("2.1000")),
    ("Laundry Powder 2kg", "Household", 0, Decimal("6.9000")),
    # Stationery
    ("Notebook A5", "Stationery", 60, Decimal("0.9500")),
    ("Ballpoint Pen (10 pack)", "Stationery", 4, Decimal("2.5000")),
]


def seed() -> None:
    # Tables are created directly; use `alembic upgrade head` for real databases
    init_db()
    db = SessionLocal()
    try:
        for name, category, quantity, price in PRODUCTS:
            if db.query(Product).filter_by(name=name).first():
                continue
            db.add(Product(name=name, category=category, quantity=quantity, price=price))
            print(f"Created product: {name}")
        db.commit()
        print("Seed complete.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
