from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopdesk.app.core.config import settings
from shopdesk.app.models.bill import Bill
from shopdesk.app.models.product import Product
from shopdesk.app.schemas.dashboard import DashboardStatsOut


def get_stats(db: Session) -> DashboardStatsOut:
    """Headline numbers for the dashboard, recomputed on every call."""
    total_products = db.scalar(select(func.count()).select_from(Product)) or 0
    out_of_stock = (
        db.scalar(
            select(func.count()).select_from(Product).where(Product.quantity <= 0)
        )
        or 0
    )
    low_stock = (
        db.scalar(
            select(func.count())
            .select_from(Product)
            .where(Product.quantity < settings.LOW_STOCK_THRESHOLD)
        )
        or 0
    )
    total_sales = db.scalar(select(func.coalesce(func.sum(Bill.total), 0)))

    return DashboardStatsOut(
        total_products=total_products,
        out_of_stock=out_of_stock,
        low_stock=low_stock,
        total_sales=Decimal(str(total_sales)),
    )
