from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class DashboardStatsOut(BaseModel):
    total_products: int
    out_of_stock: int
    low_stock: int
    total_sales: Decimal


class UploadOut(BaseModel):
    files: list[str]
