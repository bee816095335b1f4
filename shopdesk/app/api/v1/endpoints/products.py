from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopdesk.app.api.deps import get_log_sink
from shopdesk.app.core.database import get_db
from shopdesk.app.models.product import Product
from shopdesk.app.schemas.product import (
    ProductAddedOut,
    ProductCreate,
    ProductOut,
    StockChange,
)
from shopdesk.app.services import stock
from shopdesk.app.services.activity_log import LogSink

router = APIRouter()


@router.get("/", response_model=list[ProductOut])
def list_products(
    category: str | None = Query(None),
    search: str | None = Query(None, description="Search by name"),
    db: Session = Depends(get_db),
) -> list[Product]:
    return stock.list_products(db, category=category, search=search)


@router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> Product:
    return stock.add_product(db, payload, sink=sink)


@router.post(
    "/add", response_model=ProductAddedOut, status_code=status.HTTP_201_CREATED
)
def add_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> ProductAddedOut:
    """Same as ``POST /products`` but wraps the product in a message envelope."""
    product = stock.add_product(db, payload, sink=sink)
    return ProductAddedOut(
        message="Product added successfully",
        product=ProductOut.model_validate(product),
    )


@router.get("/low-stock", response_model=list[ProductOut])
def low_stock(
    threshold: int | None = Query(None, ge=0),
    db: Session = Depends(get_db),
) -> list[Product]:
    return stock.list_low_stock(db, threshold)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: UUID, db: Session = Depends(get_db)) -> Product:
    return stock.get_product(db, product_id)


@router.delete("/{product_id}")
def delete_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> dict:
    stock.delete_product(db, product_id, sink=sink)
    return {"message": "Product deleted successfully"}


@router.post("/{product_id}/buy", response_model=ProductOut)
def buy(
    product_id: UUID,
    payload: StockChange | None = None,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> Product:
    quantity = payload.quantity if payload else 1
    return stock.buy(db, product_id, quantity, sink=sink)


@router.post("/{product_id}/sell", response_model=ProductOut)
def sell(
    product_id: UUID,
    payload: StockChange | None = None,
    db: Session = Depends(get_db),
    sink: LogSink = Depends(get_log_sink),
) -> Product:
    quantity = payload.quantity if payload else 1
    return stock.sell(db, product_id, quantity, sink=sink)
