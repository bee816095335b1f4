from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopdesk.app.core.config import settings
from shopdesk.app.core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from shopdesk.app.models.activity_log import LogType
from shopdesk.app.models.product import Product
from shopdesk.app.schemas.activity_log import LogEntryCreate
from shopdesk.app.schemas.product import ProductCreate
from shopdesk.app.services.activity_log import LogSink, emit, record_failure, resolve_sink

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Product not found"


def ensure_absolute_url(url: str | None) -> str | None:
    """Prefix relative image paths with the public base URL."""
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        return url
    base = settings.PUBLIC_BASE_URL.rstrip("/")
    return f"{base}/{url.lstrip('/')}"


def _check_delta(quantity: int) -> None:
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than zero")


# ─── Catalogue ───────────────────────────────────────────────────────────────


def add_product(
    db: Session,
    data: ProductCreate,
    *,
    sink: LogSink | None = None,
) -> Product:
    sink = resolve_sink(db, sink)
    product = Product(
        name=data.name,
        quantity=data.quantity,
        price=data.price,
        image=ensure_absolute_url(data.image),
        description=data.description,
        category=data.category,
    )
    try:
        db.add(product)
        db.commit()
    except SQLAlchemyError as exc:
        record_failure(db, sink, "add product", exc, related_item_type="product")
        raise UnexpectedError("Error adding product") from exc

    product_id = product.id
    emit(
        sink,
        LogEntryCreate(
            type=LogType.ADD,
            description=(
                f'Product "{data.name}" added with initial quantity {data.quantity}'
            ),
            related_item_id=str(product_id),
            related_item_name=data.name,
            related_item_type="product",
            details={"quantity": data.quantity, "price": str(data.price)},
        ),
    )
    return get_product(db, product_id)


def get_product(db: Session, product_id: UUID) -> Product:
    product = db.get(Product, product_id, populate_existing=True)
    if product is None:
        raise NotFoundError(PRODUCT_NOT_FOUND)
    return product


def list_products(
    db: Session,
    category: str | None = None,
    search: str | None = None,
) -> list[Product]:
    query = select(Product)
    if category:
        query = query.where(Product.category == category)
    if search:
        query = query.where(Product.name.icontains(search, autoescape=True))
    return list(db.scalars(query.order_by(Product.name)).all())


def list_low_stock(db: Session, threshold: int | None = None) -> list[Product]:
    """Products with fewer than *threshold* units on hand, lowest first."""
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD
    return list(
        db.scalars(
            select(Product)
            .where(Product.quantity < threshold)
            .order_by(Product.quantity, Product.name)
        ).all()
    )


def delete_product(
    db: Session,
    product_id: UUID,
    *,
    sink: LogSink | None = None,
) -> None:
    sink = resolve_sink(db, sink)
    try:
        product = get_product(db, product_id)
        name = product.name
        quantity = product.quantity
        db.delete(product)
        db.commit()
    except NotFoundError as exc:
        record_failure(
            db,
            sink,
            "delete product",
            exc,
            related_item_id=str(product_id),
            related_item_type="product",
        )
        raise
    except SQLAlchemyError as exc:
        record_failure(
            db,
            sink,
            "delete product",
            exc,
            related_item_id=str(product_id),
            related_item_type="product",
        )
        raise UnexpectedError("Failed to delete product") from exc

    emit(
        sink,
        LogEntryCreate(
            type=LogType.DELETE,
            description=f'Product "{name}" deleted',
            related_item_id=str(product_id),
            related_item_name=name,
            related_item_type="product",
            details={"quantity": quantity},
        ),
    )


# ─── Stock movements ─────────────────────────────────────────────────────────


def buy(
    db: Session,
    product_id: UUID,
    quantity: int = 1,
    *,
    sink: LogSink | None = None,
) -> Product:
    """Add *quantity* units to stock. There is no upper bound."""
    sink = resolve_sink(db, sink)
    try:
        _check_delta(quantity)
        row = db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(quantity=Product.quantity + quantity)
            .returning(Product.name, Product.quantity)
            .execution_options(synchronize_session=False)
        ).one_or_none()
        if row is None:
            raise NotFoundError(PRODUCT_NOT_FOUND)
        db.commit()
    except (ValidationError, NotFoundError) as exc:
        record_failure(
            db,
            sink,
            "buy stock",
            exc,
            related_item_id=str(product_id),
            related_item_type="product",
        )
        raise
    except SQLAlchemyError as exc:
        record_failure(
            db,
            sink,
            "buy stock",
            exc,
            related_item_id=str(product_id),
            related_item_type="product",
        )
        raise UnexpectedError("Failed to update stock") from exc

    name, new_quantity = row
    previous = new_quantity - quantity
    emit(
        sink,
        LogEntryCreate(
            type=LogType.BUY,
            description=(
                f'Bought {quantity} of "{name}": stock {previous} -> {new_quantity}'
            ),
            related_item_id=str(product_id),
            related_item_name=name,
            related_item_type="product",
            details={"quantity": quantity, "previous": previous, "new": new_quantity},
        ),
    )
    return get_product(db, product_id)


def sell(
    db: Session,
    product_id: UUID,
    quantity: int = 1,
    *,
    sink: LogSink | None = None,
) -> Product:
    """Remove *quantity* units from stock.

    The decrement is guarded by ``quantity >= N`` in the UPDATE itself, so
    concurrent sells can never take the count below zero. A sell that would
    is rejected with no state change.
    """
    sink = resolve_sink(db, sink)
    try:
        _check_delta(quantity)
        row = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity)
            .returning(Product.name, Product.quantity)
            .execution_options(synchronize_session=False)
        ).one_or_none()
        if row is None:
            product = db.get(Product, product_id, populate_existing=True)
            if product is None:
                raise NotFoundError(PRODUCT_NOT_FOUND)
            raise InsufficientStockError(
                f'Insufficient stock for "{product.name}": '
                f"{product.quantity} available, {quantity} requested"
            )
        db.commit()
    except (ValidationError, NotFoundError, InsufficientStockError) as exc:
        record_failure(
            db,
            sink,
            "sell stock",
            exc,
            related_item_id=str(product_id),
            related_item_type="product",
        )
        raise
    except SQLAlchemyError as exc:
        record_failure(
            db,
            sink,
            "sell stock",
            exc,
            related_item_id=str(product_id),
            related_item_type="product",
        )
        raise UnexpectedError("Failed to update stock") from exc

    name, new_quantity = row
    previous = new_quantity + quantity
    emit(
        sink,
        LogEntryCreate(
            type=LogType.SELL,
            description=(
                f'Sold {quantity} of "{name}": stock {previous} -> {new_quantity}'
            ),
            related_item_id=str(product_id),
            related_item_name=name,
            related_item_type="product",
            details={"quantity": quantity, "previous": previous, "new": new_quantity},
        ),
    )
    return get_product(db, product_id)
