"""Tests for the product catalogue and buy/sell stock movements."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from shopdesk.app.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from shopdesk.app.models.activity_log import ActivityLog, LogType
from shopdesk.app.models.product import Product
from shopdesk.app.schemas.product import ProductCreate
from shopdesk.app.services.stock import (
    add_product,
    buy,
    delete_product,
    ensure_absolute_url,
    get_product,
    list_low_stock,
    list_products,
    sell,
)


# ═══════════════════════════════════════════════════════════════════════════════
#  Service-layer tests
# ═══════════════════════════════════════════════════════════════════════════════


class TestCatalogue:
    def test_add_product(self, db: Session, sink) -> None:
        product = add_product(
            db,
            ProductCreate(name="Tea", quantity=50, price=Decimal("3.5"), image="/img/tea.png"),
            sink=sink,
        )
        assert product.quantity == 50
        assert product.image == "http://localhost:8000/img/tea.png"
        assert sink.types() == ["add"]
        assert sink.entries[0].details["quantity"] == 50

    def test_absolute_urls_untouched(self) -> None:
        assert ensure_absolute_url("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"
        assert ensure_absolute_url(None) is None
        assert ensure_absolute_url("") is None

    def test_blank_name_rejected_by_schema(self) -> None:
        with pytest.raises(Exception):
            ProductCreate(name="  ", price=Decimal("1"))

    def test_negative_quantity_rejected_by_schema(self) -> None:
        with pytest.raises(Exception):
            ProductCreate(name="Tea", quantity=-1, price=Decimal("1"))

    def test_list_filters(
        self, db: Session, product_a: Product, product_b: Product
    ) -> None:
        assert [p.name for p in list_products(db)] == ["Product A", "Product B"]
        assert [p.name for p in list_products(db, category="Household")] == ["Product B"]
        assert [p.name for p in list_products(db, search="duct a")] == ["Product A"]

    def test_search_escapes_wildcards(self, db: Session, product_a: Product) -> None:
        assert list_products(db, search="%") == []

    def test_low_stock(self, db: Session, product_a: Product, product_b: Product) -> None:
        assert [p.name for p in list_low_stock(db)] == ["Product B"]
        assert [p.name for p in list_low_stock(db, threshold=11)] == [
            "Product B",
            "Product A",
        ]

    def test_delete_product(self, db: Session, product_a: Product, sink) -> None:
        product_id = product_a.id
        delete_product(db, product_id, sink=sink)
        with pytest.raises(NotFoundError, match="Product not found"):
            get_product(db, product_id)
        assert sink.types() == ["delete"]


class TestBuy:
    def test_buy_increments(self, db: Session, product_a: Product, sink) -> None:
        product = buy(db, product_a.id, 5, sink=sink)
        assert product.quantity == 15
        entry = sink.entries[-1]
        assert entry.type == LogType.BUY
        assert entry.details == {"quantity": 5, "previous": 10, "new": 15}

    def test_buy_defaults_to_one(self, db: Session, product_a: Product, sink) -> None:
        assert buy(db, product_a.id, sink=sink).quantity == 11

    def test_buy_has_no_upper_bound(self, db: Session, product_a: Product, sink) -> None:
        product = buy(db, product_a.id, 1_000_000, sink=sink)
        assert product.quantity == 1_000_010

    def test_buy_unknown_product(self, db: Session, sink) -> None:
        with pytest.raises(NotFoundError):
            buy(db, uuid.uuid4(), 1, sink=sink)
        assert sink.types() == ["error"]

    def test_non_positive_delta_rejected(self, db: Session, product_a: Product, sink) -> None:
        with pytest.raises(ValidationError):
            buy(db, product_a.id, 0, sink=sink)
        assert get_product(db, product_a.id).quantity == 10


class TestSell:
    def test_sell_decrements(self, db: Session, product_a: Product, sink) -> None:
        product = sell(db, product_a.id, 4, sink=sink)
        assert product.quantity == 6
        assert sink.entries[-1].details == {"quantity": 4, "previous": 10, "new": 6}

    def test_sell_entire_stock(self, db: Session, product_b: Product, sink) -> None:
        assert sell(db, product_b.id, 2, sink=sink).quantity == 0

    def test_sell_exceeding_stock_rejected(
        self, db: Session, product_b: Product, sink
    ) -> None:
        with pytest.raises(InsufficientStockError) as exc_info:
            sell(db, product_b.id, 3, sink=sink)
        assert "2 available, 3 requested" in exc_info.value.message
        assert get_product(db, product_b.id).quantity == 2
        assert sink.types() == ["error"]

    def test_stock_never_negative_over_sequence(
        self, db: Session, product_b: Product, sink
    ) -> None:
        for _ in range(5):
            try:
                sell(db, product_b.id, 1, sink=sink)
            except InsufficientStockError:
                pass
            assert get_product(db, product_b.id).quantity >= 0
        assert get_product(db, product_b.id).quantity == 0
        assert sink.types().count("error") == 3

    def test_sell_unknown_product(self, db: Session, sink) -> None:
        with pytest.raises(NotFoundError, match="Product not found"):
            sell(db, uuid.uuid4(), 1, sink=sink)


# ═══════════════════════════════════════════════════════════════════════════════
#  API endpoint tests
# ═══════════════════════════════════════════════════════════════════════════════


class TestProductsAPI:
    def test_create_and_get(self, client: TestClient) -> None:
        resp = client.post(
            "/api/products/", json={"name": "Coffee", "quantity": 8, "price": "12.5"}
        )
        assert resp.status_code == 201, resp.text
        product_id = resp.json()["id"]
        resp = client.get(f"/api/products/{product_id}")
        assert resp.json()["name"] == "Coffee"

    def test_add_wraps_in_message(self, client: TestClient) -> None:
        resp = client.post("/api/products/add", json={"name": "Milk", "price": 1})
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Product added successfully"
        assert body["product"]["quantity"] == 0

    def test_negative_price_is_400(self, client: TestClient) -> None:
        resp = client.post("/api/products/", json={"name": "Milk", "price": -1})
        assert resp.status_code == 400
        assert "price" in resp.json()["error"]

    def test_buy_and_sell(self, client: TestClient, product_a: Product) -> None:
        product_id = product_a.id
        resp = client.post(f"/api/products/{product_id}/buy", json={"quantity": 3})
        assert resp.json()["quantity"] == 13
        resp = client.post(f"/api/products/{product_id}/sell", json={"quantity": 13})
        assert resp.json()["quantity"] == 0

    def test_sell_without_body_sells_one(
        self, client: TestClient, product_a: Product
    ) -> None:
        resp = client.post(f"/api/products/{product_a.id}/sell")
        assert resp.status_code == 200, resp.text
        assert resp.json()["quantity"] == 9

    def test_oversell_is_400_and_logged(
        self, client: TestClient, db: Session, product_b: Product
    ) -> None:
        resp = client.post(f"/api/products/{product_b.id}/sell", json={"quantity": 5})
        assert resp.status_code == 400
        assert resp.json()["error"].startswith('Insufficient stock for "Product B"')
        logs = db.scalars(select(ActivityLog)).all()
        assert [log.type for log in logs] == [LogType.ERROR]

    def test_zero_quantity_is_400(self, client: TestClient, product_a: Product) -> None:
        resp = client.post(f"/api/products/{product_a.id}/buy", json={"quantity": 0})
        assert resp.status_code == 400

    def test_low_stock_endpoint(
        self, client: TestClient, product_a: Product, product_b: Product
    ) -> None:
        resp = client.get("/api/products/low-stock", params={"threshold": 3})
        assert [p["name"] for p in resp.json()] == ["Product B"]

    def test_delete_unknown_is_404(self, client: TestClient) -> None:
        resp = client.delete(f"/api/products/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Product not found"}
