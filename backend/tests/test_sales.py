from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from tienda_gamer.api import deps
from tienda_gamer.core.exceptions import InsufficientStockError
from tienda_gamer.crud import catalog_crud, sale_crud
from tienda_gamer.main import app
from tienda_gamer.schemas.sale_schema import SaleCreate


class FakeDB:
    def __init__(self):
        self.added = []
        self.commits = 0
        self.rollbacks = 0

    def add(self, obj):
        self.added.append(obj)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def refresh(self, obj):
        obj.id = 1


@pytest.fixture
def product(monkeypatch):
    product = SimpleNamespace(id="p1", name="Control inalámbrico", price=10000, stock=3)

    async def get_product(db, product_id):
        return product if product_id == product.id else None

    async def deduct_stock(db, product_id, quantity):
        if product.stock < quantity:
            raise InsufficientStockError(product.name, quantity, product.stock)
        product.stock -= quantity
        return product

    monkeypatch.setattr(catalog_crud, "get_product", get_product)
    monkeypatch.setattr(catalog_crud, "deduct_stock", deduct_stock)
    return product


async def test_sale_deducts_stock_and_prices_from_catalog(product):
    db = FakeDB()

    sale = await sale_crud.register_sale(db, SaleCreate(product_id="p1", quantity=2), "vendedor-1")

    assert sale.total_price == 20000
    assert sale.sold_by == "vendedor-1"
    assert product.stock == 1
    assert db.commits == 1


async def test_sale_over_stock_rolls_back(product):
    db = FakeDB()

    with pytest.raises(InsufficientStockError):
        await sale_crud.register_sale(db, SaleCreate(product_id="p1", quantity=5), "vendedor-1")

    assert product.stock == 3
    assert db.added == []
    assert db.rollbacks == 1


def test_sale_endpoint_reports_insufficient_inventory(product):
    async def fake_db():
        yield FakeDB()

    app.dependency_overrides[deps.get_db] = fake_db
    try:
        client = TestClient(app)
        response = client.post("/api/v1/sales/", json={"product_id": "p1", "quantity": 9}, headers={"X-User-Id": "v-1"})
        anonymous = client.post("/api/v1/sales/", json={"product_id": "p1", "quantity": 1})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 409
    assert response.json()["detail"].startswith("Inventario insuficiente.")
    assert anonymous.status_code == 401
