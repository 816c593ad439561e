from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from tienda_gamer.api import deps
from tienda_gamer.crud import order_crud
from tienda_gamer.main import app


def _order(order_id, payment_id, user_id, day, oversold=False):
    return SimpleNamespace(
        id=order_id,
        payment_id=payment_id,
        external_reference=f"ref-{order_id}",
        user_id=user_id,
        description="Compra de 1 producto(s)",
        total_amount=10000,
        status="approved",
        payment_method="visa",
        oversold=oversold,
        created_at=datetime(2026, 3, day, tzinfo=timezone.utc),
        items=[
            SimpleNamespace(
                item_id="p1",
                item_type="product",
                name="Control inalámbrico",
                quantity=1,
                price=10000,
                backordered_quantity=1 if oversold else 0,
            )
        ],
    )


@pytest.fixture
def calls(monkeypatch):
    stored = [
        _order(1, "100", "u-1", 1),
        _order(2, "200", "u-2", 2),
        _order(3, "300", "u-1", 3, oversold=True),
    ]
    seen = []

    async def get_orders_by_user(db, user_id, skip=0, limit=10):
        seen.append((user_id, skip, limit))
        mine = [o for o in stored if o.user_id == user_id]
        mine.sort(key=lambda o: o.created_at, reverse=True)
        return mine[skip:skip + limit]

    async def fake_db():
        yield None

    monkeypatch.setattr(order_crud, "get_orders_by_user", get_orders_by_user)
    app.dependency_overrides[deps.get_db] = fake_db
    yield seen
    app.dependency_overrides.clear()


def test_my_orders_newest_first(calls):
    response = TestClient(app).get("/api/v1/orders/me", headers={"X-User-Id": "u-1"})

    assert response.status_code == 200
    body = response.json()
    assert [o["payment_id"] for o in body] == ["300", "100"]
    assert body[0]["oversold"] is True
    assert body[0]["items"][0]["backordered_quantity"] == 1
    assert calls == [("u-1", 0, 20)]


def test_my_orders_pagination(calls):
    response = TestClient(app).get("/api/v1/orders/me", params={"skip": 1, "limit": 5}, headers={"X-User-Id": "u-1"})

    assert [o["payment_id"] for o in response.json()] == ["100"]
    assert calls == [("u-1", 1, 5)]


def test_my_orders_requires_user(calls):
    response = TestClient(app).get("/api/v1/orders/me")

    assert response.status_code == 401
    assert calls == []
