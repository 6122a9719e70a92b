"""Admin menu management and public menu endpoints."""

from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ordering.core.security import get_password_hash
from ordering.db import session as db_session
from ordering.db.base import Base
from ordering.main import app
from ordering.models.admin_user import AdminUser


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _prepare(tmp_path: Path, monkeypatch, name: str) -> None:
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)

    with testing_session_local() as db:
        db.add(
            AdminUser(
                email="manager@example.com",
                first_name="Manager",
                password_hash=get_password_hash("secret123"),
                role="MANAGER",
            )
        )
        db.commit()


def _admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/v1/admin/auth/login", json={"email": "manager@example.com", "password": "secret123"})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _create(client: TestClient, headers: dict[str, str], slug: str, **fields) -> dict:
    payload = {"slug": slug, "name": slug.replace("-", " ").title(), "price": "6.50", "category": "Burgers", **fields}
    response = client.post("/api/v1/admin/menu/items", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_update_and_validate_menu_items(tmp_path: Path, monkeypatch) -> None:
    _prepare(tmp_path, monkeypatch, "test_menu_crud.db")

    with TestClient(app) as client:
        headers = _admin_headers(client)
        created = _create(client, headers, "smash-burger", includes_sides=True)
        duplicate = client.post(
            "/api/v1/admin/menu/items",
            json={"slug": "smash-burger", "name": "Again", "price": "1.00"},
            headers=headers,
        )
        bad_slug = client.post(
            "/api/v1/admin/menu/items",
            json={"slug": "Smash Burger", "name": "Bad", "price": "1.00"},
            headers=headers,
        )
        updated = client.put(
            f"/api/v1/admin/menu/items/{created['id']}",
            json={"price": "7.20", "description": "Double patty"},
            headers=headers,
        )
        missing = client.get("/api/v1/admin/menu/items/999", headers=headers)

    assert created["includes_sides"] is True
    assert created["is_available"] is True
    assert duplicate.status_code == 409
    assert bad_slug.status_code == 400
    assert updated.status_code == 200
    assert Decimal(updated.json()["price"]) == Decimal("7.20")
    assert updated.json()["description"] == "Double patty"
    assert updated.json()["name"] == "Smash Burger"
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Menu item 999 not found"


def test_soft_delete_hides_item_and_blocks_ordering(tmp_path: Path, monkeypatch) -> None:
    _prepare(tmp_path, monkeypatch, "test_menu_soft_delete.db")

    with TestClient(app) as client:
        headers = _admin_headers(client)
        item = _create(client, headers, "veggie-wrap", category="Wraps")
        deleted = client.delete(f"/api/v1/admin/menu/items/{item['id']}", headers=headers)
        public_menu = client.get("/api/v1/menu").json()
        admin_default = client.get("/api/v1/admin/menu/items", headers=headers).json()
        admin_all = client.get("/api/v1/admin/menu/items", params={"include_deleted": "true"}, headers=headers).json()
        order = client.post(
            "/api/v1/orders",
            json={
                "order_type": "PICKUP",
                "customer_name": "Eva",
                "customer_phone": "0905111222",
                "items": [{"menu_item_id": item["id"], "quantity": 1}],
            },
        )
        restored = client.patch(f"/api/v1/admin/menu/items/{item['id']}/restore", headers=headers)

    assert deleted.status_code == 200
    assert deleted.json()["is_deleted"] is True
    assert deleted.json()["is_available"] is False
    assert public_menu == []
    assert admin_default == []
    assert [row["slug"] for row in admin_all] == ["veggie-wrap"]
    assert order.status_code == 404
    assert restored.json()["is_deleted"] is False


def test_availability_toggles_and_public_menu_grouping(tmp_path: Path, monkeypatch) -> None:
    _prepare(tmp_path, monkeypatch, "test_menu_availability.db")

    with TestClient(app) as client:
        headers = _admin_headers(client)
        burger = _create(client, headers, "classic-burger")
        cheese = _create(client, headers, "cheese-burger")
        wrap = _create(client, headers, "chicken-wrap", category="Wraps")

        hidden = client.patch(
            f"/api/v1/admin/menu/items/{wrap['id']}/availability",
            json={"is_available": False},
            headers=headers,
        )
        menu_without_wrap = client.get("/api/v1/menu").json()
        bulk = client.patch(
            "/api/v1/admin/menu/items/bulk-availability",
            json={"item_ids": [burger["id"], cheese["id"], wrap["id"]], "is_available": True},
            headers=headers,
        )
        menu = client.get("/api/v1/menu").json()
        customization = client.get("/api/v1/menu/customization").json()

    assert hidden.json()["is_available"] is False
    assert [group["category"] for group in menu_without_wrap] == ["Burgers"]
    assert bulk.json() == {"updated": 3}
    assert [group["category"] for group in menu] == ["Burgers", "Wraps"]
    assert [item["name"] for item in menu[0]["items"]] == ["Cheese Burger", "Classic Burger"]
    assert [sauce["slug"] for sauce in customization["sauces"]] == ["ketchup", "mayonnaise", "bbq", "garlic"]
    assert [option["slug"] for option in customization["fries_options"]] == ["regular", "sweet-potato", "cheese-fries"]
    assert Decimal(customization["extra_price"]) == Decimal("0.30")
