"""
Tests for addresses, order history and category browsing.
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from dropx.models.order import Order, OrderItem


def _address(**overrides):
    body = {
        "label": "Home",
        "fullName": "Amina Test",
        "phone": "0991000000",
        "addressLine1": "12 Area 3",
        "city": "Lilongwe",
        "latitude": -13.96,
        "longitude": 33.77,
    }
    body.update(overrides)
    return body


class TestAddresses:
    def test_first_address_becomes_default(self, test_client: TestClient, auth_headers):
        response = test_client.post("/api/addresses", json=_address(), headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["data"]["isDefault"] is True

    def test_new_default_replaces_old_and_lists_first(self, test_client: TestClient, auth_headers):
        home = test_client.post("/api/addresses", json=_address(), headers=auth_headers).json()["data"]
        work = test_client.post(
            "/api/addresses", json=_address(label="Work", isDefault=True), headers=auth_headers
        ).json()["data"]

        listed = test_client.get("/api/addresses", headers=auth_headers).json()["data"]

        assert [a["id"] for a in listed] == [work["id"], home["id"]]
        assert [a["isDefault"] for a in listed] == [True, False]

    def test_update_and_delete(self, test_client: TestClient, auth_headers):
        created = test_client.post("/api/addresses", json=_address(), headers=auth_headers).json()["data"]

        updated = test_client.put(
            f"/api/addresses/{created['id']}", json=_address(city="Blantyre", isDefault=True), headers=auth_headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["city"] == "Blantyre"

        deleted = test_client.delete(f"/api/addresses/{created['id']}", headers=auth_headers)
        assert deleted.status_code == 200
        assert test_client.get("/api/addresses", headers=auth_headers).json()["data"] == []

    def test_latitude_out_of_range_is_400(self, test_client: TestClient, auth_headers):
        response = test_client.post("/api/addresses", json=_address(latitude=120), headers=auth_headers)

        assert response.status_code == 400

    def test_other_users_address_is_404(self, test_client: TestClient, auth_headers):
        other = test_client.post(
            "/api/auth/register",
            json={"fullName": "Other", "email": "other@example.com", "password": "secret9"},
        ).json()["data"]["access_token"]
        created = test_client.post(
            "/api/addresses", json=_address(), headers={"Authorization": f"Bearer {other}"}
        ).json()["data"]

        response = test_client.delete(f"/api/addresses/{created['id']}", headers=auth_headers)

        assert response.status_code == 404


class TestOrders:
    @pytest.fixture
    def orders(self, db, user, catalog):
        now = datetime.utcnow()
        placed = []
        for n, status in enumerate(["delivered", "pending", "delivered"]):
            order = Order(
                order_number=f"DX-{n:04d}",
                user_id=user.id,
                merchant_id=catalog["pizza"],
                status=status,
                payment_method="cash",
                subtotal=Decimal("2000.00"),
                delivery_fee=Decimal("150.00"),
                tax_amount=Decimal("330.00"),
                total_amount=Decimal("2480.00"),
                created_at=now - timedelta(hours=3 - n),
                updated_at=now,
            )
            order.items.append(
                OrderItem(menu_item_id=catalog["margherita"], name="Margherita", quantity=2, price=Decimal("1000.00"))
            )
            db.add(order)
            placed.append(order)
        db.commit()
        return [o.id for o in placed]

    def test_history_is_newest_first(self, test_client: TestClient, auth_headers, orders):
        data = test_client.get("/api/orders", headers=auth_headers).json()["data"]

        assert [o["id"] for o in data["orders"]] == list(reversed(orders))
        assert data["pagination"] == {"currentPage": 1, "perPage": 20, "total": 3, "lastPage": 1}
        first = data["orders"][0]
        assert first["merchantName"] == "Pizza Place"
        assert first["items"][0]["total"] == 2000.0
        assert first["totalAmount"] == 2480.0

    def test_filter_by_status_and_paginate(self, test_client: TestClient, auth_headers, orders):
        data = test_client.get(
            "/api/orders", params={"status": "delivered", "limit": 1, "page": 2}, headers=auth_headers
        ).json()["data"]

        assert data["pagination"]["total"] == 2
        assert data["pagination"]["lastPage"] == 2
        assert [o["id"] for o in data["orders"]] == [orders[0]]

    def test_unknown_status_is_400(self, test_client: TestClient, auth_headers, orders):
        response = test_client.get("/api/orders", params={"status": "lost"}, headers=auth_headers)

        assert response.status_code == 400

    def test_order_detail(self, test_client: TestClient, auth_headers, orders):
        response = test_client.get(f"/api/orders/{orders[1]}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "pending"

    def test_missing_order_is_404(self, test_client: TestClient, auth_headers, orders):
        response = test_client.get("/api/orders/9999", headers=auth_headers)

        assert response.status_code == 404


class TestCategories:
    def test_categories_start_with_all(self, test_client: TestClient, auth_headers, catalog):
        data = test_client.get("/api/categories", headers=auth_headers).json()["data"]

        assert [c["id"] for c in data] == ["all", "groceries", "restaurants"]
        assert data[0]["name"] == "All"

    def test_merchants_by_category(self, test_client: TestClient, auth_headers, catalog):
        data = test_client.get("/api/categories/restaurants/merchants", headers=auth_headers).json()["data"]

        # the inactive restaurant is hidden
        assert [m["name"] for m in data["merchants"]] == ["Pizza Place"]
        pizza = data["merchants"][0]
        assert pizza["menuItemsCount"] == 2
        assert pizza["deliveryFee"] == 150.0
        assert pizza["minOrderAmount"] == 2500.0
        assert data["pagination"]["total"] == 1

    def test_all_category_lists_every_active_merchant(self, test_client: TestClient, auth_headers, catalog):
        data = test_client.get("/api/categories/all/merchants", headers=auth_headers).json()["data"]

        assert [m["name"] for m in data["merchants"]] == ["Pizza Place", "Corner Grocer"]

    def test_unknown_category_is_empty(self, test_client: TestClient, auth_headers, catalog):
        data = test_client.get("/api/categories/pharmacy/merchants", headers=auth_headers).json()["data"]

        assert data["merchants"] == []
        assert data["pagination"]["lastPage"] == 1
