"""Tests for the HTTP API, storefront and back office."""

import pytest
from google.api_core import exceptions as google_exceptions

from shop import services
from shop.firestore import ORDERS


# ============================================================
# Catalog
# ============================================================
class TestCatalog:
    def test_lists_active_products_with_categories(self, api_client, add_product):
        add_product("a", name="אבקה", category="אבקות")
        add_product("b", name="מרכך", category="מרככים", isActive=False)

        response = api_client.get("/api/catalog/")

        assert response.status_code == 200
        assert response.data["count"] == 1
        assert response.data["results"][0]["name"] == "אבקה"
        assert response.data["categories"] == ["אבקות"]

    def test_pages_of_ten(self, api_client, add_product):
        for i in range(12):
            add_product(f"p{i:02d}", name=f"מוצר {i:02d}")

        first = api_client.get("/api/catalog/")
        second = api_client.get("/api/catalog/", {"page": 2})

        assert len(first.data["results"]) == 10
        assert first.data["totalPages"] == 2
        assert len(second.data["results"]) == 2
        assert second.data["currentPage"] == 2

    def test_filters(self, api_client, add_product):
        add_product("a", name="אבקה", category="אבקות")
        add_product("b", name="מרכך", category="מרככים")

        response = api_client.get("/api/catalog/", {"category": "מרככים"})
        assert [p["id"] for p in response.data["results"]] == ["b"]

        response = api_client.get("/api/catalog/", {"q": "אבק"})
        assert [p["id"] for p in response.data["results"]] == ["a"]

    def test_categories_endpoint(self, api_client, add_product):
        add_product("a", category="ב")
        add_product("b", category="א")

        assert api_client.get("/api/catalog/categories/").data == {"categories": ["א", "ב"]}

    def test_firestore_outage_is_503(self, api_client, monkeypatch):
        def boom():
            raise google_exceptions.ServiceUnavailable("down")
        monkeypatch.setattr(services, "get_products_for_catalog", boom)

        response = api_client.get("/api/catalog/")

        assert response.status_code == 503
        assert "detail" in response.data


# ============================================================
# Cart + checkout
# ============================================================
CHECKOUT = {
    "customerName": "ישראל ישראלי",
    "customerPhone": "050-1234567",
    "customerAddress": "רחוב הראשי 1, תל אביב",
    "customerNotes": "להתקשר לפני",
}


class TestCart:
    def test_cart_flow(self, api_client, add_product):
        add_product("p1", price=5.0, unitsPerBox=6)

        response = api_client.post("/api/cart/items/", {"productId": "p1"}, format="json")
        assert response.status_code == 201
        assert response.data["items"][0]["quantity"] == 6

        response = api_client.post("/api/cart/items/p1/increment/")
        assert response.data["totalItems"] == 12
        assert response.data["totalPrice"] == 60.0

        response = api_client.patch("/api/cart/items/p1/", {"quantity": 13}, format="json")
        assert response.data["items"][0]["quantity"] == 18

        response = api_client.post("/api/cart/items/p1/decrement/")
        assert response.data["items"][0]["quantity"] == 12

        response = api_client.get("/api/cart/")
        assert response.data["uniqueProductCount"] == 1

        response = api_client.delete("/api/cart/items/p1/")
        assert response.data["items"] == []

    def test_clear(self, api_client, add_product):
        add_product("p1")
        api_client.post("/api/cart/items/", {"productId": "p1", "quantity": 3}, format="json")

        response = api_client.delete("/api/cart/")

        assert response.data["totalItems"] == 0

    def test_unknown_and_inactive_products(self, api_client, add_product):
        add_product("off", isActive=False)

        assert api_client.post("/api/cart/items/", {"productId": "ghost"}, format="json").status_code == 404
        assert api_client.post("/api/cart/items/", {"productId": "off"}, format="json").status_code == 400

    def test_step_on_missing_line(self, api_client):
        assert api_client.post("/api/cart/items/ghost/increment/").status_code == 404
        assert api_client.patch("/api/cart/items/ghost/", {"quantity": 2}, format="json").status_code == 404


class TestCheckout:
    def test_checkout_creates_order_and_clears_cart(self, api_client, add_product, fake_db):
        add_product("p1", price=10.0, unitsPerBox=4)
        api_client.post("/api/cart/items/", {"productId": "p1"}, format="json")

        response = api_client.post("/api/checkout/", CHECKOUT, format="json")

        assert response.status_code == 201
        order_id = response.data["id"]
        assert response.data["totalAmount"] == 40.0
        assert response.data["status"] == "new"
        assert order_id in response.data["message"]
        assert fake_db.docs(ORDERS)[order_id]["agentNotes"] == "להתקשר לפני"
        assert api_client.get("/api/cart/").data["items"] == []

        confirmation = api_client.get(f"/api/orders/{order_id}/confirmation/")
        assert confirmation.status_code == 200
        assert confirmation.data["items"][0]["quantity"] == 4

    def test_empty_cart(self, api_client):
        response = api_client.post("/api/checkout/", CHECKOUT, format="json")

        assert response.status_code == 400
        assert response.data["detail"] == "העגלה ריקה."

    @pytest.mark.parametrize("field, value", [
        ("customerName", "א"),
        ("customerPhone", "12345"),
        ("customerPhone", "050-12345678"),
        ("customerAddress", "קצר"),
    ])
    def test_form_validation(self, api_client, field, value):
        response = api_client.post("/api/checkout/", {**CHECKOUT, field: value}, format="json")

        assert response.status_code == 400
        assert field in response.data

    @pytest.mark.parametrize("phone", ["0501234567", "050-1234567", "03-1234567", "031234567"])
    def test_valid_phone_formats(self, api_client, add_product, phone):
        add_product("p1")
        api_client.post("/api/cart/items/", {"productId": "p1"}, format="json")

        response = api_client.post("/api/checkout/", {**CHECKOUT, "customerPhone": phone}, format="json")

        assert response.status_code == 201

    def test_unknown_confirmation(self, api_client):
        assert api_client.get("/api/orders/ghost/confirmation/").status_code == 404


# ============================================================
# Admin auth
# ============================================================
class TestAdminAuth:
    @pytest.mark.parametrize("url", [
        "/api/admin/products/", "/api/admin/orders/", "/api/admin/customers/",
        "/api/admin/dashboard/", "/api/admin/me/", "/api/admin/agents/",
    ])
    def test_requires_login(self, api_client, url):
        assert api_client.get(url).status_code == 403

    def test_bad_credentials(self, api_client, agent):
        response = api_client.post("/api/admin/login/", {"username": "agent", "password": "nope"}, format="json")

        assert response.status_code == 400
        assert api_client.get("/api/admin/me/").status_code == 403

    def test_login_me_logout(self, admin_client):
        me = admin_client.get("/api/admin/me/")
        assert me.data["username"] == "agent"
        assert "passwordHash" not in me.data

        assert admin_client.post("/api/admin/logout/").status_code == 204
        assert admin_client.get("/api/admin/me/").status_code == 403

    def test_logout_keeps_cart(self, admin_client, add_product):
        add_product("p1")
        admin_client.post("/api/cart/items/", {"productId": "p1"}, format="json")

        admin_client.post("/api/admin/logout/")

        assert admin_client.get("/api/cart/").data["totalItems"] == 1

    def test_deleted_agent_loses_access(self, admin_client, agent, fake_db):
        fake_db.collection("adminUsers").document(agent.id).delete()

        assert admin_client.get("/api/admin/me/").status_code == 403


# ============================================================
# Admin products
# ============================================================
PRODUCT = {
    "name": "אבקת כביסה",
    "description": "אבקת כביסה לכל סוגי הבדים",
    "price": 39.9,
    "category": "אבקות",
    "unitsPerBox": 8,
}


class TestAdminProducts:
    def test_create_and_list(self, admin_client):
        response = admin_client.post("/api/admin/products/", PRODUCT, format="json")
        assert response.status_code == 201
        assert response.data["consumerPrice"] == 39.9
        assert response.data["isActive"] is True

        listing = admin_client.get("/api/admin/products/")
        assert listing.data["count"] == 1
        assert listing.data["categories"] == ["אבקות"]

    @pytest.mark.parametrize("field, value", [
        ("name", "אב"),
        ("description", "קצר"),
        ("price", 0),
        ("price", -5),
        ("unitsPerBox", 0),
        ("imageUrl", "not a url"),
    ])
    def test_validation(self, admin_client, field, value):
        response = admin_client.post("/api/admin/products/", {**PRODUCT, field: value}, format="json")

        assert response.status_code == 400
        assert field in response.data

    def test_partial_update_keeps_other_fields(self, admin_client, add_product):
        add_product("p1", unitsPerBox=12, isActive=False)

        response = admin_client.patch("/api/admin/products/p1/", {"price": 15}, format="json")

        assert response.status_code == 200
        assert response.data["price"] == 15.0
        assert response.data["unitsPerBox"] == 12
        assert response.data["isActive"] is False

    def test_toggle_retrieve_delete(self, admin_client, add_product):
        add_product("p1")

        response = admin_client.post("/api/admin/products/p1/active/", {"isActive": False}, format="json")
        assert response.data["isActive"] is False
        assert admin_client.get("/api/admin/products/", {"active": "false"}).data["count"] == 1
        assert admin_client.get("/api/admin/products/p1/").status_code == 200

        assert admin_client.delete("/api/admin/products/p1/").status_code == 204
        assert admin_client.get("/api/admin/products/p1/").status_code == 404
        assert admin_client.delete("/api/admin/products/p1/").status_code == 404


# ============================================================
# Admin orders
# ============================================================
class TestAdminOrders:
    def test_list_filters_and_pages(self, admin_client, add_order):
        for i in range(12):
            add_order(f"o{i:02d}", days_ago=i, status="completed" if i % 2 else "new")

        page = admin_client.get("/api/admin/orders/")
        assert page.data["count"] == 12
        assert len(page.data["results"]) == 10
        assert page.data["results"][0]["id"] == "o00"

        completed = admin_client.get("/api/admin/orders/", {"status": "completed"})
        assert completed.data["count"] == 6

        week = admin_client.get("/api/admin/orders/", {"period": "thisWeek"})
        assert week.data["count"] == 7

    def test_bad_filters(self, admin_client):
        assert admin_client.get("/api/admin/orders/", {"status": "shipped"}).status_code == 400
        response = admin_client.get("/api/admin/orders/", {"startDate": "2024-05-10", "endDate": "2024-05-01"})
        assert response.status_code == 400

    def test_status_viewed_notes(self, admin_client, add_order):
        add_order("o1")

        viewed = admin_client.post("/api/admin/orders/o1/viewed/")
        assert viewed.data["status"] == "received"
        assert viewed.data["statusLabel"] == "התקבלה"

        done = admin_client.post("/api/admin/orders/o1/status/", {"status": "completed"}, format="json")
        assert done.data["status"] == "completed"
        assert done.data["isViewedByAgent"] is True

        notes = admin_client.post("/api/admin/orders/o1/notes/", {"agentNotes": "סופק"}, format="json")
        assert notes.data["agentNotes"] == "סופק"

        assert admin_client.get("/api/admin/orders/o1/").data["agentNotes"] == "סופק"

    def test_invalid_status_and_missing_order(self, admin_client, add_order):
        add_order("o1")

        assert admin_client.post("/api/admin/orders/o1/status/", {"status": "lost"}, format="json").status_code == 400
        assert admin_client.post("/api/admin/orders/ghost/status/", {"status": "new"}, format="json").status_code == 404
        assert admin_client.get("/api/admin/orders/ghost/").status_code == 404


# ============================================================
# Admin customers
# ============================================================
class TestAdminCustomers:
    def test_list_search_detail(self, admin_client, add_order):
        add_order("o1", customerName="שרה לוי", customerPhone="052-7654321")
        add_order("o2", customerName="משה כהן", customerPhone="054-1122333", days_ago=1)

        listing = admin_client.get("/api/admin/customers/")
        assert listing.data["count"] == 2

        search = admin_client.get("/api/admin/customers/", {"q": "משה"})
        assert [c["phone"] for c in search.data["results"]] == ["054-1122333"]

        detail = admin_client.get("/api/admin/customers/052-7654321/")
        assert detail.data["name"] == "שרה לוי"
        assert detail.data["totalOrders"] == 1

        orders = admin_client.get("/api/admin/customers/052-7654321/orders/")
        assert [o["id"] for o in orders.data["results"]] == ["o1"]

    def test_notes_and_rename(self, admin_client, add_order):
        add_order("o1")

        notes = admin_client.post("/api/admin/customers/050-1234567/notes/",
                                  {"generalAgentNotes": "משלם במזומן"}, format="json")
        assert notes.data["generalAgentNotes"] == "משלם במזומן"

        renamed = admin_client.post("/api/admin/customers/050-1234567/name/", {"name": "ישראל"}, format="json")
        assert renamed.data["name"] == "ישראל"

        assert admin_client.post("/api/admin/customers/050-1234567/name/", {"name": ""},
                                 format="json").status_code == 400

    def test_pages_of_fifteen(self, admin_client, add_order):
        for i in range(17):
            add_order(f"o{i:02d}", customerPhone=f"050-12345{i:02d}", days_ago=i)

        first = admin_client.get("/api/admin/customers/")
        second = admin_client.get("/api/admin/customers/", {"page": 2})

        assert first.data["count"] == 17
        assert len(first.data["results"]) == 15
        assert first.data["totalPages"] == 2
        assert [c["phone"] for c in second.data["results"]] == ["050-1234515", "050-1234516"]

    def test_unknown_customer(self, admin_client):
        assert admin_client.get("/api/admin/customers/000/").status_code == 404
        assert admin_client.post("/api/admin/customers/000/notes/", {"generalAgentNotes": "x"},
                                 format="json").status_code == 404


# ============================================================
# Dashboard + agents
# ============================================================
class TestDashboard:
    def test_summary(self, admin_client, add_product, add_order):
        add_product("p1")
        add_order("o1", status="completed", totalAmount=30.0)
        add_order("o2", status="new", days_ago=1)

        response = admin_client.get("/api/admin/dashboard/")

        assert response.data["totalProducts"] == 1
        assert response.data["totalOrders"] == 2
        assert response.data["allTimeRevenue"] == 30.0
        assert [o["id"] for o in response.data["latestOrders"]] == ["o1", "o2"]

    def test_latest_orders_capped_at_five(self, admin_client, add_order):
        for i in range(7):
            add_order(f"o{i}", days_ago=i)

        response = admin_client.get("/api/admin/dashboard/")

        assert response.data["totalOrders"] == 7
        assert [o["id"] for o in response.data["latestOrders"]] == ["o0", "o1", "o2", "o3", "o4"]

    def test_revenue(self, admin_client, add_order):
        add_order("o1", status="completed", totalAmount=30.0)

        response = admin_client.get("/api/admin/dashboard/revenue/", {"period": "today"})

        assert response.data == {"period": "today", "periodLabel": "היום", "revenue": 30.0}
        assert admin_client.get("/api/admin/dashboard/revenue/", {"period": "decade"}).status_code == 400

    def test_custom_revenue_rejects_inverted_range(self, admin_client, add_order):
        add_order("o1", status="completed", totalAmount=30.0)

        response = admin_client.get("/api/admin/dashboard/revenue/",
                                    {"period": "custom", "startDate": "2024-05-10", "endDate": "2024-05-01"})

        assert response.status_code == 400


class TestAgents:
    def test_regular_agent_is_forbidden(self, admin_client):
        assert admin_client.get("/api/admin/agents/").status_code == 403

    def test_super_admin_lists_and_creates(self, super_client):
        created = super_client.post("/api/admin/agents/", {"username": "newbie", "password": "secret1"},
                                    format="json")
        assert created.status_code == 201
        assert created.data["isSuperAdmin"] is False

        names = [u["username"] for u in super_client.get("/api/admin/agents/").data]
        assert names == ["boss", "newbie"]

        duplicate = super_client.post("/api/admin/agents/", {"username": "newbie", "password": "secret1"},
                                      format="json")
        assert duplicate.status_code == 400
