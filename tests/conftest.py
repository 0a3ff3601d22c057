"""Shared pytest fixtures for the shop tests."""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from shop import services
from shop.firestore import ORDERS, PRODUCTS, set_db
from tests.fakes import FakeFirestore


class FakeSession(dict):
    """Dict with the ``modified`` flag Django sessions carry."""
    modified = False


@pytest.fixture(autouse=True)
def fast_hashers(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture(autouse=True)
def fake_db():
    """Every test runs against an empty in-memory Firestore."""
    db = FakeFirestore()
    set_db(db)
    yield db
    set_db(None)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def add_product(fake_db):
    def _add(doc_id, **fields):
        data = {
            "name": f"מוצר {doc_id}",
            "description": "תיאור מוצר לבדיקה",
            "price": 10.0,
            "consumerPrice": 12.0,
            "imageUrl": "https://example.com/p.png",
            "category": "כללי",
            "isActive": True,
            "unitsPerBox": 1,
        }
        data.update(fields)
        fake_db.collection(PRODUCTS).document(doc_id).set(data)
        return services.get_product_by_id(doc_id)
    return _add


@pytest.fixture
def add_order(fake_db):
    def _add(doc_id, *, days_ago=0, **fields):
        data = {
            "customerName": "ישראל ישראלי",
            "customerPhone": "050-1234567",
            "customerAddress": "רחוב הראשי 1, תל אביב",
            "customerNotes": "",
            "items": [{"productId": "p1", "productName": "מוצר p1", "quantity": 2, "priceAtOrder": 10.0}],
            "totalAmount": 20.0,
            "orderTimestamp": timezone.now() - timedelta(days=days_ago),
            "status": "new",
            "isViewedByAgent": False,
            "agentNotes": "",
        }
        data.update(fields)
        fake_db.collection(ORDERS).document(doc_id).set(data)
        return services.get_order_by_id(doc_id)
    return _add


@pytest.fixture
def agent():
    return services.create_admin_user("agent", "agentpass", display_name="סוכן")


@pytest.fixture
def super_admin():
    return services.create_admin_user("boss", "bosspass", is_super_admin=True)


@pytest.fixture
def admin_client(api_client, agent):
    response = api_client.post("/api/admin/login/", {"username": "agent", "password": "agentpass"}, format="json")
    assert response.status_code == 200
    return api_client


@pytest.fixture
def super_client(api_client, super_admin):
    response = api_client.post("/api/admin/login/", {"username": "boss", "password": "bosspass"}, format="json")
    assert response.status_code == 200
    return api_client
