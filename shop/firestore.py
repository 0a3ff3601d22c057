# shop/firestore.py
"""
Firestore client access.

The client is created lazily on first use. Credentials come from
FIREBASE_CREDENTIALS / GOOGLE_APPLICATION_CREDENTIALS; without a key file the
app falls back to the emulator (FIRESTORE_EMULATOR_HOST) or to application
default credentials.
"""
from __future__ import annotations

import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore
from django.conf import settings

logger = logging.getLogger(__name__)

PRODUCTS = "products"
ORDERS = "orders"
ADMIN_USERS = "adminUsers"
CUSTOMERS = "customers"

_db = None


def _init_app():
    if firebase_admin._apps:
        return
    cred_path = getattr(settings, "FIREBASE_CREDENTIALS", None)
    options = {"projectId": settings.FIREBASE_PROJECT_ID}
    if cred_path and os.path.exists(cred_path):
        firebase_admin.initialize_app(credentials.Certificate(cred_path), options)
        logger.info("Firebase initialized from key file %s", cred_path)
    elif os.getenv("FIRESTORE_EMULATOR_HOST"):
        firebase_admin.initialize_app(options=options)
        logger.info("Firebase initialized against emulator %s", os.getenv("FIRESTORE_EMULATOR_HOST"))
    else:
        firebase_admin.initialize_app(credentials.ApplicationDefault(), options)
        logger.info("Firebase initialized with application default credentials")


def get_db():
    """Return the shared Firestore client, creating it on first call."""
    global _db
    if _db is None:
        _init_app()
        _db = firestore.client()
    return _db


def set_db(client):
    """Swap the client (used by tests and scripts); ``None`` resets it."""
    global _db
    _db = client
