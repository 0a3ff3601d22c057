# shop/models.py
"""
Plain data types for the shop.

Nothing here is a Django ORM model: the source of truth is Firestore, and
each type knows how to read itself from a document snapshot (``from_doc``)
and how to write itself back (``to_doc``). Field names inside documents keep
the camelCase keys the web client already uses.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from django.conf import settings

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ============ Order status ============
class OrderStatus(str, Enum):
    NEW = "new"
    RECEIVED = "received"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @classmethod
    def from_raw(cls, value) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        raw = (value or "").strip().lower() if isinstance(value, str) else ""
        if raw in _VALUES:
            return cls(raw)
        if raw in LEGACY_STATUSES:
            return LEGACY_STATUSES[raw]
        logger.warning("Unknown order status %r, reading as 'new'", value)
        return cls.NEW


_VALUES = {s.value for s in OrderStatus}

# older documents were written with a different status set
LEGACY_STATUSES = {
    "pending": OrderStatus.NEW,
    "processed": OrderStatus.RECEIVED,
    "shipped": OrderStatus.COMPLETED,
}

STATUS_LABELS = {
    OrderStatus.NEW: "חדשה",
    OrderStatus.RECEIVED: "התקבלה",
    OrderStatus.COMPLETED: "הושלמה",
    OrderStatus.CANCELLED: "בוטלה",
}


def _to_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_datetime(value) -> Optional[datetime]:
    # Firestore hands back DatetimeWithNanoseconds, a datetime subclass
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return None


# ============ Products ============
@dataclass
class Product:
    id: str
    name: str
    description: str
    price: float
    imageUrl: str
    isActive: bool = True
    unitsPerBox: int = 1
    consumerPrice: float = 0.0
    category: str = ""

    @classmethod
    def from_doc(cls, snap) -> "Product":
        data = snap.to_dict() or {}
        price = _to_float(data.get("price"))
        try:
            units = int(data.get("unitsPerBox") or 1)
        except (TypeError, ValueError):
            units = 1
        return cls(
            id=snap.id,
            name=data.get("name") or "",
            description=data.get("description") or "",
            price=price,
            imageUrl=data.get("imageUrl") or settings.SHOP_PLACEHOLDER_IMAGE,
            isActive=bool(data.get("isActive", True)),
            unitsPerBox=max(units, 1),
            consumerPrice=_to_float(data.get("consumerPrice"), price),
            category=data.get("category") or "",
        )

    def to_doc(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "imageUrl": self.imageUrl,
            "isActive": self.isActive,
            "unitsPerBox": self.unitsPerBox,
            "consumerPrice": self.consumerPrice,
            "category": self.category,
        }


@dataclass
class CartItem:
    productId: str
    name: str
    price: float
    unitsPerBox: int
    quantity: int
    imageUrl: str = ""
    category: str = ""

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "CartItem":
        return cls(
            productId=product.id,
            name=product.name,
            price=product.price,
            unitsPerBox=product.unitsPerBox,
            quantity=quantity,
            imageUrl=product.imageUrl,
            category=product.category,
        )


# ============ Orders ============
@dataclass
class OrderItem:
    productId: str
    productName: str
    quantity: int
    priceAtOrder: float

    @classmethod
    def from_dict(cls, data: dict) -> "OrderItem":
        return cls(
            productId=data.get("productId") or "",
            productName=data.get("productName") or "",
            quantity=int(data.get("quantity") or 0),
            priceAtOrder=_to_float(data.get("priceAtOrder")),
        )

    def to_dict(self) -> dict:
        return {
            "productId": self.productId,
            "productName": self.productName,
            "quantity": self.quantity,
            "priceAtOrder": self.priceAtOrder,
        }


@dataclass
class Order:
    id: str
    customerName: str
    customerPhone: str
    customerAddress: str
    items: list[OrderItem]
    totalAmount: float
    orderTimestamp: datetime
    status: OrderStatus = OrderStatus.NEW
    customerNotes: Optional[str] = None
    agentNotes: Optional[str] = None
    isViewedByAgent: bool = False

    @classmethod
    def from_doc(cls, snap) -> "Order":
        data = snap.to_dict() or {}
        return cls(
            id=snap.id,
            customerName=data.get("customerName") or "",
            customerPhone=data.get("customerPhone") or "",
            customerAddress=data.get("customerAddress") or "",
            customerNotes=data.get("customerNotes") or None,
            items=[OrderItem.from_dict(i) for i in data.get("items") or []],
            totalAmount=_to_float(data.get("totalAmount")),
            orderTimestamp=_to_datetime(data.get("orderTimestamp")) or EPOCH,
            status=OrderStatus.from_raw(data.get("status")),
            isViewedByAgent=bool(data.get("isViewedByAgent", False)),
            agentNotes=data.get("agentNotes") or None,
        )

    def to_doc(self) -> dict:
        return {
            "customerName": self.customerName,
            "customerPhone": self.customerPhone,
            "customerAddress": self.customerAddress,
            "customerNotes": self.customerNotes or "",
            "items": [i.to_dict() for i in self.items],
            "totalAmount": self.totalAmount,
            "orderTimestamp": self.orderTimestamp,
            "status": self.status.value,
            "isViewedByAgent": self.isViewedByAgent,
            "agentNotes": self.agentNotes or "",
        }


# ============ Customers (derived) ============
@dataclass
class CustomerSummary:
    id: str            # the phone number
    name: str
    phone: str
    lastOrderDate: datetime
    firstOrderDate: Optional[datetime] = None
    totalOrders: int = 0
    totalSpent: float = 0.0
    latestAddress: Optional[str] = None
    generalAgentNotes: str = ""


# ============ Admin users ============
@dataclass
class AdminUser:
    id: str
    username: str
    passwordHash: str
    isSuperAdmin: bool = False
    displayName: str = ""

    # DRF permission classes look at these
    is_authenticated = True
    is_anonymous = False

    @classmethod
    def from_doc(cls, snap) -> "AdminUser":
        data = snap.to_dict() or {}
        username = data.get("username") or ""
        return cls(
            id=snap.id,
            username=username,
            passwordHash=data.get("passwordHash") or "",
            isSuperAdmin=bool(data.get("isSuperAdmin", False)),
            displayName=data.get("displayName") or username,
        )

    def to_doc(self) -> dict:
        return {
            "username": self.username,
            "passwordHash": self.passwordHash,
            "isSuperAdmin": self.isSuperAdmin,
            "displayName": self.displayName,
        }
