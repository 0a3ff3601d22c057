# shop/services.py
"""
Thin service layer over Firestore.

Every function reads or writes whole documents by id; there are no
transactions here beyond Firestore's own per-document atomicity. Lookups
return ``None`` when the document does not exist, rule violations raise a
``ShopError`` subclass.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Optional

from django.conf import settings
from django.contrib.auth.hashers import check_password, identify_hasher, make_password
from django.utils import timezone
from django.utils.crypto import constant_time_compare

from .firestore import ADMIN_USERS, CUSTOMERS, ORDERS, PRODUCTS, get_db
from .models import (
    # catalog
    Product,
    # orders
    Order, OrderItem, OrderStatus,
    # people
    AdminUser, CustomerSummary,
)

logger = logging.getLogger(__name__)


class ShopError(Exception):
    pass


class CartError(ShopError):
    pass


class CheckoutError(ShopError):
    pass


class AuthError(ShopError):
    pass


def _collection(name: str):
    return get_db().collection(name)


def _by_name(products: Iterable[Product]) -> list[Product]:
    return sorted(products, key=lambda p: p.name.casefold())


# ================== Products ==================

def get_products_for_catalog() -> list[Product]:
    products = [Product.from_doc(s) for s in _collection(PRODUCTS).stream()]
    active = _by_name(p for p in products if p.isActive)
    logger.info("Fetched %d active products for catalog", len(active))
    return active


def get_all_products_for_admin() -> list[Product]:
    products = _by_name(Product.from_doc(s) for s in _collection(PRODUCTS).stream())
    logger.info("Fetched %d products for admin", len(products))
    return products


def get_product_by_id(product_id: str) -> Optional[Product]:
    snap = _collection(PRODUCTS).document(product_id).get()
    if not snap.exists:
        logger.warning("Product %s not found", product_id)
        return None
    return Product.from_doc(snap)


def create_product(data: dict) -> Product:
    ref = _collection(PRODUCTS).document()
    price = float(data["price"])
    consumer_price = data.get("consumerPrice")
    product = Product(
        id=ref.id,
        name=data["name"],
        description=data.get("description") or "",
        price=price,
        imageUrl=data.get("imageUrl") or settings.SHOP_PLACEHOLDER_IMAGE,
        isActive=data.get("isActive", True),
        unitsPerBox=int(data.get("unitsPerBox") or 1),
        consumerPrice=float(consumer_price) if consumer_price is not None else price,
        category=data.get("category") or "",
    )
    ref.set(product.to_doc())
    logger.info("Product created with id %s", ref.id)
    return product


def update_product(product_id: str, data: dict) -> Optional[Product]:
    ref = _collection(PRODUCTS).document(product_id)
    if not ref.get().exists:
        logger.warning("Cannot update product %s: not found", product_id)
        return None
    updates = dict(data)
    if "price" in updates:
        updates["price"] = float(updates["price"])
    if "consumerPrice" in updates:
        updates["consumerPrice"] = float(updates["consumerPrice"])
    if "imageUrl" in updates and not updates["imageUrl"]:
        updates["imageUrl"] = settings.SHOP_PLACEHOLDER_IMAGE
    if "category" in updates and updates["category"] is None:
        updates["category"] = ""
    if updates:
        ref.update(updates)
    logger.info("Product %s updated (%s)", product_id, ", ".join(sorted(updates)) or "no changes")
    return Product.from_doc(ref.get())


def delete_product(product_id: str) -> bool:
    ref = _collection(PRODUCTS).document(product_id)
    if not ref.get().exists:
        logger.warning("Cannot delete product %s: not found", product_id)
        return False
    ref.delete()
    logger.info("Product %s deleted", product_id)
    return True


def toggle_product_active(product_id: str, is_active: bool) -> Optional[Product]:
    return update_product(product_id, {"isActive": bool(is_active)})


# ================== Orders ==================

def get_orders_for_admin() -> list[Order]:
    orders = [Order.from_doc(s) for s in _collection(ORDERS).stream()]
    orders.sort(key=lambda o: o.orderTimestamp, reverse=True)
    logger.info("Fetched %d orders", len(orders))
    return orders


def get_order_by_id(order_id: str) -> Optional[Order]:
    snap = _collection(ORDERS).document(order_id).get()
    if not snap.exists:
        logger.warning("Order %s not found", order_id)
        return None
    return Order.from_doc(snap)


def create_order(*, customer: dict, items: list[OrderItem], total_amount: float) -> Order:
    ref = _collection(ORDERS).document()
    notes = (customer.get("customerNotes") or "").strip() or None
    order = Order(
        id=ref.id,
        customerName=customer["customerName"].strip(),
        customerPhone=customer["customerPhone"].strip(),
        customerAddress=customer["customerAddress"].strip(),
        customerNotes=notes,
        items=list(items),
        totalAmount=round(float(total_amount), 2),
        orderTimestamp=timezone.now(),
        status=OrderStatus.NEW,
        isViewedByAgent=False,
        agentNotes=notes,  # agent starts from what the customer wrote
    )
    ref.set(order.to_doc())
    logger.info("Order created with id %s (%d items, total %.2f)", ref.id, len(order.items), order.totalAmount)
    return order


def _update_order(order_id: str, updates: dict) -> Optional[Order]:
    ref = _collection(ORDERS).document(order_id)
    if not ref.get().exists:
        logger.warning("Cannot update order %s: not found", order_id)
        return None
    if updates:
        ref.update(updates)
    return Order.from_doc(ref.get())


def update_order_status(order_id: str, new_status) -> Optional[Order]:
    status = OrderStatus(new_status)
    updates = {"status": status.value}
    if status is not OrderStatus.NEW:
        # anything past 'new' means an agent has looked at it
        updates["isViewedByAgent"] = True
    logger.info("Updating order %s status to %s", order_id, status.value)
    return _update_order(order_id, updates)


def mark_order_viewed(order_id: str) -> Optional[Order]:
    order = get_order_by_id(order_id)
    if order is None:
        return None
    updates = {}
    if not order.isViewedByAgent:
        updates["isViewedByAgent"] = True
        if order.status is OrderStatus.NEW:
            updates["status"] = OrderStatus.RECEIVED.value
    if not updates:
        return order
    logger.info("Marking order %s as viewed", order_id)
    return _update_order(order_id, updates)


def update_order_agent_notes(order_id: str, notes: str) -> Optional[Order]:
    logger.info("Updating agent notes for order %s", order_id)
    return _update_order(order_id, {"agentNotes": notes or ""})


# ================== Checkout ==================

def build_order_items(cart_items) -> tuple[list[OrderItem], float]:
    """
    Re-read every product in the cart and snapshot its current price.
    Raises CheckoutError when the cart is empty or a product is gone/inactive.
    """
    cart_items = list(cart_items)
    if not cart_items:
        raise CheckoutError("העגלה ריקה.")

    items: list[OrderItem] = []
    unavailable: list[str] = []
    total = 0.0
    for line in cart_items:
        product = get_product_by_id(line.productId)
        if product is None or not product.isActive:
            unavailable.append(line.name or line.productId)
            continue
        if line.quantity <= 0 or line.quantity % product.unitsPerBox:
            raise CheckoutError(f"כמות לא תקינה עבור {product.name}.")
        items.append(OrderItem(
            productId=product.id,
            productName=product.name,
            quantity=line.quantity,
            priceAtOrder=product.price,
        ))
        total += product.price * line.quantity

    if unavailable:
        raise CheckoutError("המוצרים הבאים אינם זמינים עוד: " + ", ".join(unavailable))
    return items, round(total, 2)


def place_order(customer: dict, cart) -> Order:
    items, total = build_order_items(cart.items)
    order = create_order(customer=customer, items=items, total_amount=total)
    cart.clear()
    return order


# ================== Customers ==================

def get_customer_profiles() -> dict[str, dict]:
    """Agent-maintained data per phone: name override and general notes."""
    return {s.id: (s.to_dict() or {}) for s in _collection(CUSTOMERS).stream()}


def summarize_customers(orders: Iterable[Order], profiles: Optional[dict] = None) -> list[CustomerSummary]:
    profiles = profiles or {}
    by_phone: dict[str, list[Order]] = defaultdict(list)
    for order in sorted(orders, key=lambda o: o.orderTimestamp):
        phone = (order.customerPhone or "").strip()
        if phone:
            by_phone[phone].append(order)

    summaries = []
    for phone, history in by_phone.items():
        first, last = history[0], history[-1]
        profile = profiles.get(phone, {})
        summaries.append(CustomerSummary(
            id=phone,
            phone=phone,
            name=profile.get("name") or first.customerName,
            firstOrderDate=first.orderTimestamp,
            lastOrderDate=last.orderTimestamp,
            totalOrders=len(history),
            totalSpent=round(sum(o.totalAmount for o in history if o.status is OrderStatus.COMPLETED), 2),
            latestAddress=last.customerAddress or None,
            generalAgentNotes=profile.get("generalAgentNotes") or "",
        ))
    summaries.sort(key=lambda c: c.lastOrderDate, reverse=True)
    return summaries


def get_customers() -> list[CustomerSummary]:
    customers = summarize_customers(get_orders_for_admin(), get_customer_profiles())
    logger.info("Derived %d customers from orders", len(customers))
    return customers


def get_customer_summary(phone: str) -> Optional[CustomerSummary]:
    phone = (phone or "").strip()
    if not phone:
        return None
    orders = [o for o in get_orders_for_admin() if o.customerPhone.strip() == phone]
    if not orders:
        logger.warning("No orders found for customer %s", phone)
        return None
    snap = _collection(CUSTOMERS).document(phone).get()
    profiles = {phone: snap.to_dict() or {}} if snap.exists else {}
    return summarize_customers(orders, profiles)[0]


def _update_customer_profile(phone: str, updates: dict) -> Optional[CustomerSummary]:
    phone = (phone or "").strip()
    if get_customer_summary(phone) is None:
        return None
    _collection(CUSTOMERS).document(phone).set(updates, merge=True)
    return get_customer_summary(phone)


def update_customer_notes(phone: str, notes: str) -> Optional[CustomerSummary]:
    logger.info("Updating general notes for customer %s", phone)
    return _update_customer_profile(phone, {"generalAgentNotes": notes or ""})


def update_customer_name(phone: str, name: str) -> Optional[CustomerSummary]:
    name = (name or "").strip()
    if not name:
        raise ShopError("שם הלקוח אינו יכול להיות ריק.")
    logger.info("Updating name for customer %s", phone)
    return _update_customer_profile(phone, {"name": name})


# ================== Admin users ==================

def get_admin_user_by_username(username: str) -> Optional[AdminUser]:
    docs = _collection(ADMIN_USERS).where("username", "==", username).limit(1).stream()
    for snap in docs:
        logger.info("Admin user %s found", username)
        return AdminUser.from_doc(snap)
    logger.info("No admin user found with username %s", username)
    return None


def get_admin_user_by_id(user_id: str) -> Optional[AdminUser]:
    snap = _collection(ADMIN_USERS).document(user_id).get()
    if not snap.exists:
        return None
    return AdminUser.from_doc(snap)


def list_admin_users() -> list[AdminUser]:
    users = [AdminUser.from_doc(s) for s in _collection(ADMIN_USERS).stream()]
    return sorted(users, key=lambda u: u.username.casefold())


def _set_password_hash(user: AdminUser, raw_password: str):
    user.passwordHash = make_password(raw_password)
    _collection(ADMIN_USERS).document(user.id).update({"passwordHash": user.passwordHash})


def verify_admin_password(user: AdminUser, password_attempt: str) -> bool:
    stored = user.passwordHash
    if not stored or not password_attempt:
        return False
    try:
        identify_hasher(stored)
    except ValueError:
        # legacy documents hold the raw password; accept once and re-hash
        ok = constant_time_compare(stored, password_attempt)
        if ok:
            logger.warning("Admin user %s had a plaintext password, upgrading to a hash", user.username)
            _set_password_hash(user, password_attempt)
        logger.info("Password verification for %s %s", user.username, "succeeded" if ok else "failed")
        return ok

    ok = check_password(password_attempt, stored, setter=lambda raw: _set_password_hash(user, raw))
    logger.info("Password verification for %s %s", user.username, "succeeded" if ok else "failed")
    return ok


def authenticate_admin(username: str, password: str) -> AdminUser:
    user = get_admin_user_by_username((username or "").strip())
    if user is None or not verify_admin_password(user, password):
        raise AuthError("שם משתמש או סיסמה שגויים.")
    return user


def create_admin_user(username: str, password: str, *, is_super_admin: bool = False,
                      display_name: str = "") -> AdminUser:
    username = (username or "").strip()
    if get_admin_user_by_username(username) is not None:
        raise ShopError(f"שם המשתמש {username} כבר קיים.")
    ref = _collection(ADMIN_USERS).document()
    user = AdminUser(
        id=ref.id,
        username=username,
        passwordHash=make_password(password),
        isSuperAdmin=is_super_admin,
        displayName=display_name or username,
    )
    ref.set(user.to_doc())
    logger.info("Admin user %s created (super admin: %s)", username, is_super_admin)
    return user
