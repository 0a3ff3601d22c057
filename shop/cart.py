# shop/cart.py
"""
Session-backed shopping cart.

Each line keeps a snapshot of the product (name, price, unitsPerBox) next to
the quantity, the way the storefront used to keep it in local storage.
Quantities are always a positive multiple of the product's unitsPerBox.
"""
from __future__ import annotations

from dataclasses import asdict
from math import ceil
from typing import Optional

from django.conf import settings

from . import services
from .models import CartItem, Product
from .services import CartError


def normalize_quantity(quantity: int, units_per_box: int) -> int:
    """Round ``quantity`` up to the next box multiple; 0 for anything <= 0."""
    units = max(int(units_per_box or 1), 1)
    quantity = int(quantity)
    if quantity <= 0:
        return 0
    return ceil(quantity / units) * units


class Cart:
    def __init__(self, session, key: Optional[str] = None):
        self.session = session
        self.key = key or settings.SHOP_CART_SESSION_KEY
        raw = session.get(self.key) or []
        self._items: list[CartItem] = [CartItem(**row) for row in raw]

    # -------- persistence --------
    def _save(self):
        self.session[self.key] = [asdict(i) for i in self._items]
        self.session.modified = True

    def _find(self, product_id: str) -> Optional[CartItem]:
        for item in self._items:
            if item.productId == product_id:
                return item
        return None

    @staticmethod
    def _refresh(item: CartItem, product: Product):
        item.name, item.price, item.unitsPerBox = product.name, product.price, product.unitsPerBox
        item.imageUrl, item.category = product.imageUrl, product.category

    def _find_fresh(self, product_id: str) -> CartItem:
        """The line for ``product_id`` with its snapshot re-read from the catalog."""
        item = self._find(product_id)
        if item is None:
            raise CartError("המוצר אינו נמצא בעגלה.")
        product = services.get_product_by_id(product_id)
        if product is not None:
            # box size or price may have changed since the line was added
            self._refresh(item, product)
        return item

    # -------- reads --------
    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    def get_item_quantity(self, product_id: str) -> int:
        item = self._find(product_id)
        return item.quantity if item else 0

    @property
    def total_items(self) -> int:
        return sum(i.quantity for i in self._items)

    @property
    def total_price(self) -> float:
        return round(sum(i.line_total for i in self._items), 2)

    @property
    def unique_product_count(self) -> int:
        return len(self._items)

    def __len__(self):
        return len(self._items)

    # -------- writes --------
    def add(self, product: Product, quantity: Optional[int] = None) -> CartItem:
        if not product.isActive:
            raise CartError(f"המוצר {product.name} אינו זמין להזמנה.")
        wanted = product.unitsPerBox if quantity is None else int(quantity)
        if wanted <= 0:
            raise CartError("הכמות חייבת להיות חיובית.")

        item = self._find(product.id)
        if item is None:
            item = CartItem.from_product(product, normalize_quantity(wanted, product.unitsPerBox))
            self._items.append(item)
        else:
            self._refresh(item, product)
            item.quantity = normalize_quantity(item.quantity + wanted, product.unitsPerBox)
        self._save()
        return item

    def update_quantity(self, product_id: str, quantity: int) -> Optional[CartItem]:
        item = self._find_fresh(product_id)
        new_quantity = normalize_quantity(quantity, item.unitsPerBox)
        if new_quantity == 0:
            self.remove(product_id)
            return None
        item.quantity = new_quantity
        self._save()
        return item

    def increment(self, product_id: str) -> Optional[CartItem]:
        item = self._find_fresh(product_id)
        return self.update_quantity(product_id, item.quantity + item.unitsPerBox)

    def decrement(self, product_id: str) -> Optional[CartItem]:
        item = self._find_fresh(product_id)
        return self.update_quantity(product_id, item.quantity - item.unitsPerBox)

    def remove(self, product_id: str):
        self._items = [i for i in self._items if i.productId != product_id]
        self._save()

    def clear(self):
        self._items = []
        self._save()
