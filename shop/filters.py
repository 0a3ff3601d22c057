# shop/filters.py
# In-memory filtering for catalog / orders / customers lists.
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from django.utils import timezone

from .models import CustomerSummary, Order, OrderStatus, Product

PERIOD_TODAY = "today"
PERIOD_THIS_WEEK = "thisWeek"


# ============ Day helpers (shop time zone) ============
def start_of_day(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.min))


def end_of_day(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.max))


def period_bounds(period: Optional[str], today: Optional[date] = None) -> tuple[Optional[date], Optional[date]]:
    """'today' -> (today, today); 'thisWeek' -> the last 7 days including today."""
    today = today or timezone.localdate()
    if period == PERIOD_TODAY:
        return today, today
    if period == PERIOD_THIS_WEEK:
        return today - timedelta(days=6), today
    return None, None


# ============ Catalog ============
def get_categories(products: Iterable[Product]) -> list[str]:
    return sorted({p.category for p in products if p.category})


def filter_catalog(products: Iterable[Product], category: Optional[str] = None,
                   search: Optional[str] = None) -> list[Product]:
    result = list(products)
    if category:
        result = [p for p in result if p.category == category]
    term = (search or "").strip().casefold()
    if term:
        result = [
            p for p in result
            if term in p.name.casefold() or term in (p.description or "").casefold()
        ]
    return result


# ============ Orders ============
def filter_orders(
    orders: Iterable[Order],
    *,
    status: Optional[str] = None,
    phone: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    period: Optional[str] = None,
) -> list[Order]:
    result = list(orders)

    phone = (phone or "").strip()
    if phone:
        result = [o for o in result if phone in o.customerPhone]

    if status and status != "all":
        wanted = OrderStatus(status)
        result = [o for o in result if o.status is wanted]

    if period and not (start or end):
        start, end = period_bounds(period)
    if start:
        lower = start_of_day(start)
        result = [o for o in result if o.orderTimestamp >= lower]
    if end:
        upper = end_of_day(end)
        result = [o for o in result if o.orderTimestamp <= upper]
    return result


# ============ Customers ============
def search_customers(customers: Iterable[CustomerSummary], term: Optional[str]) -> list[CustomerSummary]:
    term = (term or "").strip()
    if not term:
        return list(customers)
    lowered = term.casefold()
    return [c for c in customers if lowered in c.name.casefold() or term in c.phone]
