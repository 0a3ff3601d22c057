# shop/reports.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from django.conf import settings
from django.utils import timezone

from .filters import PERIOD_THIS_WEEK, PERIOD_TODAY, end_of_day, start_of_day
from .models import Order, OrderStatus, Product

REVENUE_ALL_TIME = "allTime"
REVENUE_THIS_MONTH = "thisMonth"
REVENUE_CUSTOM = "custom"
REVENUE_PERIODS = (REVENUE_ALL_TIME, PERIOD_TODAY, PERIOD_THIS_WEEK, REVENUE_THIS_MONTH, REVENUE_CUSTOM)

REVENUE_PERIOD_LABELS = {
    REVENUE_ALL_TIME: "כל הזמן",
    PERIOD_TODAY: "היום",
    PERIOD_THIS_WEEK: "השבוע",
    REVENUE_THIS_MONTH: "החודש",
    REVENUE_CUSTOM: "מותאם אישית",
}


def _in_range(order: Order, start: Optional[date], end: Optional[date]) -> bool:
    if start and order.orderTimestamp < start_of_day(start):
        return False
    if end and order.orderTimestamp > end_of_day(end):
        return False
    return True


def _month_bounds(today: date) -> tuple[date, date]:
    first = today.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return first, next_month - timedelta(days=1)


def revenue_for_period(
    orders: Iterable[Order],
    period: str = REVENUE_ALL_TIME,
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> float:
    """
    Sum of totalAmount over completed orders inside ``period``.
    'custom' uses start/end (either may be open); with neither it is 0.
    """
    today = today or timezone.localdate()
    completed = [o for o in orders if o.status is OrderStatus.COMPLETED]

    if period == PERIOD_TODAY:
        start, end = today, today
    elif period == PERIOD_THIS_WEEK:
        start, end = today - timedelta(days=6), today
    elif period == REVENUE_THIS_MONTH:
        start, end = _month_bounds(today)
    elif period == REVENUE_CUSTOM:
        if not start and not end:
            return 0.0
    else:
        start = end = None

    return round(sum(o.totalAmount for o in completed if _in_range(o, start, end)), 2)


def dashboard_summary(products: Iterable[Product], orders: list[Order], today: Optional[date] = None) -> dict:
    """Counters shown on the back-office dashboard. ``orders`` is newest first."""
    today = today or timezone.localdate()
    week_start = today - timedelta(days=6)
    return {
        "totalProducts": sum(1 for p in products if p.isActive),
        "totalOrders": len(orders),
        "newOrdersUnviewed": sum(1 for o in orders if o.status is OrderStatus.NEW),
        "receivedOrders": sum(1 for o in orders if o.status is OrderStatus.RECEIVED),
        "ordersToday": sum(1 for o in orders if _in_range(o, today, today)),
        "ordersThisWeek": sum(1 for o in orders if _in_range(o, week_start, today)),
        "allTimeRevenue": revenue_for_period(orders, REVENUE_ALL_TIME, today=today),
        "latestOrders": orders[: settings.SHOP_LATEST_ORDERS],
    }
