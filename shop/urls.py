# shop/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AgentViewSet, CartItemView, CartItemsView, CartView, CatalogView, CustomerViewSet,
    OrderViewSet, ProductViewSet, admin_login, admin_logout, admin_me, cart_step,
    catalog_categories, checkout, dashboard, dashboard_revenue, order_confirmation,
)

router = DefaultRouter()
router.register(r"admin/products", ProductViewSet, basename="admin-product")     # /api/admin/products/
router.register(r"admin/orders", OrderViewSet, basename="admin-order")           # /api/admin/orders/
router.register(r"admin/customers", CustomerViewSet, basename="admin-customer")  # /api/admin/customers/
router.register(r"admin/agents", AgentViewSet, basename="admin-agent")           # /api/admin/agents/

urlpatterns = [
    # storefront
    path("catalog/", CatalogView.as_view(), name="catalog"),
    path("catalog/categories/", catalog_categories, name="catalog-categories"),
    path("cart/", CartView.as_view(), name="cart"),
    path("cart/items/", CartItemsView.as_view(), name="cart-items"),
    path("cart/items/<str:product_id>/", CartItemView.as_view(), name="cart-item"),
    path("cart/items/<str:product_id>/increment/", cart_step, {"direction": "increment"}, name="cart-item-increment"),
    path("cart/items/<str:product_id>/decrement/", cart_step, {"direction": "decrement"}, name="cart-item-decrement"),
    path("checkout/", checkout, name="checkout"),
    path("orders/<str:order_id>/confirmation/", order_confirmation, name="order-confirmation"),

    # back office
    path("admin/login/", admin_login, name="admin-login"),
    path("admin/logout/", admin_logout, name="admin-logout"),
    path("admin/me/", admin_me, name="admin-me"),
    path("admin/dashboard/", dashboard, name="admin-dashboard"),
    path("admin/dashboard/revenue/", dashboard_revenue, name="admin-dashboard-revenue"),
    path("", include(router.urls)),
]
