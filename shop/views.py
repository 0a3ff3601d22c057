# shop/views.py
# ============================================================
# Imports
# ============================================================
import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .authentication import IsShopAdmin, IsSuperAdmin, login_admin, logout_admin
from .cart import Cart
from .filters import filter_catalog, filter_orders, get_categories, search_customers
from .pagination import CatalogPagination, CustomersPagination, OrdersPagination
from .reports import REVENUE_PERIOD_LABELS, dashboard_summary, revenue_for_period
from .serializers import (
    AdminUserCreateSerializer,
    AdminUserSerializer,
    AgentNotesSerializer,
    CartAddSerializer,
    CartQuantitySerializer,
    CartSerializer,
    CatalogQuerySerializer,
    CheckoutSerializer,
    CustomerNameSerializer,
    CustomerNotesSerializer,
    CustomerSummarySerializer,
    DashboardSerializer,
    LoginSerializer,
    OrderConfirmationSerializer,
    OrderFilterSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    ProductActiveSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    RevenueQuerySerializer,
)

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "המוצר לא נמצא."
ORDER_NOT_FOUND = "ההזמנה לא נמצאה."
CUSTOMER_NOT_FOUND = "הלקוח לא נמצא."


def _not_found(detail):
    return Response({"detail": detail}, status=status.HTTP_404_NOT_FOUND)


def _paginate(view, paginator_class, rows, serializer_class, extra=None):
    paginator = paginator_class()
    page = paginator.paginate_queryset(rows, view.request, view=view)
    response = paginator.get_paginated_response(serializer_class(page, many=True).data)
    if extra:
        response.data.update(extra)
    return response


# ============================================================
# Catalog (customer-facing)
# ============================================================
class CatalogView(APIView):
    """
    GET /api/catalog/
      - category=<exact category>
      - q=<search in name/description>
      - page=1
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        query = CatalogQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        products = services.get_products_for_catalog()
        rows = filter_catalog(products, query.validated_data.get("category"), query.validated_data.get("q"))
        return _paginate(self, CatalogPagination, rows, ProductSerializer,
                         extra={"categories": get_categories(products)})


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def catalog_categories(request):
    return Response({"categories": get_categories(services.get_products_for_catalog())})


# ============================================================
# Cart
# ============================================================
def _cart_response(cart, code=status.HTTP_200_OK):
    return Response(CartSerializer(cart).data, status=code)


class CartView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return _cart_response(Cart(request.session))

    def delete(self, request):
        cart = Cart(request.session)
        cart.clear()
        return _cart_response(cart)


class CartItemsView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        s = CartAddSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        product = services.get_product_by_id(s.validated_data["productId"])
        if product is None:
            return _not_found(PRODUCT_NOT_FOUND)

        cart = Cart(request.session)
        try:
            cart.add(product, s.validated_data.get("quantity"))
        except services.CartError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return _cart_response(cart, status.HTTP_201_CREATED)


class CartItemView(APIView):
    permission_classes = [permissions.AllowAny]

    def patch(self, request, product_id):
        s = CartQuantitySerializer(data=request.data)
        s.is_valid(raise_exception=True)
        cart = Cart(request.session)
        try:
            cart.update_quantity(product_id, s.validated_data["quantity"])
        except services.CartError as e:
            return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
        return _cart_response(cart)

    def delete(self, request, product_id):
        cart = Cart(request.session)
        cart.remove(product_id)
        return _cart_response(cart)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def cart_step(request, product_id, direction):
    """POST /api/cart/items/<id>/increment/ or /decrement/ (one box at a time)."""
    cart = Cart(request.session)
    try:
        if direction == "increment":
            cart.increment(product_id)
        else:
            cart.decrement(product_id)
    except services.CartError as e:
        return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
    return _cart_response(cart)


# ============================================================
# Checkout / confirmation
# ============================================================
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def checkout(request):
    s = CheckoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)

    cart = Cart(request.session)
    try:
        order = services.place_order(s.validated_data, cart)
    except services.CheckoutError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    payload = OrderConfirmationSerializer(order).data
    payload["message"] = (
        f"תודה רבה, {order.customerName}. הזמנתך התקבלה ומספרה {order.id}. "
        "הסוכן ייצור עמך קשר בהקדם."
    )
    return Response(payload, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def order_confirmation(request, order_id):
    order = services.get_order_by_id(order_id)
    if order is None:
        return _not_found(ORDER_NOT_FOUND)
    return Response(OrderConfirmationSerializer(order).data)


# ============================================================
# Admin auth
# ============================================================
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def admin_login(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        user = services.authenticate_admin(s.validated_data["username"], s.validated_data["password"])
    except services.AuthError as e:
        logger.info("Failed login attempt for %s", s.validated_data["username"])
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    login_admin(request, user)
    return Response(AdminUserSerializer(user).data)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def admin_logout(request):
    logout_admin(request)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
@permission_classes([IsShopAdmin])
def admin_me(request):
    return Response(AdminUserSerializer(request.user).data)


# ============================================================
# Admin products
# ============================================================
class ProductViewSet(viewsets.ViewSet):
    """
    /api/admin/products/
      - q=<search in name/description>
      - category=<exact category>
      - active=true|false
    """
    permission_classes = [IsShopAdmin]

    def list(self, request):
        params = request.query_params
        products = services.get_all_products_for_admin()
        rows = filter_catalog(products, params.get("category"), params.get("q"))
        active = params.get("active")
        if active in ("true", "false"):
            rows = [p for p in rows if p.isActive == (active == "true")]
        return Response({
            "count": len(rows),
            "categories": get_categories(products),
            "results": ProductSerializer(rows, many=True).data,
        })

    def retrieve(self, request, pk=None):
        product = services.get_product_by_id(pk)
        if product is None:
            return _not_found(PRODUCT_NOT_FOUND)
        return Response(ProductSerializer(product).data)

    def create(self, request):
        s = ProductWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        product = services.create_product(s.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        return self._save(request, pk, partial=False)

    def partial_update(self, request, pk=None):
        return self._save(request, pk, partial=True)

    def _save(self, request, pk, partial):
        s = ProductWriteSerializer(data=request.data, partial=partial)
        s.is_valid(raise_exception=True)
        product = services.update_product(pk, s.validated_data)
        if product is None:
            return _not_found(PRODUCT_NOT_FOUND)
        return Response(ProductSerializer(product).data)

    def destroy(self, request, pk=None):
        if not services.delete_product(pk):
            return _not_found(PRODUCT_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["POST"], url_path="active")
    def set_active(self, request, pk=None):
        s = ProductActiveSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        product = services.toggle_product_active(pk, s.validated_data["isActive"])
        if product is None:
            return _not_found(PRODUCT_NOT_FOUND)
        return Response(ProductSerializer(product).data)


# ============================================================
# Admin orders
# ============================================================
class OrderViewSet(viewsets.ViewSet):
    """
    /api/admin/orders/
      - status=all|new|received|completed|cancelled
      - customerPhone=<substring>
      - startDate=YYYY-MM-DD / endDate=YYYY-MM-DD
      - period=today|thisWeek
      - page=1
    """
    permission_classes = [IsShopAdmin]

    def list(self, request):
        query = OrderFilterSerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        q = query.validated_data
        rows = filter_orders(
            services.get_orders_for_admin(),
            status=q.get("status"),
            phone=q.get("customerPhone"),
            start=q.get("startDate"),
            end=q.get("endDate"),
            period=q.get("period"),
        )
        return _paginate(self, OrdersPagination, rows, OrderSerializer)

    def retrieve(self, request, pk=None):
        order = services.get_order_by_id(pk)
        if order is None:
            return _not_found(ORDER_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["POST"], url_path="status")
    def set_status(self, request, pk=None):
        s = OrderStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order = services.update_order_status(pk, s.validated_data["status"])
        if order is None:
            return _not_found(ORDER_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["POST"], url_path="viewed")
    def viewed(self, request, pk=None):
        order = services.mark_order_viewed(pk)
        if order is None:
            return _not_found(ORDER_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["POST"], url_path="notes")
    def notes(self, request, pk=None):
        s = AgentNotesSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order = services.update_order_agent_notes(pk, s.validated_data["agentNotes"])
        if order is None:
            return _not_found(ORDER_NOT_FOUND)
        return Response(OrderSerializer(order).data)


# ============================================================
# Admin customers
# ============================================================
class CustomerViewSet(viewsets.ViewSet):
    """
    /api/admin/customers/           ?q=<name or phone>&page=1
    /api/admin/customers/<phone>/
    """
    permission_classes = [IsShopAdmin]
    lookup_value_regex = r"[^/]+"

    def list(self, request):
        rows = search_customers(services.get_customers(), request.query_params.get("q"))
        return _paginate(self, CustomersPagination, rows, CustomerSummarySerializer)

    def retrieve(self, request, pk=None):
        customer = services.get_customer_summary(pk)
        if customer is None:
            return _not_found(CUSTOMER_NOT_FOUND)
        return Response(CustomerSummarySerializer(customer).data)

    @action(detail=True, methods=["GET"], url_path="orders")
    def orders(self, request, pk=None):
        phone = (pk or "").strip()
        rows = [o for o in services.get_orders_for_admin() if o.customerPhone.strip() == phone]
        return _paginate(self, OrdersPagination, rows, OrderSerializer)

    @action(detail=True, methods=["POST"], url_path="notes")
    def notes(self, request, pk=None):
        s = CustomerNotesSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        customer = services.update_customer_notes(pk, s.validated_data["generalAgentNotes"])
        if customer is None:
            return _not_found(CUSTOMER_NOT_FOUND)
        return Response(CustomerSummarySerializer(customer).data)

    @action(detail=True, methods=["POST"], url_path="name")
    def rename(self, request, pk=None):
        s = CustomerNameSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            customer = services.update_customer_name(pk, s.validated_data["name"])
        except services.ShopError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        if customer is None:
            return _not_found(CUSTOMER_NOT_FOUND)
        return Response(CustomerSummarySerializer(customer).data)


# ============================================================
# Dashboard
# ============================================================
@api_view(["GET"])
@permission_classes([IsShopAdmin])
def dashboard(request):
    orders = services.get_orders_for_admin()
    summary = dashboard_summary(services.get_all_products_for_admin(), orders)
    return Response(DashboardSerializer(summary).data)


@api_view(["GET"])
@permission_classes([IsShopAdmin])
def dashboard_revenue(request):
    """GET /api/admin/dashboard/revenue/?period=allTime|today|thisWeek|thisMonth|custom&startDate=&endDate="""
    query = RevenueQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    q = query.validated_data
    revenue = revenue_for_period(
        services.get_orders_for_admin(), q["period"], q.get("startDate"), q.get("endDate"),
    )
    return Response({
        "period": q["period"],
        "periodLabel": REVENUE_PERIOD_LABELS[q["period"]],
        "revenue": revenue,
    })


# ============================================================
# Agents (super admin only)
# ============================================================
class AgentViewSet(viewsets.ViewSet):
    permission_classes = [IsSuperAdmin]

    def list(self, request):
        return Response(AdminUserSerializer(services.list_admin_users(), many=True).data)

    def create(self, request):
        s = AdminUserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data
        try:
            user = services.create_admin_user(
                d["username"], d["password"],
                is_super_admin=d["isSuperAdmin"], display_name=d["displayName"],
            )
        except services.ShopError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(AdminUserSerializer(user).data, status=status.HTTP_201_CREATED)
