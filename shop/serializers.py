# shop/serializers.py

from rest_framework import serializers

from .filters import PERIOD_THIS_WEEK, PERIOD_TODAY
from .models import OrderStatus
from .reports import REVENUE_ALL_TIME, REVENUE_PERIODS

STATUS_CHOICES = [s.value for s in OrderStatus]

# Israeli phone numbers: 050-1234567, 0501234567, 03-1234567
PHONE_REGEX = r"^0\d(\d)?-?\d{7}$"


# ============ Products ============
class ProductSerializer(serializers.Serializer):
    id            = serializers.CharField(read_only=True)
    name          = serializers.CharField()
    description   = serializers.CharField()
    price         = serializers.FloatField()
    consumerPrice = serializers.FloatField()
    imageUrl      = serializers.CharField()
    category      = serializers.CharField(allow_blank=True)
    isActive      = serializers.BooleanField()
    unitsPerBox   = serializers.IntegerField()


class ProductWriteSerializer(serializers.Serializer):
    name = serializers.CharField(
        min_length=3, error_messages={"min_length": "שם מוצר חייב להכיל לפחות 3 תווים."},
    )
    description = serializers.CharField(
        min_length=10, error_messages={"min_length": "תיאור חייב להכיל לפחות 10 תווים."},
    )
    price = serializers.FloatField(error_messages={"invalid": "מחיר חייב להיות מספר חיובי."})
    consumerPrice = serializers.FloatField(
        required=False, min_value=0, error_messages={"min_value": "מחיר לצרכן אינו יכול להיות שלילי."},
    )
    imageUrl = serializers.URLField(
        required=False, allow_blank=True, error_messages={"invalid": "כתובת תמונה לא תקינה."},
    )
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    isActive = serializers.BooleanField(required=False, default=True)
    unitsPerBox = serializers.IntegerField(
        required=False, default=1, min_value=1,
        error_messages={"min_value": "כמות יחידות בארגז חייבת להיות לפחות 1."},
    )

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("מחיר חייב להיות מספר חיובי.")
        return value


class ProductActiveSerializer(serializers.Serializer):
    isActive = serializers.BooleanField()


class CatalogQuerySerializer(serializers.Serializer):
    category = serializers.CharField(required=False, allow_blank=True)
    q        = serializers.CharField(required=False, allow_blank=True)


# ============ Cart ============
class CartItemSerializer(serializers.Serializer):
    productId   = serializers.CharField()
    name        = serializers.CharField()
    price       = serializers.FloatField()
    unitsPerBox = serializers.IntegerField()
    quantity    = serializers.IntegerField()
    imageUrl    = serializers.CharField()
    category    = serializers.CharField()
    lineTotal   = serializers.FloatField(source="line_total")


class CartSerializer(serializers.Serializer):
    items              = CartItemSerializer(many=True)
    totalItems         = serializers.IntegerField(source="total_items")
    totalPrice         = serializers.FloatField(source="total_price")
    uniqueProductCount = serializers.IntegerField(source="unique_product_count")


class CartAddSerializer(serializers.Serializer):
    productId = serializers.CharField()
    quantity  = serializers.IntegerField(required=False, min_value=1)


class CartQuantitySerializer(serializers.Serializer):
    # 0 removes the line
    quantity = serializers.IntegerField(min_value=0)


# ============ Orders ============
class CheckoutSerializer(serializers.Serializer):
    customerName = serializers.CharField(
        min_length=2, error_messages={"min_length": "שם חייב להכיל לפחות 2 תווים."},
    )
    customerPhone = serializers.RegexField(
        PHONE_REGEX, error_messages={"invalid": "מספר טלפון לא תקין."},
    )
    customerAddress = serializers.CharField(
        min_length=5, error_messages={"min_length": "כתובת חייבת להכיל לפחות 5 תווים."},
    )
    customerNotes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderItemSerializer(serializers.Serializer):
    productId    = serializers.CharField()
    productName  = serializers.CharField()
    quantity     = serializers.IntegerField()
    priceAtOrder = serializers.FloatField()


class OrderSerializer(serializers.Serializer):
    id              = serializers.CharField()
    customerName    = serializers.CharField()
    customerPhone   = serializers.CharField()
    customerAddress = serializers.CharField()
    customerNotes   = serializers.CharField(allow_null=True)
    items           = OrderItemSerializer(many=True)
    totalAmount     = serializers.FloatField()
    orderTimestamp  = serializers.DateTimeField()
    status          = serializers.CharField(source="status.value")
    statusLabel     = serializers.CharField(source="status.label")
    isViewedByAgent = serializers.BooleanField()
    agentNotes      = serializers.CharField(allow_null=True)


class OrderConfirmationSerializer(serializers.Serializer):
    id             = serializers.CharField()
    customerName   = serializers.CharField()
    items          = OrderItemSerializer(many=True)
    totalAmount    = serializers.FloatField()
    orderTimestamp = serializers.DateTimeField()
    status         = serializers.CharField(source="status.value")
    statusLabel    = serializers.CharField(source="status.label")


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_CHOICES)


class AgentNotesSerializer(serializers.Serializer):
    agentNotes = serializers.CharField(allow_blank=True)


class OrderFilterSerializer(serializers.Serializer):
    status        = serializers.ChoiceField(choices=["all"] + STATUS_CHOICES, required=False, default="all")
    customerPhone = serializers.CharField(required=False, allow_blank=True)
    startDate     = serializers.DateField(required=False)
    endDate       = serializers.DateField(required=False)
    period        = serializers.ChoiceField(choices=[PERIOD_TODAY, PERIOD_THIS_WEEK], required=False)

    def validate(self, attrs):
        start, end = attrs.get("startDate"), attrs.get("endDate")
        if start and end and start > end:
            raise serializers.ValidationError("תאריך ההתחלה מאוחר מתאריך הסיום.")
        return attrs


# ============ Customers ============
class CustomerSummarySerializer(serializers.Serializer):
    id                = serializers.CharField()
    name              = serializers.CharField()
    phone             = serializers.CharField()
    firstOrderDate    = serializers.DateTimeField(allow_null=True)
    lastOrderDate     = serializers.DateTimeField()
    totalOrders       = serializers.IntegerField()
    totalSpent        = serializers.FloatField()
    latestAddress     = serializers.CharField(allow_null=True)
    generalAgentNotes = serializers.CharField(allow_blank=True)


class CustomerNotesSerializer(serializers.Serializer):
    generalAgentNotes = serializers.CharField(allow_blank=True)


class CustomerNameSerializer(serializers.Serializer):
    name = serializers.CharField(error_messages={"blank": "שם הלקוח אינו יכול להיות ריק."})


# ============ Admin users ============
class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


class AdminUserSerializer(serializers.Serializer):
    id           = serializers.CharField()
    username     = serializers.CharField()
    displayName  = serializers.CharField()
    isSuperAdmin = serializers.BooleanField()


class AdminUserCreateSerializer(serializers.Serializer):
    username     = serializers.CharField(min_length=3)
    password     = serializers.CharField(min_length=6, trim_whitespace=False)
    displayName  = serializers.CharField(required=False, allow_blank=True, default="")
    isSuperAdmin = serializers.BooleanField(required=False, default=False)


# ============ Dashboard ============
class RevenueQuerySerializer(serializers.Serializer):
    period    = serializers.ChoiceField(choices=list(REVENUE_PERIODS), required=False, default=REVENUE_ALL_TIME)
    startDate = serializers.DateField(required=False)
    endDate   = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("startDate"), attrs.get("endDate")
        if start and end and start > end:
            raise serializers.ValidationError("תאריך ההתחלה מאוחר מתאריך הסיום.")
        return attrs


class DashboardSerializer(serializers.Serializer):
    totalProducts     = serializers.IntegerField()
    totalOrders       = serializers.IntegerField()
    newOrdersUnviewed = serializers.IntegerField()
    receivedOrders    = serializers.IntegerField()
    ordersToday       = serializers.IntegerField()
    ordersThisWeek    = serializers.IntegerField()
    allTimeRevenue    = serializers.FloatField()
    latestOrders      = OrderSerializer(many=True)
