"""Management command to seed Firestore with sample catalog data, orders and an admin user."""

from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.utils import timezone

from shop.firestore import ADMIN_USERS, ORDERS, PRODUCTS, get_db

BATCH_LIMIT = 400  # Firestore allows 500 writes per batch

PRODUCTS_DATA = [
    {
        "id": "p1",
        "name": 'אבקת כביסה "כביסכל קלאסי"',
        "description": "אבקת כביסה איכותית לכל סוגי הבדים, בניחוח מרענן.",
        "price": 39.90,
        "category": "אבקות כביסה",
        "isActive": True,
        "unitsPerBox": 8,
    },
    {
        "id": "p2",
        "name": 'ג\'ל כביסה "כביסכל עוצמתי"',
        "description": "ג'ל מרוכז לניקוי יסודי והסרת כתמים קשים.",
        "price": 49.90,
        "category": "ג'לים לכביסה",
        "isActive": True,
        "unitsPerBox": 6,
    },
    {
        "id": "p3",
        "name": 'מרכך כביסה "כביסכל רכות מפנקת"',
        "description": "מרכך כביסה מרוכז המעניק רכות וניחוח לאורך זמן.",
        "price": 29.90,
        "category": "מרככי כביסה",
        "isActive": True,
        "unitsPerBox": 12,
    },
    {
        "id": "p4",
        "name": 'מסיר כתמים "כביסכל נקודתי"',
        "description": "תרסיס להסרת כתמים יעילה לפני הכביסה.",
        "price": 24.90,
        "category": "מסירי כתמים",
        "isActive": True,
        "unitsPerBox": 10,
    },
    {
        "id": "p5",
        "name": 'כדוריות ריח "כביסכל פרש"',
        "description": "כדוריות ריח להוספה למכונת הכביסה לניחוח מתמשך.",
        "price": 34.90,
        "category": "תוספי כביסה",
        "isActive": False,
        "unitsPerBox": 8,
    },
]


def _orders_data():
    now = timezone.now()
    return [
        {
            "id": "o1",
            "customerName": "ישראל ישראלי",
            "customerPhone": "050-1234567",
            "customerAddress": "רחוב הראשי 1, תל אביב",
            "customerNotes": "",
            "items": [
                {"productId": "p1", "productName": PRODUCTS_DATA[0]["name"], "quantity": 16, "priceAtOrder": 39.90},
                {"productId": "p3", "productName": PRODUCTS_DATA[2]["name"], "quantity": 12, "priceAtOrder": 29.90},
            ],
            "totalAmount": 997.20,
            "orderTimestamp": now - timedelta(days=1),
            "status": "new",
            "isViewedByAgent": False,
            "agentNotes": "",
        },
        {
            "id": "o2",
            "customerName": "שרה לוי",
            "customerPhone": "052-7654321",
            "customerAddress": "שדרות הפרחים 5, ירושלים",
            "customerNotes": "נא להשאיר ליד הדלת אם אין מענה",
            "items": [
                {"productId": "p2", "productName": PRODUCTS_DATA[1]["name"], "quantity": 6, "priceAtOrder": 49.90},
            ],
            "totalAmount": 299.40,
            "orderTimestamp": now - timedelta(days=2),
            "status": "received",
            "isViewedByAgent": True,
            "agentNotes": "נא להשאיר ליד הדלת אם אין מענה",
        },
        {
            "id": "o3",
            "customerName": "משה כהן",
            "customerPhone": "054-1122333",
            "customerAddress": "דרך השלום 10, חיפה",
            "customerNotes": "",
            "items": [
                {"productId": "p1", "productName": PRODUCTS_DATA[0]["name"], "quantity": 8, "priceAtOrder": 39.90},
                {"productId": "p4", "productName": PRODUCTS_DATA[3]["name"], "quantity": 10, "priceAtOrder": 24.90},
            ],
            "totalAmount": 568.20,
            "orderTimestamp": now,
            "status": "completed",
            "isViewedByAgent": True,
            "agentNotes": "",
        },
    ]


class Command(BaseCommand):
    help = "Seed the products, orders and adminUsers collections (non-empty collections are skipped)"

    def add_arguments(self, parser):
        parser.add_argument("--admin-username", default="admin")
        parser.add_argument("--admin-password", help="Seed a super admin with this password")

    def handle(self, *args, **options):
        db = get_db()

        products = []
        for row in PRODUCTS_DATA:
            doc = dict(row)
            doc.setdefault("imageUrl", settings.SHOP_PLACEHOLDER_IMAGE)
            doc.setdefault("consumerPrice", doc["price"])
            products.append(doc)
        self._seed(db, PRODUCTS, products)
        self._seed(db, ORDERS, _orders_data())

        if options["admin_password"]:
            self._seed(db, ADMIN_USERS, [{
                "username": options["admin_username"],
                "passwordHash": make_password(options["admin_password"]),
                "isSuperAdmin": True,
                "displayName": options["admin_username"],
            }])
        else:
            self.stdout.write("No --admin-password given, skipping adminUsers.")

    def _seed(self, db, name, rows):
        collection = db.collection(name)
        if any(True for _ in collection.limit(1).stream()):
            self.stdout.write(f"{name} is not empty, skipping to avoid overwrites.")
            return

        batch = db.batch()
        pending = 0
        for row in rows:
            data = dict(row)
            doc_id = data.pop("id", None)
            ref = collection.document(doc_id) if doc_id else collection.document()
            batch.set(ref, data)
            pending += 1
            if pending == BATCH_LIMIT:
                batch.commit()
                batch, pending = db.batch(), 0
        if pending:
            batch.commit()
        self.stdout.write(self.style.SUCCESS(f"Seeded {len(rows)} documents into {name}."))
