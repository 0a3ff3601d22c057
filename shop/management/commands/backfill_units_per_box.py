"""Management command to add unitsPerBox / consumerPrice to existing product documents."""

import logging

from django.conf import settings
from django.core.management.base import BaseCommand

from shop.firestore import PRODUCTS, get_db

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Set unitsPerBox and consumerPrice (= price) on every product"

    def add_arguments(self, parser):
        parser.add_argument("--units", type=int, default=settings.SHOP_DEFAULT_UNITS_PER_BOX)
        parser.add_argument(
            "--only-missing", action="store_true",
            help="Leave products that already have unitsPerBox untouched",
        )

    def handle(self, *args, **options):
        units = options["units"]
        if units < 1:
            self.stderr.write("--units must be at least 1")
            return

        updated = 0
        for snap in get_db().collection(PRODUCTS).stream():
            data = snap.to_dict() or {}
            if options["only_missing"] and data.get("unitsPerBox"):
                continue
            snap.reference.update({
                "unitsPerBox": units,
                "consumerPrice": data.get("price", 0),
            })
            updated += 1
            logger.info("Updated product %s", snap.id)

        if updated:
            self.stdout.write(self.style.SUCCESS(f"Finished updating. {updated} products processed."))
        else:
            self.stdout.write("No products needed an update.")
