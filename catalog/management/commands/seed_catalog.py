"""Seed catalog and coupon data for development sanity-checks.

Creates a few products with stock and colors plus one demo coupon.
Re-running is idempotent; existing rows are reused by slug and name.
"""

from datetime import timedelta
from decimal import Decimal

from catalog.models import Product
from coupons.models import Coupon
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify


class Command(BaseCommand):
    help = "Seed initial catalog data (products, demo coupon)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding catalog data...")

        products = [
            {
                "title": "Classic Cotton T-Shirt",
                "description": "Soft everyday tee in three colors.",
                "price": Decimal("19.99"),
                "quantity": 120,
                "colors": ["black", "white", "navy"],
            },
            {
                "title": "Canvas Tote Bag",
                "description": "Heavy canvas tote with inner pocket.",
                "price": Decimal("24.50"),
                "quantity": 60,
                "colors": [],
            },
            {
                "title": "Wireless Earbuds",
                "description": "Compact earbuds with charging case.",
                "price": Decimal("79.00"),
                "quantity": 25,
                "colors": ["black", "white"],
            },
        ]

        for p in products:
            Product.objects.get_or_create(
                slug=slugify(p["title"]),
                defaults={
                    "title": p["title"],
                    "description": p["description"],
                    "status": Product.STATUS_PUBLISHED,
                    "price": p["price"],
                    "quantity": p["quantity"],
                    "colors": p["colors"],
                },
            )

        Coupon.objects.get_or_create(
            name="WELCOME10",
            defaults={"discount": Decimal("10"), "expire": timezone.now() + timedelta(days=90)},
        )

        self.stdout.write(self.style.SUCCESS("Catalog seed complete."))
