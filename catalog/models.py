"""Catalog app models.

A product carries its own price and stock counters: `quantity` is what is
still available to sell, `sold` is the cumulative number of units ordered.
Both are changed only through `inventory.services.bulk_adjust`.
"""

from common.choices import DraftPublished
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Product(TimeStampedModel):
    """Core product entity."""

    STATUS_DRAFT = DraftPublished.DRAFT
    STATUS_PUBLISHED = DraftPublished.PUBLISHED
    STATUS_CHOICES = DraftPublished.choices

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PUBLISHED, db_index=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    quantity = models.IntegerField(default=0)
    sold = models.IntegerField(default=0)
    # Allowed variant labels; empty means the product has no color choice
    colors = models.JSONField(default=list, blank=True)
    # File names under PRODUCT_MEDIA_URL, or absolute URLs kept as-is
    image_cover = models.CharField(max_length=255, blank=True)
    images = models.JSONField(default=list, blank=True)
    # Number of distinct client IPs that opened the product page
    views = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["title"]
        constraints = [
            models.CheckConstraint(name="product_price_non_negative", condition=models.Q(price__gte=0)),
            models.CheckConstraint(name="product_quantity_non_negative", condition=models.Q(quantity__gte=0)),
            models.CheckConstraint(name="product_sold_non_negative", condition=models.Q(sold__gte=0)),
        ]
        indexes = [
            models.Index(fields=["status", "title"], name="product_status_title_idx"),
            models.Index(fields=["-sold"], name="product_sold_desc_idx"),
            models.Index(fields=["-views"], name="product_views_desc_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.title

    def accepts_color(self, color: str) -> bool:
        return not self.colors or not color or color in self.colors


class ProductView(models.Model):
    """First visit of a product page from one client IP."""

    product = models.ForeignKey(Product, related_name="page_views", on_delete=models.CASCADE)
    ip_address = models.GenericIPAddressField()
    viewed_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-viewed_at"]
        constraints = [
            models.UniqueConstraint(fields=["product", "ip_address"], name="unique_product_view_per_ip"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"ProductView product={self.product_id} ip={self.ip_address}"
