"""Selectors for the catalog domain.

Read-only lookups used by the cart and order services, plus the page view
reports behind the admin analytics endpoints. Nothing here writes.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from common.exceptions import ProductNotFound
from django.db.models import Count, Q, QuerySet
from django.db.models.functions import TruncDate

from .models import Product, ProductView


def find_product(product_id) -> Product:
    """Return the product with ``product_id`` or raise ``ProductNotFound``."""

    try:
        return Product.objects.get(id=product_id)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise ProductNotFound(f"No product found with id {product_id}", product_id=product_id)


def find_products(product_ids: Iterable) -> Dict[int, Product]:
    """Resolve many products in one query, keyed by id.

    Missing ids are simply absent from the result; callers decide which
    error to raise and with which line index.
    """

    ids = {int(pid) for pid in product_ids}
    return Product.objects.in_bulk(list(ids))


def list_products(*, search: Optional[str] = None, ordering: Optional[Iterable[str]] = None) -> QuerySet[Product]:
    """Return published products, optionally filtered by a text search."""

    qs = Product.objects.filter(status=Product.STATUS_PUBLISHED)
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))
    ordering = list(ordering or ("title",))
    return qs.order_by(*ordering)


def get_product_by_slug(slug: str) -> Optional[Product]:
    """Return a single published product by slug, or None if not found."""

    try:
        return Product.objects.get(slug=slug, status=Product.STATUS_PUBLISHED)
    except Product.DoesNotExist:
        return None


def daily_views(*, product_id, start: Optional[date] = None, end: Optional[date] = None) -> List[dict]:
    """Distinct visiting IPs per day for one product, newest day first."""

    qs = ProductView.objects.filter(product_id=product_id)
    if start is not None:
        qs = qs.filter(viewed_at__date__gte=start)
    if end is not None:
        qs = qs.filter(viewed_at__date__lte=end)
    rows = (
        qs.annotate(day=TruncDate("viewed_at"))
        .values("day")
        .annotate(views=Count("ip_address", distinct=True))
        .order_by("-day")
    )
    return [{"date": row["day"], "views": row["views"]} for row in rows]


def most_viewed_products() -> QuerySet[Product]:
    return Product.objects.order_by("-views", "title")
