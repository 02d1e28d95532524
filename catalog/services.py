"""Catalog writes that happen outside staff CRUD: page view tracking."""

import logging
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.db.models import F

from .models import Product, ProductView

logger = logging.getLogger("eshop.catalog")


def client_ip(request) -> Optional[str]:
    """Best-effort client address, or None when it is not a valid IP.

    ``X-Forwarded-For`` is only honoured when ``TRUST_X_FORWARDED_FOR`` is on;
    its first entry is the client.
    """

    raw = None
    if getattr(settings, "TRUST_X_FORWARDED_FOR", False):
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        raw = forwarded.split(",")[0].strip() or None
    raw = raw or request.META.get("REMOTE_ADDR")
    if not raw:
        return None
    if raw.startswith("::ffff:"):
        raw = raw[len("::ffff:") :]
    try:
        validate_ipv46_address(raw)
    except ValidationError:
        return None
    return raw


def record_view(*, product: Product, ip_address: Optional[str]) -> bool:
    """Count a page view once per client IP. Returns True for a first visit."""

    if not ip_address:
        return False
    _, created = ProductView.objects.get_or_create(product=product, ip_address=ip_address)
    if created:
        Product.objects.filter(pk=product.pk).update(views=F("views") + 1)
        logger.debug(
            "catalog.product_viewed",
            extra={"event": "catalog.product_viewed", "product_id": product.pk},
        )
    return created
