"""Selectors for the inventory ledger."""

from django.db.models import QuerySet
from django.utils.dateparse import parse_datetime

from .models import StockMovement


def list_movements(*, product_id=None, reason=None, reference=None, created_after=None) -> QuerySet[StockMovement]:
    qs = StockMovement.objects.select_related("product").order_by("-created_at", "id")
    if product_id:
        qs = qs.filter(product_id=product_id)
    if reason:
        qs = qs.filter(reason=reason)
    if reference:
        qs = qs.filter(reference=reference)
    if created_after:
        dt = parse_datetime(created_after)
        if dt:
            qs = qs.filter(created_at__gte=dt)
    return qs
