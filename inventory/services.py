"""Inventory services (single-location): stock counter adjustments.

`bulk_adjust` is the only writer of `Product.quantity` and `Product.sold`
after a product is created. Every adjustment runs in its own transaction as a
single conditional UPDATE, so concurrent orders never oversell: a decrement
only lands when the row still holds enough stock at write time.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from catalog.models import Product
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from .models import StockMovement

logger = logging.getLogger("eshop.inventory")


@dataclass(frozen=True)
class StockAdjustment:
    product_id: int
    sold_delta: int = 0
    quantity_delta: int = 0


@dataclass(frozen=True)
class FailedAdjustment:
    adjustment: StockAdjustment
    reason: str


@dataclass
class AdjustmentReport:
    applied: List[StockAdjustment] = field(default_factory=list)
    failed: List[FailedAdjustment] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def failed_product_ids(self) -> List[int]:
        return [f.adjustment.product_id for f in self.failed]


def _apply_one(adjustment: StockAdjustment, *, reason: str, reference: str) -> bool:
    qs = Product.objects.filter(pk=adjustment.product_id)
    if adjustment.quantity_delta < 0:
        qs = qs.filter(quantity__gte=-adjustment.quantity_delta)
    if adjustment.sold_delta < 0:
        qs = qs.filter(sold__gte=-adjustment.sold_delta)
    with transaction.atomic():
        updated = qs.update(
            quantity=F("quantity") + adjustment.quantity_delta,
            sold=F("sold") + adjustment.sold_delta,
            updated_at=timezone.now(),
        )
        if updated:
            StockMovement.objects.create(
                product_id=adjustment.product_id,
                quantity_delta=adjustment.quantity_delta,
                sold_delta=adjustment.sold_delta,
                reason=reason,
                reference=reference,
            )
    return bool(updated)


def bulk_adjust(
    adjustments: Iterable[StockAdjustment], *, reason: str = StockMovement.REASON_ORDER, reference: str = ""
) -> AdjustmentReport:
    """Apply independent stock adjustments and report which ones landed.

    Adjustments are not all-or-nothing: a failure on one product leaves the
    others applied. Failures are logged and returned, never retried.
    """

    report = AdjustmentReport()
    for adjustment in adjustments:
        if adjustment.quantity_delta == 0 and adjustment.sold_delta == 0:
            continue
        try:
            applied = _apply_one(adjustment, reason=reason, reference=reference)
        except DatabaseError as exc:
            logger.exception(
                "inventory.adjust_error",
                extra={"event": "inventory.adjust_error", "product_id": adjustment.product_id, "reference": reference},
            )
            report.failed.append(FailedAdjustment(adjustment, f"database error: {exc.__class__.__name__}"))
            continue
        if applied:
            report.applied.append(adjustment)
        else:
            logger.warning(
                "inventory.adjust_skipped",
                extra={
                    "event": "inventory.adjust_skipped",
                    "product_id": adjustment.product_id,
                    "quantity_delta": adjustment.quantity_delta,
                    "reference": reference,
                },
            )
            report.failed.append(FailedAdjustment(adjustment, "product missing or insufficient stock"))
    return report


def restock(*, product_id: int, quantity: int, reference: str = "") -> AdjustmentReport:
    """Add (or with a negative value, write off) available stock by hand."""

    return bulk_adjust(
        [StockAdjustment(product_id=product_id, quantity_delta=quantity)],
        reason=StockMovement.REASON_MANUAL,
        reference=reference,
    )
