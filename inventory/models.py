"""Inventory models (single-location).

Stock counters live on `catalog.Product`; this app keeps the ledger of every
change applied to them.
"""

from common.choices import MovementReason
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class StockMovement(TimeStampedModel):
    REASON_ORDER = MovementReason.ORDER
    REASON_PAYMENT = MovementReason.PAYMENT
    REASON_MANUAL = MovementReason.MANUAL
    REASON_CHOICES = MovementReason.choices

    product = models.ForeignKey("catalog.Product", on_delete=models.CASCADE, related_name="movements")
    quantity_delta = models.IntegerField(default=0)  # signed change to available stock
    sold_delta = models.IntegerField(default=0)  # signed change to the sold counter
    reason = models.CharField(max_length=16, choices=REASON_CHOICES)
    reference = models.CharField(max_length=120, blank=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "id"]
        constraints = [
            models.CheckConstraint(
                name="movement_non_zero",
                condition=~(models.Q(quantity_delta=0) & models.Q(sold_delta=0)),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.reason} q{self.quantity_delta:+d} s{self.sold_delta:+d} for {self.product_id}"
