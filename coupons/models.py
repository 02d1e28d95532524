"""Coupon models.

A coupon is a named percentage discount valid until `expire`. Fixed-amount
coupons are not supported: `discount` is always a percentage of the subtotal.
"""

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Coupon(TimeStampedModel):
    name = models.CharField(max_length=64, unique=True)
    expire = models.DateTimeField()
    discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text="Percentage of the subtotal, 0 to 100",
    )

    class Meta:
        ordering = ["-expire", "name"]
        constraints = [
            models.CheckConstraint(
                name="coupon_discount_percentage_range",
                condition=models.Q(discount__gte=0) & models.Q(discount__lte=100),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.discount}%)"

    def save(self, *args, **kwargs):
        if self.name:
            self.name = self.name.strip()
        super().save(*args, **kwargs)
