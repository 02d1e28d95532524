"""Order models.

An order is an immutable snapshot of what was bought and at what price:
line prices, product titles, the shipping address, and the coupon name are
copied at placement time so later catalog or coupon edits never change it.
Orders are never hard-deleted through the API; `deleted` hides them from
normal reads.
"""

from decimal import Decimal

from common.choices import PaymentMethod
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Order(TimeStampedModel):
    """Placed order with denormalized totals."""

    PAYMENT_CASH = PaymentMethod.CASH
    PAYMENT_CARD = PaymentMethod.CARD
    PAYMENT_CHOICES = PaymentMethod.choices

    order_id = models.CharField(max_length=16, unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="orders", on_delete=models.SET_NULL
    )
    email = models.EmailField(blank=True)
    shipping_address = models.JSONField(default=dict)

    total_before_discount = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_after_discount = models.DecimalField(max_digits=12, decimal_places=2)
    coupon = models.ForeignKey(
        "coupons.Coupon", null=True, blank=True, on_delete=models.SET_NULL, related_name="orders"
    )
    coupon_name = models.CharField(max_length=64, blank=True)

    payment_method = models.CharField(max_length=8, choices=PAYMENT_CHOICES, default=PAYMENT_CASH)
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    is_delivered = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(null=True, blank=True)

    # Correlation id of the payment that created this order (checkout reference for card payments)
    payment_reference = models.CharField(max_length=64, unique=True, null=True, blank=True)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "deleted", "created_at"], name="order_user_deleted_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                name="order_total_after_discount_non_negative", condition=models.Q(total_after_discount__gte=0)
            ),
            models.CheckConstraint(
                name="order_discount_within_total",
                condition=models.Q(total_after_discount__lte=models.F("total_before_discount")),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Order {self.order_id} user={self.user_id}"


class OrderItem(TimeStampedModel):
    """Line item within an order.

    Snapshots the product title, color, and unit price at placement time.
    """

    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey(
        "catalog.Product", null=True, blank=True, related_name="order_items", on_delete=models.SET_NULL
    )
    product_title = models.CharField(max_length=200, blank=True)
    color = models.CharField(max_length=32, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["order", "product"], name="orderitem_order_product_idx"),
        ]
        constraints = [
            models.CheckConstraint(name="orderitem_price_non_negative", condition=models.Q(unit_price__gte=0)),
            models.CheckConstraint(name="orderitem_quantity_positive", condition=models.Q(quantity__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"OrderItem#{self.id} order={self.order_id} product={self.product_id} qty={self.quantity}"

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * Decimal(int(self.quantity))


class Checkout(TimeStampedModel):
    """Priced copy of a cart taken when it is handed to the payment gateway.

    The paid order is built from this row rather than from the live cart, so
    cart edits after checkout never change what the payment buys.
    """

    reference = models.CharField(max_length=64, unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="checkouts", on_delete=models.SET_NULL
    )
    # Plain id: the cart may be gone by the time the payment completes
    cart_id = models.BigIntegerField(null=True, blank=True)
    # [{"product_id", "title", "color", "quantity", "unit_price"}]
    lines = models.JSONField(default=list)
    total_before_discount = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_after_discount = models.DecimalField(max_digits=12, decimal_places=2)
    coupon = models.ForeignKey(
        "coupons.Coupon", null=True, blank=True, on_delete=models.SET_NULL, related_name="checkouts"
    )
    coupon_name = models.CharField(max_length=64, blank=True)
    shipping_address = models.JSONField(default=dict)
    email = models.EmailField(blank=True)
    session_id = models.CharField(max_length=255, blank=True)
    order = models.OneToOneField(Order, null=True, blank=True, related_name="checkout", on_delete=models.SET_NULL)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Checkout {self.reference} cart={self.cart_id}"
