"""Pricing engine: line items plus an optional coupon give a quote.

Pure functions: nothing here queries or writes the database, so carts,
orders, and the coupon status endpoint all share one computation.
"""

from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

from common.exceptions import ExpiredCoupon, InvalidDiscount
from django.utils import timezone
from django.utils.dateparse import parse_datetime

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PricedLine:
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * int(self.quantity)


@dataclass(frozen=True)
class Quote:
    subtotal: Decimal
    discount_amount: Decimal
    total_after_discount: Decimal
    coupon: Optional[object] = None

    @property
    def coupon_summary(self) -> Optional[dict]:
        if self.coupon is None:
            return None
        return {
            "name": self.coupon.name,
            "discount": str(self.coupon.discount),
            "discount_amount": str(self.discount_amount),
        }


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _coerce_expiry(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
    else:
        parsed = None
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def discount_percentage(coupon) -> Decimal:
    """Return the coupon's percentage or raise ``InvalidDiscount``."""

    try:
        pct = Decimal(str(coupon.discount))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidDiscount(f"Coupon {coupon.name} has an invalid discount value")
    if pct.is_nan() or pct < 0 or pct > HUNDRED:
        raise InvalidDiscount(f"Coupon {coupon.name} discount must be between 0 and 100")
    return pct


def ensure_usable(coupon, now: Optional[datetime] = None) -> Decimal:
    """Validate expiry and percentage at evaluation time.

    Returns the discount percentage. An absent or unparsable expiry counts as
    expired, matching a coupon whose expiry is in the past.
    """

    if not getattr(coupon, "expire", None):
        raise ExpiredCoupon(f"Coupon {coupon.name} has no expiration date")
    expire = _coerce_expiry(coupon.expire)
    if expire is None:
        raise ExpiredCoupon(f"Coupon {coupon.name} has an invalid expiration date")
    if expire <= (now or timezone.now()):
        raise ExpiredCoupon(f"Coupon {coupon.name} has expired")
    return discount_percentage(coupon)


def price_lines(lines: Iterable[PricedLine], coupon=None, now: Optional[datetime] = None) -> Quote:
    """Compute subtotal, discount, and total for ``lines``.

    ``total_after_discount`` is clamped at zero and never exceeds the subtotal.
    """

    subtotal = _money(sum((line.line_total for line in lines), ZERO))
    if coupon is None:
        return Quote(subtotal=subtotal, discount_amount=ZERO, total_after_discount=subtotal)

    pct = ensure_usable(coupon, now=now)
    discount = _money(subtotal * pct / HUNDRED)
    total = max(ZERO, subtotal - discount)
    return Quote(subtotal=subtotal, discount_amount=discount, total_after_discount=total, coupon=coupon)
