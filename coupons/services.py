"""Coupon lookups that sit in front of the pricing engine."""

import logging
from datetime import datetime
from typing import Iterable, Optional

from common.exceptions import InvalidCoupon

from .models import Coupon
from .pricing import PricedLine, Quote, ensure_usable, price_lines

logger = logging.getLogger("eshop.coupons")


def resolve_coupon(name: str) -> Coupon:
    """Return the coupon called ``name`` or raise ``InvalidCoupon``."""

    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidCoupon("Coupon name is required")
    try:
        return Coupon.objects.get(name=cleaned)
    except Coupon.DoesNotExist:
        logger.info("coupon.rejected", extra={"event": "coupon.rejected", "coupon": cleaned, "reason": "unknown"})
        raise InvalidCoupon(f"Invalid coupon name: {cleaned}", coupon=cleaned)


def check_coupon(name: str, now: Optional[datetime] = None) -> Coupon:
    """Resolve and validate a coupon without pricing anything."""

    coupon = resolve_coupon(name)
    ensure_usable(coupon, now=now)
    return coupon


def quote_for_coupon_name(lines: Iterable[PricedLine], name: Optional[str], now: Optional[datetime] = None) -> Quote:
    """Price ``lines`` with the named coupon, or without one when ``name`` is empty."""

    coupon = resolve_coupon(name) if name else None
    return price_lines(list(lines), coupon=coupon, now=now)
