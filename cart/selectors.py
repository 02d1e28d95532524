"""Selectors for read-only cart queries."""

from decimal import Decimal
from typing import List

from common.exceptions import CartNotFound
from coupons.pricing import PricedLine
from django.db.models import F, Sum

from .models import Cart


def get_cart(*, user) -> Cart:
    """Return the user's cart or raise ``CartNotFound``."""

    try:
        return Cart.objects.select_related("coupon").get(user_id=getattr(user, "id", None))
    except Cart.DoesNotExist:
        raise CartNotFound("There is no cart for this user")


def get_cart_for_update(*, user=None, cart_id=None) -> Cart:
    """Lock and return a cart by owner or id. Must run inside a transaction."""

    lookup = {"id": cart_id} if cart_id is not None else {"user_id": getattr(user, "id", None)}
    try:
        return Cart.objects.select_for_update().get(**lookup)
    except (Cart.DoesNotExist, ValueError, TypeError):
        raise CartNotFound("There is no cart for this user" if cart_id is None else f"No cart with id {cart_id}")


def cart_lines(*, cart: Cart) -> List[PricedLine]:
    return [PricedLine(unit_price=item.unit_price, quantity=item.quantity) for item in cart.items.all()]


def cart_subtotal(*, cart: Cart) -> Decimal:
    """Compute the cart subtotal from its items in the database."""

    agg = cart.items.aggregate(subtotal=Sum(F("unit_price") * F("quantity")))
    return (agg.get("subtotal") or Decimal("0.00")).quantize(Decimal("0.01"))
