"""Cart services: item mutations, coupon application, and reaping.

Every mutation runs in one transaction with the cart row locked, so two
concurrent requests for the same user serialize instead of interleaving.
"""

import logging
from datetime import timedelta
from typing import Optional, Tuple

from catalog.models import Product
from catalog.selectors import find_product
from common.exceptions import InsufficientStock, InvalidInput, InvalidQuantity, ItemNotFound, ProductNotFound
from coupons.pricing import Quote
from coupons.services import quote_for_coupon_name
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import Cart, CartItem
from .selectors import cart_lines, cart_subtotal, get_cart_for_update

logger = logging.getLogger("eshop.cart")


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {quantity!r}")
    return quantity


def _sellable_product(product_id) -> Product:
    product = find_product(product_id)
    if product.status != Product.STATUS_PUBLISHED:
        raise ProductNotFound(f"No product found with id {product_id}", product_id=product_id)
    return product


def _ensure_stock(product: Product, quantity: int) -> None:
    if quantity > product.quantity:
        raise InsufficientStock(
            f"Only {product.quantity} item(s) of {product.title} left in stock",
            product_id=product.id,
            available=product.quantity,
        )


def _recalculate(cart: Cart) -> Cart:
    """Refresh the cached subtotal and drop any applied discount."""

    cart.subtotal = cart_subtotal(cart=cart)
    cart.total_after_discount = None
    cart.coupon = None
    cart.save(update_fields=["subtotal", "total_after_discount", "coupon", "updated_at"])
    return cart


@transaction.atomic
def add_item(*, user, product_id, quantity, color: str = "") -> CartItem:
    """Add a product to the user's cart, creating the cart on first use.

    An existing line for the same product and color has its quantity replaced
    (not incremented) and its unit price refreshed from the catalog.
    """

    quantity = _validate_quantity(quantity)
    product = _sellable_product(product_id)
    color = (color or "").strip()
    if not product.accepts_color(color):
        raise InvalidInput(f"Color {color!r} is not available for {product.title}", product_id=product.id)
    _ensure_stock(product, quantity)

    Cart.objects.get_or_create(user=user)
    cart = get_cart_for_update(user=user)

    item = CartItem.objects.select_for_update().filter(cart=cart, product=product, color=color).first()
    if item is not None:
        item.quantity = quantity
        item.unit_price = product.price
        item.save(update_fields=["quantity", "unit_price", "updated_at"])
        event = "cart.item_updated"
    else:
        item = CartItem.objects.create(
            cart=cart, product=product, color=color, quantity=quantity, unit_price=product.price
        )
        event = "cart.item_added"
    _recalculate(cart)
    logger.info(
        event,
        extra={
            "event": event,
            "cart_id": cart.id,
            "user_id": getattr(user, "id", None),
            "product_id": product.id,
            "quantity": quantity,
        },
    )
    return item


@transaction.atomic
def update_item_quantity(*, user, item_id, quantity) -> CartItem:
    """Set a cart line's quantity after re-checking stock."""

    quantity = _validate_quantity(quantity)
    cart = get_cart_for_update(user=user)
    try:
        item = CartItem.objects.select_for_update().select_related("product").get(id=item_id, cart=cart)
    except (CartItem.DoesNotExist, ValueError, TypeError):
        raise ItemNotFound(f"There is no item for this id: {item_id}")
    _ensure_stock(item.product, quantity)
    item.quantity = quantity
    item.unit_price = item.product.price
    item.save(update_fields=["quantity", "unit_price", "updated_at"])
    _recalculate(cart)
    logger.info(
        "cart.item_updated",
        extra={"event": "cart.item_updated", "cart_id": cart.id, "item_id": item.id, "quantity": quantity},
    )
    return item


@transaction.atomic
def remove_item(*, user, item_id) -> Cart:
    """Remove a line from the cart. The cart itself stays, even when empty."""

    cart = get_cart_for_update(user=user)
    try:
        deleted, _ = CartItem.objects.filter(id=item_id, cart=cart).delete()
    except (ValueError, TypeError):
        deleted = 0
    if not deleted:
        raise ItemNotFound(f"There is no item for this id: {item_id}")
    _recalculate(cart)
    logger.info("cart.item_removed", extra={"event": "cart.item_removed", "cart_id": cart.id, "item_id": item_id})
    return cart


@transaction.atomic
def clear_cart(*, user) -> None:
    """Delete the user's cart and all of its items."""

    cart = get_cart_for_update(user=user)
    cart_id = cart.id
    cart.delete()
    logger.info("cart.cleared", extra={"event": "cart.cleared", "cart_id": cart_id, "user_id": user.id})


@transaction.atomic
def apply_coupon(*, user, name: str, now=None) -> Tuple[Cart, Quote]:
    """Price the cart with a coupon and persist the discounted total.

    Coupon failures propagate before anything is written.
    """

    cart = get_cart_for_update(user=user)
    quote = quote_for_coupon_name(cart_lines(cart=cart), name, now=now)
    cart.subtotal = quote.subtotal
    cart.total_after_discount = quote.total_after_discount
    cart.coupon = quote.coupon
    cart.save(update_fields=["subtotal", "total_after_discount", "coupon", "updated_at"])
    logger.info(
        "cart.coupon_applied",
        extra={
            "event": "cart.coupon_applied",
            "cart_id": cart.id,
            "coupon": quote.coupon.name,
            "discount_amount": str(quote.discount_amount),
        },
    )
    return cart, quote


def reap_abandoned_carts(*, older_than_days: Optional[int] = None, now=None) -> int:
    """Delete carts not touched for ``older_than_days`` (``CART_RETENTION_DAYS``)."""

    days = older_than_days if older_than_days is not None else getattr(settings, "CART_RETENTION_DAYS", 30)
    cutoff = (now or timezone.now()) - timedelta(days=int(days))
    stale = Cart.objects.filter(updated_at__lt=cutoff)
    count = stale.count()
    stale.delete()
    logger.info("cart.reaped", extra={"event": "cart.reaped", "count": count, "cutoff": cutoff.isoformat()})
    return count
