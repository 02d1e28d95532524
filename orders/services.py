"""Order workflow: placement, card payment confirmation, and status changes.

Placement validates everything (lines, address, products, stock, coupon)
before the first write. The order and its lines are then persisted together;
stock counters are adjusted afterwards, one product at a time, and a failed
adjustment never undoes the order. Notifications go out last and are
best-effort. Card orders are built from the `Checkout` snapshot taken when
the shopper was sent to pay, never from the cart as it is later.
"""

import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from cart.models import Cart
from cart.selectors import get_cart
from catalog.models import Product
from catalog.selectors import find_products
from common.exceptions import (
    InsufficientStock,
    InvalidInput,
    PartialFulfillment,
    PermissionDenied,
    ProductNotFound,
)
from coupons.pricing import PricedLine, Quote, price_lines
from coupons.services import resolve_coupon
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from inventory.models import StockMovement
from inventory.services import AdjustmentReport, StockAdjustment, bulk_adjust

from .domain import OrderLine, ShippingAddress, contact_email, parse_order_lines
from .emails import notify_order_placed
from .models import Checkout, Order, OrderItem
from .payments import CheckoutRequest, CheckoutSession, PaymentEvent, get_payment_gateway
from .selectors import find_order_by_payment_reference, get_checkout_for_update, get_order
from .sequencer import create_with_order_id

logger = logging.getLogger("eshop.orders")


@dataclass
class PlacedOrder:
    order: Order
    quote: Quote
    fulfillment: AdjustmentReport


def _resolve_products(lines: List[OrderLine], *, check_stock: bool = True) -> List[Tuple[OrderLine, Product]]:
    products = find_products(line.product_id for line in lines)
    resolved = []
    for index, line in enumerate(lines):
        product = products.get(line.product_id)
        if product is None or product.status != Product.STATUS_PUBLISHED:
            raise ProductNotFound(
                f"No product found with id {line.product_id} at index {index}", product_id=line.product_id
            )
        if not product.accepts_color(line.color):
            raise InvalidInput(f"Color {line.color!r} is not available for {product.title} at index {index}")
        resolved.append((line, product))

    if check_stock:
        requested: Dict[int, int] = {}
        for line, _ in resolved:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
        for line, product in resolved:
            if requested[product.id] > product.quantity:
                raise InsufficientStock(
                    f"Insufficient stock for product {product.title}",
                    product_id=product.id,
                    available=product.quantity,
                )
    return resolved


def _cart_order_lines(cart: Cart) -> Tuple[List[OrderLine], List[Decimal]]:
    """Lines and unit prices for an order built from ``cart``.

    Cart-backed orders charge the price each line was added or last updated
    at, which is what the cart shows the shopper, whatever the payment method.
    """

    cart_items = list(cart.items.all())
    if not cart_items:
        raise InvalidInput("Cart is empty")
    lines = [OrderLine(product_id=i.product_id, quantity=i.quantity, color=i.color) for i in cart_items]
    return lines, [item.unit_price for item in cart_items]


def _persist_order(
    *,
    resolved: List[Tuple[OrderLine, Optional[Product]]],
    unit_prices: List,
    quote: Quote,
    address: ShippingAddress,
    user=None,
    email: str = "",
    payment_method: str = Order.PAYMENT_CASH,
    is_paid: bool = False,
    payment_reference: Optional[str] = None,
    amount_paid=None,
    titles: Optional[List[str]] = None,
    coupon_name: Optional[str] = None,
) -> Order:
    now = timezone.now()
    titles = titles or [product.title for _, product in resolved]
    if coupon_name is None:
        coupon_name = quote.coupon.name if quote.coupon else ""

    def build(order_id: str) -> Order:
        order = Order.objects.create(
            order_id=order_id,
            user=user if getattr(user, "is_authenticated", False) else None,
            email=email,
            shipping_address=address.as_dict(),
            total_before_discount=quote.subtotal,
            discount_amount=quote.discount_amount,
            total_after_discount=quote.total_after_discount,
            coupon=quote.coupon,
            coupon_name=coupon_name,
            payment_method=payment_method,
            is_paid=is_paid,
            paid_at=now if is_paid else None,
            payment_reference=payment_reference,
            amount_paid=amount_paid,
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=product,
                    product_title=title,
                    color=line.color,
                    quantity=line.quantity,
                    unit_price=unit_price,
                )
                for (line, product), unit_price, title in zip(resolved, unit_prices, titles)
            ]
        )
        return order

    return create_with_order_id(build)


def _fulfil(order: Order, lines: List[OrderLine], *, reason: str) -> AdjustmentReport:
    totals: Dict[int, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    report = bulk_adjust(
        [StockAdjustment(product_id=pid, sold_delta=qty, quantity_delta=-qty) for pid, qty in totals.items()],
        reason=reason,
        reference=order.order_id,
    )
    if not report.ok:
        warning = PartialFulfillment(order.order_id, report.failed_product_ids)
        logger.warning(
            str(warning),
            extra={
                "event": "order.partial_fulfillment",
                "order_id": order.order_id,
                "failed_product_ids": warning.failed_product_ids,
            },
        )
    return report


def _log_placed(order: Order, quote: Quote) -> None:
    logger.info(
        "order.placed",
        extra={
            "event": "order.placed",
            "order_id": order.order_id,
            "user_id": order.user_id,
            "payment_method": order.payment_method,
            "total_after_discount": str(quote.total_after_discount),
            "coupon": order.coupon_name or None,
        },
    )


def place_order(
    *,
    shipping_address,
    items=None,
    from_cart: bool = False,
    coupon_name: Optional[str] = None,
    user=None,
    guest_email: Optional[str] = None,
    now=None,
) -> PlacedOrder:
    """Place a cash order from an explicit product list or the caller's cart.

    Raises ``InvalidInput``, ``CartNotFound``, ``ProductNotFound``,
    ``InsufficientStock`` or a coupon error before anything is written.
    """

    address = ShippingAddress.from_mapping(shipping_address)
    cart: Optional[Cart] = None
    if from_cart:
        if user is None or not getattr(user, "is_authenticated", False):
            raise InvalidInput("Sign in to order from a cart")
        cart = get_cart(user=user)
        lines, unit_prices = _cart_order_lines(cart)
        if not coupon_name and cart.coupon_id:
            coupon_name = cart.coupon.name
        resolved = _resolve_products(lines)
    else:
        lines = parse_order_lines(items)
        resolved = _resolve_products(lines)
        unit_prices = [product.price for _, product in resolved]

    coupon = resolve_coupon(coupon_name) if coupon_name else None
    quote = price_lines(
        [PricedLine(unit_price=price, quantity=line.quantity) for (line, _), price in zip(resolved, unit_prices)],
        coupon=coupon,
        now=now,
    )

    order = _persist_order(
        resolved=resolved,
        unit_prices=unit_prices,
        quote=quote,
        address=address,
        user=user,
        email=contact_email(address, guest_email=guest_email, user=user),
    )
    _log_placed(order, quote)
    report = _fulfil(order, lines, reason=StockMovement.REASON_ORDER)

    if cart is not None:
        Cart.objects.filter(pk=cart.pk).delete()
    notify_order_placed(order)
    return PlacedOrder(order=order, quote=quote, fulfillment=report)


def _new_checkout_reference() -> str:
    return f"chk_{secrets.token_hex(16)}"


def create_checkout_session(*, user, shipping_address, success_url: str, cancel_url: str, now=None) -> CheckoutSession:
    """Price the caller's cart, freeze it as a `Checkout`, and open a hosted card checkout.

    The checkout reference is the correlation id the gateway echoes back on
    completion. Availability, stock and the applied coupon are checked here,
    before the shopper is sent to pay.
    """

    address = ShippingAddress.from_mapping(shipping_address)
    cart = get_cart(user=user)
    lines, unit_prices = _cart_order_lines(cart)
    resolved = _resolve_products(lines)
    quote = price_lines(
        [PricedLine(unit_price=price, quantity=line.quantity) for line, price in zip(lines, unit_prices)],
        coupon=cart.coupon if cart.total_after_discount is not None else None,
        now=now,
    )
    email = contact_email(address, user=user)
    checkout = Checkout.objects.create(
        reference=_new_checkout_reference(),
        user=user,
        cart_id=cart.id,
        lines=[
            {
                "product_id": product.id,
                "title": product.title,
                "color": line.color,
                "quantity": line.quantity,
                "unit_price": str(price),
            }
            for (line, product), price in zip(resolved, unit_prices)
        ],
        total_before_discount=quote.subtotal,
        discount_amount=quote.discount_amount,
        total_after_discount=quote.total_after_discount,
        coupon=quote.coupon,
        coupon_name=quote.coupon.name if quote.coupon else "",
        shipping_address=address.as_dict(),
        email=email,
    )
    request = CheckoutRequest(
        correlation_id=checkout.reference,
        amount=quote.total_after_discount,
        currency=getattr(settings, "PAYMENT_CURRENCY", "usd"),
        description=user.display_name,
        success_url=success_url,
        cancel_url=cancel_url,
        customer_email=email,
        metadata=address.as_dict(),
    )
    session = get_payment_gateway().create_session(request)
    Checkout.objects.filter(pk=checkout.pk).update(session_id=session.session_id)
    logger.info(
        "order.checkout_session_created",
        extra={
            "event": "order.checkout_session_created",
            "cart_id": cart.id,
            "reference": checkout.reference,
            "session_id": session.session_id,
            "amount": str(request.amount),
        },
    )
    return session


def confirm_paid_order(event: PaymentEvent) -> Order:
    """Create the card order for a completed payment from its checkout snapshot.

    Safe to call repeatedly for the same payment: once an order carries the
    event's correlation id, later calls return it unchanged. The order is
    marked paid only when the amount received covers the checkout total.
    """

    existing = find_order_by_payment_reference(event.correlation_id)
    if existing is not None:
        logger.info(
            "order.payment_replayed",
            extra={"event": "order.payment_replayed", "order_id": existing.order_id, "reference": event.correlation_id},
        )
        return existing

    try:
        with transaction.atomic():
            checkout = get_checkout_for_update(reference=event.correlation_id)
            if checkout.order_id is not None:
                return checkout.order
            lines = [
                OrderLine(product_id=row["product_id"], quantity=row["quantity"], color=row.get("color", ""))
                for row in checkout.lines
            ]
            products = find_products(line.product_id for line in lines)
            quote = Quote(
                subtotal=checkout.total_before_discount,
                discount_amount=checkout.discount_amount,
                total_after_discount=checkout.total_after_discount,
                coupon=checkout.coupon,
            )
            fully_paid = event.amount_paid >= checkout.total_after_discount
            address = ShippingAddress.from_mapping(checkout.shipping_address)
            order = _persist_order(
                resolved=[(line, products.get(line.product_id)) for line in lines],
                unit_prices=[Decimal(row["unit_price"]) for row in checkout.lines],
                titles=[row.get("title", "") for row in checkout.lines],
                quote=quote,
                coupon_name=checkout.coupon_name,
                address=address,
                user=checkout.user,
                email=checkout.email or contact_email(address, guest_email=event.payer_email),
                payment_method=Order.PAYMENT_CARD,
                is_paid=fully_paid,
                payment_reference=event.correlation_id,
                amount_paid=event.amount_paid,
            )
            checkout.order = order
            checkout.save(update_fields=["order", "updated_at"])
            # A cart edited after checkout holds items nobody has paid for yet
            Cart.objects.filter(pk=checkout.cart_id, updated_at__lte=checkout.created_at).delete()
    except IntegrityError:
        # A concurrent delivery of the same event may have won the race
        winner = find_order_by_payment_reference(event.correlation_id)
        if winner is not None:
            return winner
        raise

    _log_placed(order, quote)
    if event.amount_paid != checkout.total_after_discount:
        logger.warning(
            "order.amount_mismatch",
            extra={
                "event": "order.amount_mismatch",
                "order_id": order.order_id,
                "amount_paid": str(event.amount_paid),
                "expected": str(checkout.total_after_discount),
                "is_paid": fully_paid,
            },
        )
    _fulfil(order, lines, reason=StockMovement.REASON_PAYMENT)
    notify_order_placed(order)
    return order


def _require(caller, *, admin: bool = False) -> None:
    allowed = getattr(caller, "is_admin_role" if admin else "is_staff_role", False)
    if not (caller is not None and getattr(caller, "is_authenticated", False) and allowed):
        raise PermissionDenied("Admin role required" if admin else "Staff role required")


def _log_transition(order: Order, transition: str, caller) -> None:
    logger.info(
        "order_status_changed",
        extra={
            "event": "order.status_changed",
            "order_id": order.order_id,
            "transition": transition,
            "actor_id": getattr(caller, "id", None),
        },
    )


@transaction.atomic
def mark_paid(*, order_id: str, caller) -> Order:
    """Record payment for a cash order. Already-paid orders are returned as-is."""

    _require(caller)
    order = get_order(order_id=order_id, caller=caller)
    if order.is_paid:
        return order
    order.is_paid = True
    order.paid_at = timezone.now()
    order.save(update_fields=["is_paid", "paid_at", "updated_at"])
    _log_transition(order, "paid", caller)
    return order


@transaction.atomic
def mark_delivered(*, order_id: str, caller) -> Order:
    _require(caller)
    order = get_order(order_id=order_id, caller=caller)
    if order.is_delivered:
        return order
    order.is_delivered = True
    order.delivered_at = timezone.now()
    order.save(update_fields=["is_delivered", "delivered_at", "updated_at"])
    _log_transition(order, "delivered", caller)
    return order


@transaction.atomic
def soft_delete(*, order_id: str, caller) -> Order:
    """Hide an order from every normal read path."""

    _require(caller, admin=True)
    order = get_order(order_id=order_id, caller=caller)
    order.deleted = True
    order.deleted_at = timezone.now()
    order.save(update_fields=["deleted", "deleted_at", "updated_at"])
    _log_transition(order, "deleted", caller)
    return order


@transaction.atomic
def restore_order(*, order_id: str, caller) -> Order:
    """Admin override that brings a soft-deleted order back."""

    _require(caller, admin=True)
    order = get_order(order_id=order_id, caller=caller, include_deleted=True)
    if not order.deleted:
        return order
    order.deleted = False
    order.deleted_at = None
    order.save(update_fields=["deleted", "deleted_at", "updated_at"])
    _log_transition(order, "restored", caller)
    return order
