"""Email utilities for the orders app.

Uses Django's email backend. Both messages are best-effort: callers go
through `notify_order_placed`, which logs delivery failures instead of
raising them.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger("eshop.orders")


def _order_summary(order) -> str:
    lines = [f"- {item.product_title} x{item.quantity} @ ${item.unit_price}" for item in order.items.all()]
    address = order.shipping_address or {}
    location = ", ".join(
        str(address[key]) for key in ("details", "city", "apartment", "floor", "street") if address.get(key)
    )
    summary = [
        f"Order ID: {order.order_id}",
        "",
        *lines,
        "",
        f"Subtotal: ${order.total_before_discount}",
    ]
    if order.coupon_name:
        summary.append(f"Coupon Applied ({order.coupon_name}): -${order.discount_amount}")
    summary += [
        f"Total After Discount: ${order.total_after_discount}",
        f"Payment: {order.get_payment_method_display()}{' (paid)' if order.is_paid else ''}",
        "",
        "Shipping Address:",
        location,
        f"Phone: {address.get('phone', '')}",
    ]
    return "\n".join(summary)


def send_order_confirmation_email(order) -> bool:
    """Send the customer confirmation. No-op when the order has no email."""

    if not order.email:
        return False
    name = (order.shipping_address or {}).get("name", "")
    body = (
        f"Hi {name},\n\n"
        "Thank you for shopping with E-shop! Here are your order details:\n\n"
        f"{_order_summary(order)}\n\n"
        "We will notify you once your order is shipped.\n"
    )
    send_mail(
        "Your E-shop Order Confirmation",
        body,
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [order.email],
        fail_silently=False,
    )
    return True


def send_operator_notification_email(order) -> bool:
    """Tell the shop operator about a new order. No-op without ORDER_NOTIFICATION_EMAIL."""

    operator = getattr(settings, "ORDER_NOTIFICATION_EMAIL", "")
    if not operator:
        return False
    kind = "Card" if order.payment_method == order.PAYMENT_CARD else "Cash"
    customer = (order.shipping_address or {}).get("name", "")
    body = (
        "Hello Admin,\n\n"
        f"A new {kind.lower()} order has been placed on E-shop.\n"
        f"Customer: {customer}\n"
        f"Customer Email: {order.email or 'N/A'}\n\n"
        f"{_order_summary(order)}\n\n"
        "Please review the order in the admin panel.\n"
    )
    send_mail(
        f"New {kind} Order Placed - Order ID: {order.order_id}",
        body,
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [operator],
        fail_silently=False,
    )
    return True


def notify_order_placed(order) -> None:
    for sender in (send_order_confirmation_email, send_operator_notification_email):
        try:
            sender(order)
        except Exception:
            logger.exception(
                "order.notification_failed",
                extra={"event": "order.notification_failed", "order_id": order.order_id, "sender": sender.__name__},
            )
