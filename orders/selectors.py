"""Read paths for orders.

Every read goes through `visible_orders`, which hides soft-deleted orders
unless an admin explicitly asks for them and scopes shoppers to their own
orders. Lookups that fall outside the visible set fail with `OrderNotFound`
rather than revealing that the order exists.
"""

from common.exceptions import CheckoutNotFound, OrderNotFound, PermissionDenied
from django.db.models import QuerySet

from .models import Checkout, Order


def _is_staff(caller) -> bool:
    return bool(caller is not None and getattr(caller, "is_authenticated", False) and caller.is_staff_role)


def _is_admin(caller) -> bool:
    return bool(caller is not None and getattr(caller, "is_authenticated", False) and caller.is_admin_role)


def visible_orders(caller, *, include_deleted: bool = False) -> QuerySet[Order]:
    qs = Order.objects.select_related("user", "coupon").prefetch_related("items")
    if not (include_deleted and _is_admin(caller)):
        qs = qs.filter(deleted=False)
    if not _is_staff(caller):
        if caller is None or not getattr(caller, "is_authenticated", False):
            return qs.none()
        qs = qs.filter(user_id=caller.id)
    return qs


def get_order(*, order_id: str, caller, include_deleted: bool = False) -> Order:
    try:
        return visible_orders(caller, include_deleted=include_deleted).get(order_id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFound(f"There is no such order with this id: {order_id}")


def list_orders(*, caller) -> QuerySet[Order]:
    """Staff see every live order; shoppers see their own."""

    return visible_orders(caller).order_by("-created_at", "-id")


def list_deleted_orders(*, caller) -> QuerySet[Order]:
    """Trash view of soft-deleted orders, admins only."""

    if not _is_admin(caller):
        raise PermissionDenied("Only admins can view deleted orders")
    return visible_orders(caller, include_deleted=True).filter(deleted=True).order_by("-deleted_at", "-id")


def find_order_by_payment_reference(reference: str):
    return Order.objects.filter(payment_reference=str(reference)).first()


def get_checkout_for_update(*, reference: str) -> Checkout:
    """Lock and return a checkout snapshot. Must run inside a transaction."""

    try:
        return Checkout.objects.select_for_update().get(reference=str(reference))
    except Checkout.DoesNotExist:
        raise CheckoutNotFound(f"No checkout with reference {reference}")
