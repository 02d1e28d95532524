import logging
from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from cart.models import Cart
from cart.services import add_item, apply_coupon
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from common.exceptions import (
    CartNotFound,
    ExpiredCoupon,
    InsufficientStock,
    InvalidCoupon,
    InvalidInput,
    ProductNotFound,
)
from coupons.tests.factories import CouponFactory
from django.utils import timezone
from inventory import services as inventory_services
from inventory.models import StockMovement
from orders.models import Order
from orders.services import create_checkout_session, place_order
from orders.tests.factories import ADDRESS
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_twenty_percent_coupon_order_totals_and_stock():
    product = ProductFactory(price=Decimal("10.00"), quantity=5, sold=0)
    CouponFactory(name="SAVE20", discount=Decimal("20"))

    placed = place_order(
        shipping_address=ADDRESS,
        items=[{"product_id": product.id, "quantity": 2}],
        coupon_name="SAVE20",
    )

    order = placed.order
    assert order.total_before_discount == Decimal("20.00")
    assert order.discount_amount == Decimal("4.00")
    assert order.total_after_discount == Decimal("16.00")
    assert order.coupon_name == "SAVE20"
    assert order.payment_method == Order.PAYMENT_CASH
    assert not order.is_paid
    assert len(order.order_id) == 6 and order.order_id.isalnum()
    assert placed.fulfillment.ok

    product.refresh_from_db()
    assert (product.quantity, product.sold) == (3, 2)
    assert StockMovement.objects.get(reference=order.order_id).quantity_delta == -2


@pytest.mark.django_db
def test_empty_product_list_is_rejected_and_nothing_persisted():
    with pytest.raises(InvalidInput):
        place_order(shipping_address=ADDRESS, items=[])
    assert Order.objects.count() == 0


@pytest.mark.django_db
@pytest.mark.parametrize(
    "address",
    [None, {}, {"name": "Jane", "details": "x", "city": "Cairo"}, dict(ADDRESS, email="not-an-email")],
)
def test_incomplete_address_is_rejected(address):
    product = ProductFactory()
    with pytest.raises(InvalidInput):
        place_order(shipping_address=address, items=[{"product_id": product.id, "quantity": 1}])
    assert Order.objects.count() == 0


@pytest.mark.django_db
@pytest.mark.parametrize(
    "items",
    [
        [{"quantity": 1}],
        [{"product_id": "abc"}],
        [{"product_id": 1, "quantity": 0}],
        [{"product_id": 1, "quantity": "2"}],
        ["not-an-object"],
    ],
)
def test_malformed_lines_are_rejected(items):
    with pytest.raises(InvalidInput):
        place_order(shipping_address=ADDRESS, items=items)


@pytest.mark.django_db
def test_unknown_product_reports_line_index():
    product = ProductFactory()
    with pytest.raises(ProductNotFound) as excinfo:
        place_order(
            shipping_address=ADDRESS,
            items=[{"product_id": product.id, "quantity": 1}, {"product_id": 999999, "quantity": 1}],
        )
    assert "index 1" in str(excinfo.value)
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_stock_check_sums_quantities_per_product():
    product = ProductFactory(quantity=3, colors=["red", "blue"])
    with pytest.raises(InsufficientStock):
        place_order(
            shipping_address=ADDRESS,
            items=[
                {"product_id": product.id, "quantity": 2, "color": "red"},
                {"product_id": product.id, "quantity": 2, "color": "blue"},
            ],
        )
    product.refresh_from_db()
    assert product.quantity == 3


@pytest.mark.django_db
def test_coupon_errors_abort_before_any_write():
    product = ProductFactory()
    CouponFactory(name="OLD", expire=timezone.now() - timedelta(days=1))
    with pytest.raises(InvalidCoupon):
        place_order(shipping_address=ADDRESS, items=[{"product_id": product.id}], coupon_name="NOPE")
    with pytest.raises(ExpiredCoupon):
        place_order(shipping_address=ADDRESS, items=[{"product_id": product.id}], coupon_name="OLD")
    assert Order.objects.count() == 0
    assert StockMovement.objects.count() == 0


@pytest.mark.django_db
def test_order_lines_keep_price_snapshot_after_catalog_change():
    product = ProductFactory(price=Decimal("7.50"), title="Mug")
    order = place_order(shipping_address=ADDRESS, items=[{"product_id": product.id, "quantity": 2}]).order

    Product.objects.filter(pk=product.pk).update(price=Decimal("99.00"), title="Renamed Mug")

    reloaded = Order.objects.get(pk=order.pk)
    item = reloaded.items.get()
    assert item.unit_price == Decimal("7.50")
    assert item.product_title == "Mug"
    assert item.line_total == Decimal("15.00")
    assert reloaded.total_after_discount == Decimal("15.00")


@pytest.mark.django_db
def test_guest_order_has_no_user_and_uses_shipping_email():
    product = ProductFactory()
    order = place_order(shipping_address=ADDRESS, items=[{"product_id": product.id}]).order
    assert order.user is None
    assert order.email == "jane@example.com"
    assert order.items.get().quantity == 1


@pytest.mark.django_db
def test_order_from_cart_uses_cart_coupon_and_deletes_cart():
    user = UserFactory()
    product = ProductFactory(price=Decimal("10.00"), quantity=10)
    add_item(user=user, product_id=product.id, quantity=2)
    CouponFactory(name="SAVE20", discount=Decimal("20"))
    apply_coupon(user=user, name="SAVE20")

    placed = place_order(shipping_address=dict(ADDRESS, email=""), from_cart=True, user=user)

    assert placed.order.user == user
    assert placed.order.email == user.email
    assert placed.order.total_after_discount == Decimal("16.00")
    assert not Cart.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_cart_orders_charge_cart_prices_for_cash_and_card():
    user = UserFactory()
    product = ProductFactory(price=Decimal("10.00"), quantity=10)
    add_item(user=user, product_id=product.id, quantity=2)
    Product.objects.filter(pk=product.pk).update(price=Decimal("12.00"))

    session = create_checkout_session(
        user=user, shipping_address=ADDRESS, success_url="https://shop.test/ok", cancel_url="https://shop.test/no"
    )
    placed = place_order(shipping_address=ADDRESS, from_cart=True, user=user)

    assert session.amount == placed.order.total_after_discount == Decimal("20.00")
    assert placed.order.items.get().unit_price == Decimal("10.00")


@pytest.mark.django_db
def test_order_from_missing_or_empty_cart():
    user = UserFactory()
    with pytest.raises(CartNotFound):
        place_order(shipping_address=ADDRESS, from_cart=True, user=user)
    Cart.objects.create(user=user)
    with pytest.raises(InvalidInput):
        place_order(shipping_address=ADDRESS, from_cart=True, user=user)


@pytest.mark.django_db
def test_stock_failure_after_persist_is_logged_not_raised(caplog):
    a = ProductFactory(quantity=5)
    b = ProductFactory(quantity=5)
    real_apply = inventory_services._apply_one

    def flaky(adjustment, **kwargs):
        if adjustment.product_id == b.id:
            return False
        return real_apply(adjustment, **kwargs)

    with mock.patch("inventory.services._apply_one", side_effect=flaky), caplog.at_level(
        logging.WARNING, logger="eshop.orders"
    ):
        placed = place_order(
            shipping_address=ADDRESS,
            items=[{"product_id": a.id, "quantity": 1}, {"product_id": b.id, "quantity": 1}],
        )

    assert Order.objects.filter(pk=placed.order.pk).exists()
    assert placed.fulfillment.failed_product_ids == [b.id]
    record = next(r for r in caplog.records if getattr(r, "event", None) == "order.partial_fulfillment")
    assert record.failed_product_ids == [b.id]
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.quantity, b.quantity) == (4, 5)


@pytest.mark.django_db
def test_customer_and_operator_are_notified(mailoutbox, settings):
    settings.ORDER_NOTIFICATION_EMAIL = "ops@example.com"
    product = ProductFactory(title="Mug")
    order = place_order(shipping_address=ADDRESS, items=[{"product_id": product.id}]).order

    recipients = sorted(m.to[0] for m in mailoutbox)
    assert recipients == ["jane@example.com", "ops@example.com"]
    assert any(order.order_id in m.subject for m in mailoutbox)
    assert all("Mug" in m.body for m in mailoutbox)


@pytest.mark.django_db
def test_notification_failure_does_not_fail_placement(settings):
    settings.ORDER_NOTIFICATION_EMAIL = "ops@example.com"
    product = ProductFactory()
    with mock.patch("orders.emails.send_mail", side_effect=OSError("smtp down")):
        placed = place_order(shipping_address=ADDRESS, items=[{"product_id": product.id}])
    assert Order.objects.filter(pk=placed.order.pk).exists()
