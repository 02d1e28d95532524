from datetime import timedelta
from decimal import Decimal

import pytest
from cart.models import Cart, CartItem
from cart.selectors import get_cart
from cart.services import (
    add_item,
    apply_coupon,
    clear_cart,
    reap_abandoned_carts,
    remove_item,
    update_item_quantity,
)
from cart.tests.factories import CartFactory
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from common.exceptions import (
    CartNotFound,
    ExpiredCoupon,
    InsufficientStock,
    InvalidCoupon,
    InvalidInput,
    InvalidQuantity,
    ItemNotFound,
    ProductNotFound,
)
from coupons.tests.factories import CouponFactory
from django.utils import timezone
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_add_item_creates_cart_and_sets_subtotal():
    user = UserFactory()
    product = ProductFactory(price=Decimal("10.00"), quantity=5)

    item = add_item(user=user, product_id=product.id, quantity=2)

    cart = get_cart(user=user)
    assert item.cart_id == cart.id
    assert item.unit_price == Decimal("10.00")
    assert cart.subtotal == Decimal("20.00")
    assert cart.total_after_discount is None


@pytest.mark.django_db
def test_adding_same_product_and_color_replaces_quantity():
    user = UserFactory()
    product = ProductFactory(price=Decimal("4.00"), quantity=10, colors=["red", "blue"])

    add_item(user=user, product_id=product.id, quantity=3, color="red")
    add_item(user=user, product_id=product.id, quantity=1, color="red")
    add_item(user=user, product_id=product.id, quantity=2, color="blue")

    cart = get_cart(user=user)
    lines = {(i.color, i.quantity) for i in cart.items.all()}
    assert lines == {("red", 1), ("blue", 2)}
    assert cart.subtotal == Decimal("12.00")


@pytest.mark.django_db
def test_re_adding_refreshes_unit_price():
    user = UserFactory()
    product = ProductFactory(price=Decimal("4.00"))
    add_item(user=user, product_id=product.id, quantity=1)
    Product.objects.filter(pk=product.pk).update(price=Decimal("6.00"))

    item = add_item(user=user, product_id=product.id, quantity=1)
    assert item.unit_price == Decimal("6.00")


@pytest.mark.django_db
@pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
def test_add_item_rejects_non_positive_integer_quantity(quantity):
    product = ProductFactory()
    with pytest.raises(InvalidQuantity):
        add_item(user=UserFactory(), product_id=product.id, quantity=quantity)


@pytest.mark.django_db
def test_add_item_errors():
    user = UserFactory()
    product = ProductFactory(quantity=2, colors=["red"])

    with pytest.raises(ProductNotFound):
        add_item(user=user, product_id=424242, quantity=1)
    with pytest.raises(InsufficientStock):
        add_item(user=user, product_id=product.id, quantity=3)
    with pytest.raises(InvalidInput):
        add_item(user=user, product_id=product.id, quantity=1, color="green")
    with pytest.raises(ProductNotFound):
        add_item(user=user, product_id=ProductFactory(status=Product.STATUS_DRAFT).id, quantity=1)
    assert not Cart.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_update_item_quantity_rechecks_stock():
    user = UserFactory()
    product = ProductFactory(price=Decimal("2.50"), quantity=4)
    item = add_item(user=user, product_id=product.id, quantity=1)

    update_item_quantity(user=user, item_id=item.id, quantity=4)
    assert get_cart(user=user).subtotal == Decimal("10.00")

    with pytest.raises(InsufficientStock):
        update_item_quantity(user=user, item_id=item.id, quantity=5)
    with pytest.raises(ItemNotFound):
        update_item_quantity(user=user, item_id=999999, quantity=1)
    with pytest.raises(CartNotFound):
        update_item_quantity(user=UserFactory(), item_id=item.id, quantity=1)


@pytest.mark.django_db
def test_cannot_touch_another_users_item():
    owner = UserFactory()
    intruder = UserFactory()
    product = ProductFactory()
    item = add_item(user=owner, product_id=product.id, quantity=1)
    add_item(user=intruder, product_id=product.id, quantity=1)

    with pytest.raises(ItemNotFound):
        remove_item(user=intruder, item_id=item.id)
    assert CartItem.objects.filter(pk=item.pk).exists()


@pytest.mark.django_db
def test_remove_item_keeps_empty_cart():
    user = UserFactory()
    item = add_item(user=user, product_id=ProductFactory().id, quantity=1)

    cart = remove_item(user=user, item_id=item.id)
    assert cart.subtotal == Decimal("0.00")
    assert Cart.objects.filter(pk=cart.pk).exists()
    with pytest.raises(ItemNotFound):
        remove_item(user=user, item_id=item.id)


@pytest.mark.django_db
def test_clear_cart_deletes_cart():
    user = UserFactory()
    add_item(user=user, product_id=ProductFactory().id, quantity=1)

    clear_cart(user=user)
    with pytest.raises(CartNotFound):
        get_cart(user=user)
    with pytest.raises(CartNotFound):
        clear_cart(user=user)


@pytest.mark.django_db
def test_apply_coupon_persists_discounted_total():
    user = UserFactory()
    add_item(user=user, product_id=ProductFactory(price=Decimal("10.00")).id, quantity=2)
    coupon = CouponFactory(name="SAVE20", discount=Decimal("20"))

    cart, quote = apply_coupon(user=user, name="SAVE20")

    assert quote.discount_amount == Decimal("4.00")
    cart.refresh_from_db()
    assert cart.total_after_discount == Decimal("16.00")
    assert cart.coupon == coupon
    assert cart.payable_total == Decimal("16.00")


@pytest.mark.django_db
def test_item_change_clears_applied_discount():
    user = UserFactory()
    product = ProductFactory(price=Decimal("10.00"))
    item = add_item(user=user, product_id=product.id, quantity=2)
    CouponFactory(name="SAVE20", discount=Decimal("20"))
    apply_coupon(user=user, name="SAVE20")

    update_item_quantity(user=user, item_id=item.id, quantity=3)

    cart = get_cart(user=user)
    assert cart.subtotal == Decimal("30.00")
    assert cart.total_after_discount is None
    assert cart.coupon is None


@pytest.mark.django_db
def test_failed_coupon_leaves_cart_untouched():
    user = UserFactory()
    add_item(user=user, product_id=ProductFactory(price=Decimal("10.00")).id, quantity=1)
    CouponFactory(name="OLD", expire=timezone.now() - timedelta(days=1))

    with pytest.raises(InvalidCoupon):
        apply_coupon(user=user, name="MISSING")
    with pytest.raises(ExpiredCoupon):
        apply_coupon(user=user, name="OLD")

    cart = get_cart(user=user)
    assert cart.total_after_discount is None
    assert cart.coupon is None
    assert cart.subtotal == Decimal("10.00")


@pytest.mark.django_db
def test_reap_abandoned_carts_deletes_only_stale_ones():
    stale = CartFactory()
    fresh = CartFactory()
    Cart.objects.filter(pk=stale.pk).update(updated_at=timezone.now() - timedelta(days=31))

    assert reap_abandoned_carts() == 1
    assert not Cart.objects.filter(pk=stale.pk).exists()
    assert Cart.objects.filter(pk=fresh.pk).exists()
