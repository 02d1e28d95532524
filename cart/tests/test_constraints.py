import pytest
from cart.models import CartItem
from cart.tests.factories import CartItemFactory
from django.db import IntegrityError


@pytest.mark.django_db
def test_one_line_per_product_and_color():
    item = CartItemFactory(color="red")
    with pytest.raises(IntegrityError):
        CartItem.objects.create(cart=item.cart, product=item.product, color="red", quantity=1)


@pytest.mark.django_db
def test_same_product_in_another_color_is_a_separate_line():
    item = CartItemFactory(color="red")
    other = CartItem.objects.create(cart=item.cart, product=item.product, color="blue", quantity=1)
    assert other.pk != item.pk
