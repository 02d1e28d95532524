from decimal import Decimal

import pytest
from catalog.models import Product
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_manager_can_create_product():
    client = APIClient()
    client.force_authenticate(user=UserFactory(role="manager"))
    resp = client.post(
        "/api/v1/admin/catalog/products/",
        {
            "title": "Rain Jacket",
            "slug": "rain-jacket",
            "price": "59.90",
            "quantity": 5,
            "colors": ["red", " red", "blue"],
        },
        format="json",
    )
    assert resp.status_code == 201, resp.data
    product = Product.objects.get(slug="rain-jacket")
    assert product.colors == ["red", "blue"]
    assert product.price == Decimal("59.90")


@pytest.mark.django_db
def test_regular_user_cannot_write_products():
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    resp = client.post("/api/v1/admin/catalog/products/", {"title": "x", "slug": "x", "price": "1.00"}, format="json")
    assert resp.status_code == 403

