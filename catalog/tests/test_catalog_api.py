from decimal import Decimal

import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_products_list_ordering_and_search():
    ProductFactory(title="Wool Scarf", price=Decimal("15.00"))
    ProductFactory(title="Leather Belt", price=Decimal("30.00"), quantity=0)
    ProductFactory(title="Hidden Draft", status=Product.STATUS_DRAFT)

    client = APIClient()
    resp = client.get("/api/v1/catalog/products/?ordering=title")
    assert resp.status_code == 200
    titles = [r["title"] for r in resp.data["results"]]
    assert titles == ["Leather Belt", "Wool Scarf"]
    belt = resp.data["results"][0]
    assert belt["in_stock"] is False
    assert {"id", "title", "slug", "price", "colors", "in_stock"} <= set(belt.keys())

    resp_search = client.get("/api/v1/catalog/products/?q=scarf")
    assert [r["title"] for r in resp_search.data["results"]] == ["Wool Scarf"]


@pytest.mark.django_db
def test_product_detail_by_slug_exposes_stock_counters():
    p = ProductFactory(slug="wool-scarf", quantity=7, sold=3, colors=["red", "grey"])
    client = APIClient()
    resp = client.get(f"/api/v1/catalog/products/{p.slug}/")
    assert resp.status_code == 200
    assert resp.data["quantity"] == 7
    assert resp.data["sold"] == 3
    assert resp.data["colors"] == ["red", "grey"]


@pytest.mark.django_db
def test_draft_product_detail_is_not_found():
    p = ProductFactory(status=Product.STATUS_DRAFT)
    resp = APIClient().get(f"/api/v1/catalog/products/{p.slug}/")
    assert resp.status_code == 404
