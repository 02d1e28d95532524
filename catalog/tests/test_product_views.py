from datetime import datetime, timezone

import pytest
from catalog.models import Product, ProductView
from catalog.services import client_ip, record_view
from catalog.tests.factories import ProductFactory
from rest_framework.test import APIClient
from users.tests.factories import UserFactory

ADMIN_PRODUCTS = "/api/v1/admin/catalog/products/"


def _admin_client(role="admin"):
    client = APIClient()
    client.force_authenticate(user=UserFactory(role=role))
    return client


def _view_on(product, ip, day):
    view = ProductView.objects.create(product=product, ip_address=ip)
    ProductView.objects.filter(pk=view.pk).update(viewed_at=datetime(2026, 3, day, 12, tzinfo=timezone.utc))


@pytest.mark.django_db
def test_detail_counts_each_client_ip_once():
    product = ProductFactory(slug="wool-scarf")
    client = APIClient()
    url = f"/api/v1/catalog/products/{product.slug}/"

    assert client.get(url).data["views"] == 1
    assert client.get(url).data["views"] == 1
    assert client.get(url, REMOTE_ADDR="10.0.0.2").data["views"] == 2

    product.refresh_from_db()
    assert product.views == 2
    assert ProductView.objects.filter(product=product).count() == 2


def test_client_ip_prefers_forwarded_header_only_when_trusted(settings, rf):
    request = rf.get("/", HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1", REMOTE_ADDR="10.0.0.1")
    settings.TRUST_X_FORWARDED_FOR = False
    assert client_ip(request) == "10.0.0.1"
    settings.TRUST_X_FORWARDED_FOR = True
    assert client_ip(request) == "203.0.113.9"


def test_client_ip_unwraps_mapped_ipv4_and_rejects_garbage(rf):
    assert client_ip(rf.get("/", REMOTE_ADDR="::ffff:192.0.2.4")) == "192.0.2.4"
    assert client_ip(rf.get("/", REMOTE_ADDR="not-an-ip")) is None


@pytest.mark.django_db
def test_record_view_without_ip_is_ignored():
    product = ProductFactory()
    assert record_view(product=product, ip_address=None) is False
    product.refresh_from_db()
    assert product.views == 0


@pytest.mark.django_db
def test_daily_views_groups_unique_ips_per_day():
    product = ProductFactory()
    _view_on(product, "192.0.2.1", 1)
    _view_on(product, "192.0.2.2", 2)
    _view_on(product, "192.0.2.3", 2)
    _view_on(ProductFactory(), "192.0.2.1", 2)

    res = _admin_client().get(f"{ADMIN_PRODUCTS}{product.id}/views/")
    assert res.status_code == 200
    assert res.json() == [{"date": "2026-03-02", "views": 2}, {"date": "2026-03-01", "views": 1}]

    ranged = _admin_client().get(f"{ADMIN_PRODUCTS}{product.id}/views/", {"start_date": "2026-03-02"})
    assert ranged.json() == [{"date": "2026-03-02", "views": 2}]


@pytest.mark.django_db
def test_daily_views_rejects_bad_ranges_and_unknown_products():
    product = ProductFactory()
    client = _admin_client()
    url = f"{ADMIN_PRODUCTS}{product.id}/views/"

    assert client.get(url, {"start_date": "2026-03-05", "end_date": "2026-03-01"}).status_code == 400
    assert client.get(url, {"start_date": "yesterday"}).status_code == 400
    assert client.get(f"{ADMIN_PRODUCTS}999999/views/").status_code == 404


@pytest.mark.django_db
def test_views_ranking_is_admin_only_and_sorted():
    ProductFactory(title="Quiet", views=1)
    ProductFactory(title="Popular", views=40)
    ProductFactory(title="Unseen", views=0)

    assert _admin_client(role="manager").get(f"{ADMIN_PRODUCTS}views/").status_code == 403
    res = _admin_client().get(f"{ADMIN_PRODUCTS}views/")
    assert res.status_code == 200
    rows = res.json()["results"]
    assert [(r["title"], r["views"]) for r in rows] == [("Popular", 40), ("Quiet", 1), ("Unseen", 0)]
    assert set(rows[0]) == {"id", "title", "views"}
    assert Product.objects.count() == 3
