from decimal import Decimal

import pytest
from cart.services import add_item
from catalog.tests.factories import ProductFactory
from coupons.tests.factories import CouponFactory
from orders.models import Checkout, Order
from orders.tests.factories import ADDRESS, OrderFactory
from rest_framework.test import APIClient
from users.tests.factories import UserFactory

ORDERS_URL = "/api/v1/orders/"


def _client(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


@pytest.mark.django_db
def test_guest_places_order_with_coupon():
    product = ProductFactory(price=Decimal("10.00"), quantity=5)
    CouponFactory(name="SAVE20", discount=Decimal("20"))

    res = _client().post(
        ORDERS_URL,
        {"shipping_address": ADDRESS, "items": [{"product_id": product.id, "quantity": 2}], "coupon": "SAVE20"},
        format="json",
    )

    assert res.status_code == 201, res.content
    body = res.json()
    assert body["order"]["total_before_discount"] == "20.00"
    assert body["order"]["discount_amount"] == "4.00"
    assert body["order"]["total_after_discount"] == "16.00"
    assert body["order"]["user"] is None
    assert body["order"]["items"][0]["line_total"] == "20.00"
    assert body["coupon"]["name"] == "SAVE20"


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload,status_code,code",
    [
        ({"shipping_address": ADDRESS, "items": []}, 400, "invalid_input"),
        ({"shipping_address": ADDRESS, "items": [{"product_id": 999999}]}, 404, "product_not_found"),
        ({"shipping_address": ADDRESS}, 400, "invalid_input"),
    ],
)
def test_place_order_errors_use_standard_body(payload, status_code, code):
    res = _client().post(ORDERS_URL, payload, format="json")
    assert res.status_code == status_code
    assert res.json()["code"] == code
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_place_order_rejects_missing_address_fields():
    product = ProductFactory()
    res = _client().post(
        ORDERS_URL, {"shipping_address": {"name": "Jane"}, "items": [{"product_id": product.id}]}, format="json"
    )
    assert res.status_code == 400


@pytest.mark.django_db
def test_place_order_reports_insufficient_stock():
    product = ProductFactory(quantity=1)
    res = _client().post(
        ORDERS_URL, {"shipping_address": ADDRESS, "items": [{"product_id": product.id, "quantity": 3}]}, format="json"
    )
    assert res.status_code == 400
    assert res.json()["code"] == "insufficient_stock"


@pytest.mark.django_db
def test_signed_in_user_orders_from_cart():
    user = UserFactory()
    product = ProductFactory()
    add_item(user=user, product_id=product.id, quantity=1)

    res = _client(user).post(ORDERS_URL, {"shipping_address": ADDRESS, "from_cart": True}, format="json")

    assert res.status_code == 201
    assert res.json()["order"]["user"] == user.id
    assert _client(user).get("/api/v1/cart/").status_code == 404


@pytest.mark.django_db
def test_listing_requires_authentication_and_is_scoped():
    user = UserFactory()
    mine = OrderFactory(user=user)
    OrderFactory()

    assert _client().get(ORDERS_URL).status_code == 401
    res = _client(user).get(ORDERS_URL)
    assert res.status_code == 200
    assert [o["order_id"] for o in res.json()["results"]] == [mine.order_id]


@pytest.mark.django_db
def test_staff_list_filters():
    staff = UserFactory(role="manager")
    paid = OrderFactory(is_paid=True)
    OrderFactory(is_paid=False)

    res = _client(staff).get(ORDERS_URL, {"is_paid": "true"})
    assert [o["order_id"] for o in res.json()["results"]] == [paid.order_id]


@pytest.mark.django_db
def test_detail_hides_deleted_unless_admin_asks():
    admin = UserFactory(role="admin")
    order = OrderFactory(deleted=True)
    url = f"{ORDERS_URL}{order.order_id}/"

    assert _client(order.user).get(url).status_code == 404
    assert _client(admin).get(url).status_code == 404
    res = _client(admin).get(url, {"include_deleted": "true"})
    assert res.status_code == 200
    assert res.json()["deleted"] is True


@pytest.mark.django_db
def test_admin_soft_deletes_lists_trash_and_restores():
    admin = UserFactory(role="admin")
    order = OrderFactory()
    client = _client(admin)

    assert client.delete(f"{ORDERS_URL}{order.order_id}/").status_code == 204
    assert client.get(f"{ORDERS_URL}{order.order_id}/").status_code == 404
    trash = client.get(f"{ORDERS_URL}deleted/").json()["results"]
    assert [o["order_id"] for o in trash] == [order.order_id]

    res = client.post(f"{ORDERS_URL}{order.order_id}/restore/")
    assert res.status_code == 200
    assert res.json()["deleted"] is False


@pytest.mark.django_db
def test_non_admins_cannot_delete_or_see_trash():
    manager = UserFactory(role="manager")
    order = OrderFactory()
    assert _client(manager).delete(f"{ORDERS_URL}{order.order_id}/").status_code == 403
    assert _client(manager).get(f"{ORDERS_URL}deleted/").status_code == 403
    assert _client(order.user).delete(f"{ORDERS_URL}{order.order_id}/").status_code == 403


@pytest.mark.django_db
def test_staff_marks_paid_and_delivered():
    manager = UserFactory(role="manager")
    order = OrderFactory()
    client = _client(manager)

    assert client.post(f"{ORDERS_URL}{order.order_id}/pay/").json()["is_paid"] is True
    assert client.post(f"{ORDERS_URL}{order.order_id}/deliver/").json()["is_delivered"] is True
    assert _client(order.user).post(f"{ORDERS_URL}{order.order_id}/pay/").status_code == 403
    assert client.post(f"{ORDERS_URL}NOPE00/pay/").status_code == 404


@pytest.mark.django_db
def test_card_checkout_round_trip_through_webhook(settings):
    settings.PAYMENT_WEBHOOK_SECRET = "s3cret"
    user = UserFactory()
    product = ProductFactory(price=Decimal("12.50"))
    add_item(user=user, product_id=product.id, quantity=2)

    session = _client(user).post(
        f"{ORDERS_URL}checkout-session/",
        {"shipping_address": ADDRESS, "success_url": "https://shop.test/ok", "cancel_url": "https://shop.test/no"},
        format="json",
    )
    assert session.status_code == 200
    assert session.json()["amount"] == "25.00"

    reference = Checkout.objects.get(user=user).reference
    payload = {
        "type": "checkout.session.completed",
        "data": {"object": {"client_reference_id": reference, "amount_total": 2500, "metadata": ADDRESS}},
    }
    webhook = f"{ORDERS_URL}webhooks/payment/"
    assert _client().post(webhook, payload, format="json").status_code == 403

    first = _client().post(webhook, payload, format="json", HTTP_X_WEBHOOK_SECRET="s3cret")
    again = _client().post(webhook, payload, format="json", HTTP_X_WEBHOOK_SECRET="s3cret")

    assert first.status_code == again.status_code == 200
    assert first.json()["order_id"] == again.json()["order_id"]
    order = Order.objects.get()
    assert order.is_paid and order.payment_method == Order.PAYMENT_CARD


@pytest.mark.django_db
def test_webhook_ignores_unrelated_events(settings):
    settings.PAYMENT_WEBHOOK_SECRET = "s3cret"
    res = _client().post(
        f"{ORDERS_URL}webhooks/payment/", {"type": "invoice.created"}, format="json", HTTP_X_WEBHOOK_SECRET="s3cret"
    )
    assert res.status_code == 200
    assert res.json() == {"received": True}


@pytest.mark.django_db
def test_webhook_refused_when_no_secret_is_configured(settings):
    settings.DEBUG = False
    settings.PAYMENT_WEBHOOK_SECRET = ""
    payload = {"type": "checkout.session.completed", "data": {"object": {"client_reference_id": "1"}}}
    res = _client().post(f"{ORDERS_URL}webhooks/payment/", payload, format="json")
    assert res.status_code == 403
    assert Order.objects.count() == 0
