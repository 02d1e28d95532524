"""URL routes for the orders app (v1)."""

from django.urls import path

from .views import (
    CheckoutSessionView,
    DeletedOrderListView,
    OrderDeliverView,
    OrderDetailView,
    OrderListCreateView,
    OrderPayView,
    OrderRestoreView,
    PaymentWebhookView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="order-list"),
    path("deleted/", DeletedOrderListView.as_view(), name="order-deleted-list"),
    path("checkout-session/", CheckoutSessionView.as_view(), name="order-checkout-session"),
    path("webhooks/payment/", PaymentWebhookView.as_view(), name="order-webhook-payment"),
    path("<str:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<str:order_id>/pay/", OrderPayView.as_view(), name="order-pay"),
    path("<str:order_id>/deliver/", OrderDeliverView.as_view(), name="order-deliver"),
    path("<str:order_id>/restore/", OrderRestoreView.as_view(), name="order-restore"),
]
