"""Orders API endpoints.

Placement is open to guests; every read and state change requires an
authenticated caller and goes through the soft-delete aware selectors.
"""

import logging

from common.exceptions import ShopError
from common.responses import error_response, parse_bool
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import IsAdminRole, IsStaffRole

from .filters import OrderFilter
from .payments import get_payment_gateway, webhook_secret_matches
from .selectors import get_order, list_deleted_orders, list_orders
from .serializers import CheckoutSessionRequestSerializer, OrderSerializer, PlaceOrderSerializer
from .services import (
    confirm_paid_order,
    create_checkout_session,
    mark_delivered,
    mark_paid,
    place_order,
    restore_order,
    soft_delete,
)

logger = logging.getLogger("eshop.orders")

ErrorSerializer = inline_serializer(
    name="OrderError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)

PLACE_EXAMPLE = {
    "shipping_address": {
        "name": "Jane Doe",
        "details": "12 Nile St",
        "city": "Cairo",
        "phone": "+201000000000",
        "email": "jane@example.com",
    },
    "items": [{"product_id": 1, "quantity": 2, "color": "black"}],
    "coupon": "SAVE20",
}


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class OrderListCreateView(generics.ListAPIView):
    """List visible orders (GET) or place a cash order (POST).

    Filters: `order_id`, `is_paid`, `is_delivered`, `payment_method`,
    `created_after`, `created_before`.
    """

    serializer_class = OrderSerializer
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_throttles(self):
        self.throttle_scope = "orders_write" if self.request.method == "POST" else "orders"
        return super().get_throttles()

    def get_queryset(self):
        return list_orders(caller=self.request.user)

    @extend_schema(
        tags=["Orders"],
        summary="List orders",
        description="Staff see all live orders; shoppers see their own.",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Orders"],
        summary="Place order",
        description=(
            "Places a cash order from `items` or, with `from_cart=true`, from the caller's cart. "
            "Guests may order by listing items and giving a shipping address."
        ),
        request=PlaceOrderSerializer,
        responses={
            201: inline_serializer(
                name="PlacedOrderResponse",
                fields={"order": OrderSerializer(), "coupon": rf_serializers.DictField(allow_null=True)},
            ),
            400: ErrorSerializer,
            404: ErrorSerializer,
        },
        examples=[OpenApiExample("Place", value=PLACE_EXAMPLE, request_only=True)],
    )
    def post(self, request):
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        items = [dict(line) for line in data.get("items", [])]
        try:
            placed = place_order(
                shipping_address=dict(data["shipping_address"]),
                items=items,
                from_cart=data["from_cart"],
                coupon_name=data.get("coupon") or None,
                user=request.user,
                guest_email=data.get("email") or None,
            )
        except ShopError as exc:
            return error_response(exc)
        body = {
            "order": OrderSerializer(placed.order, context={"request": request}).data,
            "coupon": placed.quote.coupon_summary,
        }
        return Response(body, status=status.HTTP_201_CREATED)


class DeletedOrderListView(generics.ListAPIView):
    """Trash view of soft-deleted orders."""

    permission_classes = [IsAdminRole]
    serializer_class = OrderSerializer
    pagination_class = DefaultPagination
    throttle_scope = "orders"

    def get_queryset(self):
        return list_deleted_orders(caller=self.request.user)

    @extend_schema(tags=["Orders"], summary="List deleted orders")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class OrderDetailView(APIView):
    """Retrieve (GET) or soft-delete (DELETE) a single order."""

    throttle_scope = "orders"

    def get_permissions(self):
        if self.request.method == "DELETE":
            return [IsAdminRole()]
        return [IsAuthenticated()]

    @extend_schema(
        tags=["Orders"],
        summary="Get order detail",
        parameters=[
            OpenApiParameter(
                name="include_deleted",
                description="Admins only: also find soft-deleted orders",
                required=False,
                type=bool,
            )
        ],
        responses={200: OrderSerializer, 404: ErrorSerializer},
    )
    def get(self, request, order_id: str):
        try:
            order = get_order(
                order_id=order_id,
                caller=request.user,
                include_deleted=parse_bool(request.query_params.get("include_deleted")),
            )
        except ShopError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order, context={"request": request}).data)

    @extend_schema(tags=["Orders"], summary="Soft-delete order", responses={204: None, 404: ErrorSerializer})
    def delete(self, request, order_id: str):
        try:
            soft_delete(order_id=order_id, caller=request.user)
        except ShopError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class _OrderTransitionView(APIView):
    permission_classes = [IsStaffRole]
    throttle_scope = "orders_write"
    transition = None

    def post(self, request, order_id: str):
        try:
            order = type(self).transition(order_id=order_id, caller=request.user)
        except ShopError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order, context={"request": request}).data, status=status.HTTP_200_OK)


@extend_schema(tags=["Orders"], summary="Mark order paid", request=None, responses={200: OrderSerializer})
class OrderPayView(_OrderTransitionView):
    transition = mark_paid


@extend_schema(tags=["Orders"], summary="Mark order delivered", request=None, responses={200: OrderSerializer})
class OrderDeliverView(_OrderTransitionView):
    transition = mark_delivered


@extend_schema(tags=["Orders"], summary="Restore deleted order", request=None, responses={200: OrderSerializer})
class OrderRestoreView(_OrderTransitionView):
    permission_classes = [IsAdminRole]
    transition = restore_order


class CheckoutSessionView(APIView):
    """Start a hosted card checkout for the caller's cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Orders"],
        summary="Create checkout session",
        request=CheckoutSessionRequestSerializer,
        responses={
            200: inline_serializer(
                name="CheckoutSessionResponse",
                fields={
                    "session_id": rf_serializers.CharField(),
                    "url": rf_serializers.URLField(),
                    "amount": rf_serializers.DecimalField(max_digits=12, decimal_places=2),
                    "currency": rf_serializers.CharField(),
                },
            ),
            400: ErrorSerializer,
            404: ErrorSerializer,
        },
    )
    def post(self, request):
        serializer = CheckoutSessionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            session = create_checkout_session(
                user=request.user,
                shipping_address=dict(data["shipping_address"]),
                success_url=data["success_url"],
                cancel_url=data["cancel_url"],
            )
        except ShopError as exc:
            return error_response(exc)
        return Response(
            {
                "session_id": session.session_id,
                "url": session.url,
                "amount": str(session.amount),
                "currency": session.currency,
            },
            status=status.HTTP_200_OK,
        )


class PaymentWebhookView(APIView):
    """Consume the gateway's payment-completed webhook and create the paid order.

    Replays of the same event return the order created the first time.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Orders"],
        summary="Payment webhook",
        parameters=[
            OpenApiParameter(
                name="X-Webhook-Secret",
                location=OpenApiParameter.HEADER,
                required=True,
                description="Shared secret matching PAYMENT_WEBHOOK_SECRET",
                type=str,
            )
        ],
        examples=[
            OpenApiExample(
                "Completed",
                value={
                    "type": "checkout.session.completed",
                    "data": {
                        "object": {
                            "client_reference_id": "chk_3f6c0d8e2b1a4c5d9e7f00112233aabb",
                            "amount_total": 1600,
                            "customer_email": "jane@example.com",
                            "metadata": PLACE_EXAMPLE["shipping_address"],
                        }
                    },
                },
                request_only=True,
            )
        ],
    )
    def post(self, request):
        if not webhook_secret_matches(request.headers.get("X-Webhook-Secret")):
            logger.warning("order.webhook_rejected", extra={"event": "order.webhook_rejected"})
            return Response({"detail": "Invalid webhook secret."}, status=status.HTTP_403_FORBIDDEN)
        try:
            event = get_payment_gateway().parse_event(request.data)
            if event is None:
                return Response({"received": True}, status=status.HTTP_200_OK)
            order = confirm_paid_order(event)
        except ShopError as exc:
            return error_response(exc)
        return Response(
            {"received": True, "order_id": order.order_id},
            status=status.HTTP_200_OK,
        )
