"""DRF views for cart operations."""

from common.exceptions import ShopError
from common.responses import error_response
from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .selectors import get_cart
from .serializers import AddItemSerializer, ApplyCouponSerializer, CartReadSerializer, UpdateItemQuantitySerializer
from .services import apply_coupon, clear_cart, remove_item, update_item_quantity

ErrorSerializer = inline_serializer(
    name="CartError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)

CART_EXAMPLE = {
    "id": 1,
    "items": [
        {
            "id": 10,
            "product_id": 100,
            "product_title": "Classic Cotton T-Shirt",
            "color": "black",
            "quantity": 2,
            "unit_price": "10.00",
            "line_total": "20.00",
        }
    ],
    "num_items": 1,
    "subtotal": "20.00",
    "total_after_discount": "16.00",
    "coupon": "SAVE20",
    "total": "16.00",
}


def _cart_body(user):
    return CartReadSerializer.from_cart(cart=get_cart(user=user)).data


class CartDetailView(APIView):
    """Return the authenticated user's cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description="Returns the authenticated user's cart including items and totals.",
        responses={200: CartReadSerializer, 404: ErrorSerializer},
        examples=[OpenApiExample("Cart", value=CART_EXAMPLE)],
    )
    def get(self, request):
        try:
            return Response(_cart_body(request.user), status=status.HTTP_200_OK)
        except ShopError as exc:
            return error_response(exc)


class CartAddItemView(APIView):
    """Add an item to the cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description=(
            "Adds a product (optionally in a color) to the user's cart. Adding the same product and color "
            "again replaces the line's quantity."
        ),
        request=AddItemSerializer,
        responses={201: CartReadSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        examples=[OpenApiExample("Add", value={"product_id": 100, "quantity": 2, "color": "black"}, request_only=True)],
    )
    def post(self, request):
        serializer = AddItemSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            serializer.save()
            return Response(_cart_body(request.user), status=status.HTTP_201_CREATED)
        except ShopError as exc:
            return error_response(exc)


class CartItemView(APIView):
    """Update or remove a single cart line."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart item quantity",
        request=UpdateItemQuantitySerializer,
        responses={200: CartReadSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    )
    def patch(self, request, item_id: int):
        serializer = UpdateItemQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            update_item_quantity(user=request.user, item_id=item_id, quantity=serializer.validated_data["quantity"])
            return Response(_cart_body(request.user), status=status.HTTP_200_OK)
        except ShopError as exc:
            return error_response(exc)

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Delete cart item",
        responses={200: CartReadSerializer, 404: ErrorSerializer},
    )
    def delete(self, request, item_id: int):
        try:
            remove_item(user=request.user, item_id=item_id)
            return Response(_cart_body(request.user), status=status.HTTP_200_OK)
        except ShopError as exc:
            return error_response(exc)


class CartClearView(APIView):
    """Delete the cart entirely."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear cart",
        description="Deletes the user's cart and all of its items.",
        responses={204: None, 404: ErrorSerializer},
    )
    def post(self, request):
        try:
            clear_cart(user=request.user)
        except ShopError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CartApplyCouponView(APIView):
    """Apply a coupon to the cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Apply coupon",
        description="Validates the coupon and stores the discounted total on the cart.",
        request=ApplyCouponSerializer,
        responses={200: CartReadSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        examples=[
            OpenApiExample("Apply", value={"name": "SAVE20"}, request_only=True),
            OpenApiExample("Expired", value={"detail": "Coupon SAVE20 has expired", "code": "expired_coupon"}),
        ],
    )
    def post(self, request):
        serializer = ApplyCouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            cart, _ = apply_coupon(user=request.user, name=serializer.validated_data["name"])
        except ShopError as exc:
            return error_response(exc)
        return Response(CartReadSerializer.from_cart(cart=cart).data, status=status.HTTP_200_OK)
