"""DRF serializers for orders.

Write serializers only check request shape; the domain rules (address
completeness, product availability, coupons) are enforced by the services.
"""

from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """API representation of an order line item with computed line_total."""

    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_title",
            "color",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "order_id",
            "user",
            "email",
            "shipping_address",
            "items",
            "total_before_discount",
            "discount_amount",
            "total_after_discount",
            "coupon_name",
            "payment_method",
            "is_paid",
            "paid_at",
            "is_delivered",
            "delivered_at",
            "amount_paid",
            "deleted",
            "deleted_at",
            "created_at",
        ]
        read_only_fields = fields


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    details = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32)
    city = serializers.CharField(max_length=120)
    street = serializers.CharField(max_length=120, required=False, allow_blank=True)
    apartment = serializers.CharField(max_length=32, required=False, allow_blank=True)
    floor = serializers.CharField(max_length=32, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=16, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(required=False, default=1)
    color = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class PlaceOrderSerializer(serializers.Serializer):
    shipping_address = ShippingAddressSerializer()
    items = OrderLineSerializer(many=True, required=False, allow_empty=True)
    from_cart = serializers.BooleanField(required=False, default=False)
    coupon = serializers.CharField(max_length=64, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)


class CheckoutSessionRequestSerializer(serializers.Serializer):
    shipping_address = ShippingAddressSerializer()
    success_url = serializers.URLField()
    cancel_url = serializers.URLField()
