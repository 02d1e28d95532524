"""Cart serializers for read and write operations."""

from rest_framework import serializers

from .models import CartItem
from .services import add_item


class CartItemReadSerializer(serializers.ModelSerializer):
    """Read serializer for a cart item."""

    product_id = serializers.IntegerField(source="product.id")
    product_title = serializers.CharField(source="product.title")
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "product_title",
            "color",
            "quantity",
            "unit_price",
            "line_total",
        ]


class CartReadSerializer(serializers.Serializer):
    """Read serializer for the cart summary and items."""

    id = serializers.IntegerField()
    items = CartItemReadSerializer(many=True)
    num_items = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_after_discount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    coupon = serializers.CharField(allow_null=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)

    @classmethod
    def from_cart(cls, *, cart):
        items = list(cart.items.select_related("product").all())
        return cls(
            {
                "id": cart.id,
                "items": items,
                "num_items": len(items),
                "subtotal": cart.subtotal,
                "total_after_discount": cart.total_after_discount,
                "coupon": cart.coupon.name if cart.coupon_id else None,
                "total": cart.payable_total,
            }
        )


class AddItemSerializer(serializers.Serializer):
    """Write serializer for adding an item to the cart.

    Quantity bounds are enforced by the service so clients get the
    ``invalid_quantity`` code rather than a field error.
    """

    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField()
    color = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")

    def create(self, validated_data):  # type: ignore[override]
        user = self.context["request"].user
        return add_item(user=user, **validated_data)


class UpdateItemQuantitySerializer(serializers.Serializer):
    """Write serializer for updating a cart item quantity."""

    quantity = serializers.IntegerField()


class ApplyCouponSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=64)
