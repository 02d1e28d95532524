"""Serializers for the inventory ledger and manual adjustments."""

from rest_framework import serializers

from .models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    """Read-only representation of a ledger row."""

    product_title = serializers.CharField(source="product.title", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_title",
            "quantity_delta",
            "sold_delta",
            "reason",
            "reference",
            "created_at",
        ]
        read_only_fields = fields


class RestockSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField()
    reference = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")

    def validate_quantity(self, value: int) -> int:
        if value == 0:
            raise serializers.ValidationError("Quantity must be non-zero.")
        return value
