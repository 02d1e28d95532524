"""Coupon serializers for staff endpoints."""

from rest_framework import serializers

from .models import Coupon


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = ["id", "name", "expire", "discount", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Coupon name is required.")
        return value


class CouponStatusSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=64)
