"""Staff serializers for catalog write endpoints."""

from rest_framework import serializers

from .models import Product


class ProductAdminSerializer(serializers.ModelSerializer):
    colors = serializers.ListField(child=serializers.CharField(max_length=32), required=False)
    images = serializers.ListField(child=serializers.CharField(max_length=255), required=False)

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "slug",
            "description",
            "status",
            "price",
            "quantity",
            "sold",
            "colors",
            "image_cover",
            "images",
            "views",
        ]
        read_only_fields = ["id", "sold", "views"]

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

    def validate_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Quantity cannot be negative.")
        return value

    def validate_colors(self, value):
        cleaned = [c.strip() for c in value if c and c.strip()]
        # Keep first occurrence order
        return list(dict.fromkeys(cleaned))

    def validate_images(self, value):
        return [v.strip() for v in value if v and v.strip()]


class ViewsRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("start_date cannot be after end_date.")
        return attrs


class DailyViewsSerializer(serializers.Serializer):
    date = serializers.DateField()
    views = serializers.IntegerField()


class ProductViewsSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "title", "views"]
