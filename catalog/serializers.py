"""Serializers for the catalog app (read-only).

Image fields are projected from stored names to URLs at read time.
"""

from rest_framework import serializers

from .media import image_url, image_urls
from .models import Product


class ProductListSerializer(serializers.ModelSerializer):
    in_stock = serializers.SerializerMethodField()
    image_cover = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ["id", "title", "slug", "price", "colors", "image_cover", "in_stock"]

    def get_in_stock(self, obj) -> bool:
        return int(obj.quantity) > 0

    def get_image_cover(self, obj) -> str | None:
        return image_url(obj.image_cover, self.context.get("request"))


class ProductDetailSerializer(ProductListSerializer):
    images = serializers.SerializerMethodField()

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
            "in_stock",
            "views",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_images(self, obj) -> list[str]:
        return image_urls(obj.images, self.context.get("request"))
