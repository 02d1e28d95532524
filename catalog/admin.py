"""Admin registration for catalog models."""

from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "slug", "status", "price", "quantity", "sold", "views")
    search_fields = ("title", "slug")
    list_filter = ("status",)
    prepopulated_fields = {"slug": ("title",)}
    # Stock counters move through inventory adjustments only
    readonly_fields = ("sold", "views")
