"""Admin registrations for inventory app."""

from django.contrib import admin

from .models import StockMovement


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "quantity_delta", "sold_delta", "reason", "reference", "created_at")
    list_filter = ("reason",)
    search_fields = ("product__title", "reference")
