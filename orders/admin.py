from django.contrib import admin
from django.utils import timezone

from .models import Checkout, Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product", "product_title", "color", "quantity", "unit_price")
    readonly_fields = fields
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_id",
        "user",
        "email",
        "total_after_discount",
        "payment_method",
        "is_paid",
        "is_delivered",
        "deleted",
        "created_at",
    )
    list_filter = ("payment_method", "is_paid", "is_delivered", "deleted", "created_at")
    search_fields = ("order_id", "email", "payment_reference", "coupon_name")
    date_hierarchy = "created_at"
    readonly_fields = (
        "order_id",
        "total_before_discount",
        "discount_amount",
        "total_after_discount",
        "coupon_name",
        "payment_reference",
        "amount_paid",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]
    actions = ["action_mark_delivered"]

    @admin.action(description="Mark selected orders delivered")
    def action_mark_delivered(self, request, queryset):
        updated = queryset.filter(is_delivered=False).update(is_delivered=True, delivered_at=timezone.now())
        self.message_user(request, f"Marked {updated} order(s) delivered.")


@admin.register(Checkout)
class CheckoutAdmin(admin.ModelAdmin):
    list_display = ("reference", "user", "total_after_discount", "order", "created_at")
    search_fields = ("reference", "session_id", "email")
    readonly_fields = [f.name for f in Checkout._meta.fields]
