"""Admin registration for cart models.

Carts show their items inline for support; the only bulk action is clearing,
which deletes the selected carts.
"""

from django.contrib import admin, messages

from .models import Cart, CartItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    fields = ("product", "color", "quantity", "unit_price", "created_at", "updated_at")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("product",)


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "subtotal", "total_after_discount", "coupon", "updated_at", "created_at")
    search_fields = ("user__username", "user__email")
    ordering = ("-updated_at",)
    readonly_fields = ("subtotal", "total_after_discount", "created_at", "updated_at")
    inlines = [CartItemInline]
    list_select_related = ("user", "coupon")
    actions = ["action_clear_cart"]

    @admin.action(description="Clear cart (delete cart and items)")
    def action_clear_cart(self, request, queryset):
        count = queryset.count()
        queryset.delete()
        messages.success(request, f"Cleared {count} cart(s).")


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "cart", "product", "color", "quantity", "unit_price", "updated_at")
    search_fields = ("product__title", "cart__user__email")
    ordering = ("id",)
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("cart", "product")
