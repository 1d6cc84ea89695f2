# products/admin.py
"""
Admin rules:

- Items are created with zero stock; opening stock is posted through the
  stock ledger (record_opening_stock), never typed into quantity_on_hand.
- StockMovement rows are immutable and cannot be added, edited or deleted here.
"""

from django.contrib import admin

from products.models import Item, StockMovement


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "sale_price",
        "gst_rate",
        "wht_rate",
        "quantity_on_hand",
        "min_stock",
        "is_active",
    )
    list_filter = ("is_active",)
    search_fields = ("sku", "name")
    ordering = ("name",)
    readonly_fields = ("quantity_on_hand", "stock_version", "created_at", "updated_at")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "item",
        "movement_type",
        "quantity",
        "reference_type",
        "reference_id",
        "batch_number",
    )
    list_filter = ("movement_type", "reference_type")
    search_fields = ("item__sku", "reference_id", "batch_number")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
