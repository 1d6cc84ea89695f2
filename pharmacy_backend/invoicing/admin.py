# invoicing/admin.py
"""
Invoices are driven through the lifecycle services (confirm / cancel move
stock and post to the ledger). The admin is a read-only window.
"""

from django.contrib import admin

from invoicing.models import Invoice, InvoiceItem, InvoiceSequence


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    fields = (
        "line_no",
        "item",
        "quantity",
        "unit_price",
        "discount1_amount",
        "discount2_amount",
        "claim_account",
        "tax_amount",
        "withholding_amount",
        "line_total",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "direction",
        "customer",
        "supplier",
        "invoice_date",
        "grand_total",
        "status",
        "payment_status",
    )
    list_filter = ("direction", "status", "payment_status")
    search_fields = ("invoice_number", "customer__name", "supplier__name")
    ordering = ("-created_at",)
    inlines = [InvoiceItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InvoiceSequence)
class InvoiceSequenceAdmin(admin.ModelAdmin):
    list_display = ("series", "year", "last_value")
    ordering = ("series", "-year")

    def has_change_permission(self, request, obj=None):
        return False
