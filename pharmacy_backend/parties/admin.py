from django.contrib import admin

from parties.models import Customer, Supplier


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "payment_terms_days", "credit_limit", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name", "phone", "email")
    ordering = ("name",)


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "payment_terms_days", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name", "phone", "email")
    ordering = ("name",)
