# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry


class ReadOnlyAdmin(admin.ModelAdmin):
    """Ledger history is append-only; the admin can look, never touch."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "account_type", "is_active")
    list_filter = ("account_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        ("Account Identity", {"fields": ("code", "name", "account_type")}),
        ("Status", {"fields": ("is_active",)}),
        ("System Fields", {"fields": ("created_at", "updated_at")}),
    )


# ============================================================
# JOURNAL ENTRY (READ-ONLY)
# ============================================================


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "description",
        "reference_type",
        "reference_id",
        "reverses",
        "posted_at",
    )
    list_filter = ("reference_type", "posted_at")
    search_fields = ("description", "reference_id")
    ordering = ("-posted_at",)


# ============================================================
# LEDGER ENTRY (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "journal_entry",
        "account_kind",
        "account_id",
        "entry_type",
        "amount",
        "currency",
        "base_amount",
        "transaction_date",
    )
    list_filter = ("account_kind", "entry_type", "currency")
    search_fields = ("reference_id", "account_id")
    ordering = ("created_at",)
