# invoicing/api/serializers.py

"""
INVOICING SERIALIZERS

Input serializers only check shape (types, formats). Business validation
(quantities > 0, discount ranges, claim accounts, stock) belongs to the
services so that every rule failure carries its typed error code.
"""

from rest_framework import serializers

from accounting.models import LedgerEntry
from invoicing.models import Invoice, InvoiceItem
from products.models import StockMovement

# ============================================================
# INPUT
# ============================================================


class InvoiceLineInputSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)

    discount1_percent = serializers.DecimalField(
        max_digits=7, decimal_places=2, required=False, allow_null=True
    )
    discount2_percent = serializers.DecimalField(
        max_digits=7, decimal_places=2, required=False, allow_null=True
    )
    discount = serializers.DecimalField(
        max_digits=7,
        decimal_places=2,
        required=False,
        allow_null=True,
        help_text="Legacy single discount percent, read as tier 1",
    )
    claim_account_id = serializers.UUIDField(required=False, allow_null=True)

    batch_number = serializers.CharField(required=False, allow_blank=True, max_length=64)
    manufacturing_date = serializers.DateField(required=False, allow_null=True)
    expiry_date = serializers.DateField(required=False, allow_null=True)


class InvoiceCreateSerializer(serializers.Serializer):
    direction = serializers.ChoiceField(choices=Invoice.Direction.choices)
    counterparty_id = serializers.UUIDField()
    lines = InvoiceLineInputSerializer(many=True, allow_empty=True)

    invoice_date = serializers.DateField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)
    currency = serializers.CharField(required=False, allow_blank=True, max_length=3)
    exchange_rate = serializers.DecimalField(
        max_digits=12, decimal_places=6, required=False, allow_null=True
    )
    original_invoice_id = serializers.UUIDField(required=False, allow_null=True)
    claim_account_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class InvoiceUpdateSerializer(serializers.Serializer):
    counterparty_id = serializers.UUIDField(required=False)
    lines = InvoiceLineInputSerializer(many=True, required=False, allow_empty=True)

    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    currency = serializers.CharField(required=False, max_length=3)
    exchange_rate = serializers.DecimalField(max_digits=12, decimal_places=6, required=False)
    claim_account_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class CancelInvoiceSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class MarkPaidSerializer(serializers.Serializer):
    payment_method = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=32
    )
    payment_reference = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=100
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    paid_at = serializers.DateTimeField(required=False, allow_null=True, default=None)


class MarkPartiallyPaidSerializer(MarkPaidSerializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


# ============================================================
# OUTPUT
# ============================================================


class InvoiceItemSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)

    class Meta:
        model = InvoiceItem
        fields = [
            "id",
            "line_no",
            "item",
            "sku",
            "item_name",
            "quantity",
            "unit_price",
            "discount1_percent",
            "discount1_amount",
            "discount2_percent",
            "discount2_amount",
            "claim_account",
            "line_subtotal",
            "taxable_amount",
            "tax_amount",
            "withholding_amount",
            "line_total",
            "batch_number",
            "manufacturing_date",
            "expiry_date",
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    """
    Canonical invoice read model (header + lines).
    """

    counterparty_id = serializers.SerializerMethodField()
    counterparty_name = serializers.SerializerMethodField()
    balance_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "direction",
            "customer",
            "supplier",
            "counterparty_id",
            "counterparty_name",
            "original_invoice",
            "invoice_date",
            "due_date",
            "currency",
            "exchange_rate",
            "subtotal",
            "discount1_total",
            "discount2_total",
            "total_discount",
            "taxable_amount",
            "tax_total",
            "withholding_total",
            "grand_total",
            "status",
            "payment_status",
            "amount_paid",
            "balance_due",
            "paid_at",
            "payment_method",
            "payment_reference",
            "payment_notes",
            "notes",
            "created_by",
            "confirmed_by",
            "confirmed_at",
            "cancelled_by",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields

    def get_counterparty_id(self, obj):
        party = obj.counterparty
        return str(party.pk) if party else None

    def get_counterparty_name(self, obj):
        party = obj.counterparty
        return party.name if party else None


class StockMovementSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)
    signed_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "item",
            "sku",
            "movement_type",
            "quantity",
            "signed_quantity",
            "reference_type",
            "reference_id",
            "batch_number",
            "manufacturing_date",
            "expiry_date",
            "reverses",
            "notes",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "journal_entry",
            "account_kind",
            "account_id",
            "entry_type",
            "amount",
            "currency",
            "exchange_rate",
            "base_amount",
            "description",
            "reference_type",
            "reference_id",
            "transaction_date",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields
