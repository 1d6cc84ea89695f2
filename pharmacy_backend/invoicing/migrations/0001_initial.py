import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def _money(**kwargs):
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, **kwargs)


def _percent():
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)


def _user_fk(related_name):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name=related_name,
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("accounting", "0001_initial"),
        ("parties", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="InvoiceSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("series", models.CharField(max_length=8)),
                ("year", models.PositiveIntegerField()),
                ("last_value", models.PositiveIntegerField(default=0)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("series", "year"), name="uniq_invoice_sequence_series_year"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("invoice_number", models.CharField(max_length=32, unique=True)),
                (
                    "direction",
                    models.CharField(
                        choices=[
                            ("sale", "Sale"),
                            ("purchase", "Purchase"),
                            ("return_sale", "Sale Return"),
                            ("return_purchase", "Purchase Return"),
                        ],
                        max_length=20,
                    ),
                ),
                ("invoice_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("currency", models.CharField(max_length=3)),
                ("exchange_rate", models.DecimalField(decimal_places=6, default=Decimal("1"), max_digits=12)),
                ("subtotal", _money()),
                ("discount1_total", _money()),
                ("discount2_total", _money()),
                ("total_discount", _money()),
                ("taxable_amount", _money()),
                ("tax_total", _money()),
                ("withholding_total", _money(help_text="Informational only: not part of grand_total, not posted")),
                ("grand_total", _money()),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        default="draft",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("partial", "Partially paid"), ("paid", "Paid")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("amount_paid", _money()),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("payment_method", models.CharField(blank=True, default="", max_length=32)),
                ("payment_reference", models.CharField(blank=True, default="", max_length=100)),
                ("payment_notes", models.TextField(blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="parties.customer",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="parties.supplier",
                    ),
                ),
                (
                    "original_invoice",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="invoicing.invoice",
                    ),
                ),
                ("created_by", _user_fk("invoices_created")),
                ("confirmed_by", _user_fk("invoices_confirmed")),
                ("cancelled_by", _user_fk("invoices_cancelled")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["direction", "status"], name="invoice_direction_status_idx"),
                    models.Index(fields=["status", "payment_status"], name="invoice_status_payment_idx"),
                    models.Index(fields=["customer", "invoice_date"], name="invoice_customer_date_idx"),
                    models.Index(fields=["supplier", "invoice_date"], name="invoice_supplier_date_idx"),
                    models.Index(fields=["invoice_date"], name="invoice_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("direction__in", ["sale", "return_sale"]),
                                ("customer__isnull", False),
                                ("supplier__isnull", True),
                            ),
                            models.Q(
                                ("direction__in", ["purchase", "return_purchase"]),
                                ("supplier__isnull", False),
                                ("customer__isnull", True),
                            ),
                            _connector="OR",
                        ),
                        name="invoice_counterparty_matches_direction",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("direction__in", ["return_sale", "return_purchase"]),
                                ("original_invoice__isnull", False),
                            ),
                            models.Q(
                                ("direction__in", ["sale", "purchase"]),
                                ("original_invoice__isnull", True),
                            ),
                            _connector="OR",
                        ),
                        name="invoice_return_has_original",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("subtotal__gte", Decimal("0.00")),
                            ("grand_total__gte", Decimal("0.00")),
                            ("amount_paid__gte", Decimal("0.00")),
                        ),
                        name="invoice_totals_nonnegative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("exchange_rate__gt", Decimal("0"))),
                        name="invoice_exchange_rate_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("line_no", models.PositiveIntegerField()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", _money()),
                ("discount1_percent", _percent()),
                ("discount1_amount", _money()),
                ("discount2_percent", _percent()),
                ("discount2_amount", _money()),
                ("line_subtotal", _money()),
                ("taxable_amount", _money()),
                ("tax_amount", _money()),
                ("withholding_amount", _money()),
                ("line_total", _money()),
                ("batch_number", models.CharField(blank=True, default="", max_length=64)),
                ("manufacturing_date", models.DateField(blank=True, null=True)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="invoicing.invoice",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoice_items",
                        to="products.item",
                    ),
                ),
                (
                    "claim_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="claimed_invoice_items",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "ordering": ["invoice", "line_no"],
                "indexes": [
                    models.Index(fields=["item"], name="invoice_item_item_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("invoice", "line_no"), name="uniq_invoice_item_line_no"),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="invoice_item_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("unit_price__gte", Decimal("0.00")),
                            ("line_total__gte", Decimal("0.00")),
                        ),
                        name="invoice_item_amounts_nonnegative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("discount2_amount", Decimal("0.00")),
                            ("claim_account__isnull", False),
                            _connector="OR",
                        ),
                        name="invoice_item_discount2_requires_claim_account",
                    ),
                ],
            },
        ),
    ]
