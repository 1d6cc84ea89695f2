# invoicing/models/invoice.py

"""
INVOICE HEADER

One schema for the four invoice directions:
- sale / return_sale          -> customer
- purchase / return_purchase  -> supplier

Guarantees:
- Totals columns are written only from InvoiceTotals (never edited by hand)
- Exactly one counterparty, matching the direction (DB check constraint)
- Returns reference the invoice they return
- Only draft invoices can be deleted
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from parties.models import Customer, Supplier

User = settings.AUTH_USER_MODEL


class Invoice(models.Model):
    class Direction(models.TextChoices):
        SALE = "sale", "Sale"
        PURCHASE = "purchase", "Purchase"
        RETURN_SALE = "return_sale", "Sale Return"
        RETURN_PURCHASE = "return_purchase", "Purchase Return"

    CUSTOMER_DIRECTIONS = (Direction.SALE, Direction.RETURN_SALE)
    SUPPLIER_DIRECTIONS = (Direction.PURCHASE, Direction.RETURN_PURCHASE)
    RETURN_DIRECTIONS = (Direction.RETURN_SALE, Direction.RETURN_PURCHASE)

    STATUS_DRAFT = "draft"
    STATUS_CONFIRMED = "confirmed"
    STATUS_CANCELLED = "cancelled"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PARTIAL = "partial"
    PAYMENT_PAID = "paid"

    PAYMENT_STATUSES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PARTIAL, "Partially paid"),
        (PAYMENT_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_number = models.CharField(max_length=32, unique=True)
    direction = models.CharField(max_length=20, choices=Direction.choices)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    original_invoice = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="returns",
    )

    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    currency = models.CharField(max_length=3)
    exchange_rate = models.DecimalField(
        max_digits=12, decimal_places=6, default=Decimal("1")
    )

    # Totals (derived from lines)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount1_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount2_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    taxable_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    withholding_total = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Informational only: not part of grand_total, not posted",
    )
    grand_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUSES, default=PAYMENT_PENDING
    )

    # Payment metadata (no ledger effect here)
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_method = models.CharField(max_length=32, blank=True, default="")
    payment_reference = models.CharField(max_length=100, blank=True, default="")
    payment_notes = models.TextField(blank=True, default="")

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_created",
    )
    confirmed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_confirmed",
    )
    cancelled_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_cancelled",
    )

    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(
                        direction__in=["sale", "return_sale"],
                        customer__isnull=False,
                        supplier__isnull=True,
                    )
                    | Q(
                        direction__in=["purchase", "return_purchase"],
                        supplier__isnull=False,
                        customer__isnull=True,
                    )
                ),
                name="invoice_counterparty_matches_direction",
            ),
            models.CheckConstraint(
                condition=(
                    Q(direction__in=["return_sale", "return_purchase"], original_invoice__isnull=False)
                    | Q(direction__in=["sale", "purchase"], original_invoice__isnull=True)
                ),
                name="invoice_return_has_original",
            ),
            models.CheckConstraint(
                condition=Q(subtotal__gte=Decimal("0.00"))
                & Q(grand_total__gte=Decimal("0.00"))
                & Q(amount_paid__gte=Decimal("0.00")),
                name="invoice_totals_nonnegative",
            ),
            models.CheckConstraint(
                condition=Q(exchange_rate__gt=Decimal("0")),
                name="invoice_exchange_rate_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["direction", "status"], name="invoice_direction_status_idx"),
            models.Index(fields=["status", "payment_status"], name="invoice_status_payment_idx"),
            models.Index(fields=["customer", "invoice_date"], name="invoice_customer_date_idx"),
            models.Index(fields=["supplier", "invoice_date"], name="invoice_supplier_date_idx"),
            models.Index(fields=["invoice_date"], name="invoice_date_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_number} ({self.direction}, {self.status})"

    @property
    def counterparty(self):
        return self.customer if self.direction in self.CUSTOMER_DIRECTIONS else self.supplier

    @property
    def is_draft(self) -> bool:
        return self.status == self.STATUS_DRAFT

    @property
    def balance_due(self) -> Decimal:
        return (self.grand_total or Decimal("0.00")) - (self.amount_paid or Decimal("0.00"))

    def clean(self):
        if self.direction in self.CUSTOMER_DIRECTIONS:
            if not self.customer_id or self.supplier_id:
                raise ValidationError("Sales invoices must reference a customer only")
        elif self.direction in self.SUPPLIER_DIRECTIONS:
            if not self.supplier_id or self.customer_id:
                raise ValidationError("Purchase invoices must reference a supplier only")
        else:
            raise ValidationError("Invalid invoice direction")

        if self.direction in self.RETURN_DIRECTIONS and not self.original_invoice_id:
            raise ValidationError("Return invoices must reference the original invoice")

        if self.due_date and self.invoice_date and self.due_date < self.invoice_date:
            raise ValidationError("due_date cannot be before invoice_date")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status != self.STATUS_DRAFT:
            raise ValidationError("Only draft invoices can be deleted")
        return super().delete(*args, **kwargs)
