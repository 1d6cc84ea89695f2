# invoicing/models/invoice_item.py

"""
INVOICE LINE

A fully computed line (output of the line processor).

Invariant:
    line_total = (line_subtotal - discount1_amount - discount2_amount) + tax_amount
withholding_amount is tracked beside the line, never inside line_total.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from products.models import Item

from .invoice import Invoice


def _money_field(**kwargs):
    return models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00"), **kwargs
    )


def _percent_field():
    return models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))


class InvoiceItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )
    line_no = models.PositiveIntegerField()

    item = models.ForeignKey(
        Item,
        on_delete=models.PROTECT,
        related_name="invoice_items",
    )

    quantity = models.PositiveIntegerField()
    unit_price = _money_field()

    discount1_percent = _percent_field()
    discount1_amount = _money_field()
    discount2_percent = _percent_field()
    discount2_amount = _money_field()

    claim_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="claimed_invoice_items",
    )

    line_subtotal = _money_field()
    taxable_amount = _money_field()
    tax_amount = _money_field()
    withholding_amount = _money_field()
    line_total = _money_field()

    # Batch descriptor (optional)
    batch_number = models.CharField(max_length=64, blank=True, default="")
    manufacturing_date = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ["invoice", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["invoice", "line_no"],
                name="uniq_invoice_item_line_no",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="invoice_item_quantity_positive",
            ),
            models.CheckConstraint(
                condition=Q(unit_price__gte=Decimal("0.00"))
                & Q(line_total__gte=Decimal("0.00")),
                name="invoice_item_amounts_nonnegative",
            ),
            models.CheckConstraint(
                condition=Q(discount2_amount=Decimal("0.00")) | Q(claim_account__isnull=False),
                name="invoice_item_discount2_requires_claim_account",
            ),
        ]
        indexes = [
            models.Index(fields=["item"], name="invoice_item_item_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_id} #{self.line_no}: {self.item_id} x {self.quantity}"

    def clean(self):
        if (
            self.manufacturing_date
            and self.expiry_date
            and self.expiry_date <= self.manufacturing_date
        ):
            raise ValidationError("expiry_date must be after manufacturing_date")

        expected = (
            self.line_subtotal - self.discount1_amount - self.discount2_amount
        ) + self.tax_amount
        if self.line_total != expected:
            raise ValidationError("line_total does not match line components")

    def save(self, *args, **kwargs):
        status = (
            Invoice.objects.filter(pk=self.invoice_id)
            .values_list("status", flat=True)
            .first()
        )
        if status != Invoice.STATUS_DRAFT:
            raise ValidationError("Invoice lines can only change while the invoice is draft")

        self.full_clean()
        return super().save(*args, **kwargs)
