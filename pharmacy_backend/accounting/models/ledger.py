# accounting/models/ledger.py

"""
======================================================
PATH: accounting/models/ledger.py
======================================================
LEDGER ENTRY MODEL

Atomic debit or credit posting to a single account.

The account may be a customer, a supplier or a GL account, so it is stored
as (account_kind, account_id) rather than a single foreign key.

Guarantees:
- Immutable once created (no updates, no deletes)
- Amount is always positive; direction is via entry_type
- base_amount == amount x exchange_rate (2dp)
- transaction_date is never in the future
"""

from __future__ import annotations

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.journal import JournalEntry

TWOPLACES = Decimal("0.01")


class LedgerEntry(models.Model):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    ENTRY_TYPES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"
    GL = "GL"

    ACCOUNT_KINDS = [
        (CUSTOMER, "Customer"),
        (SUPPLIER, "Supplier"),
        (GL, "General ledger"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )

    account_kind = models.CharField(max_length=10, choices=ACCOUNT_KINDS)
    account_id = models.UUIDField()

    entry_type = models.CharField(
        max_length=6,
        choices=ENTRY_TYPES,
    )

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value in `currency`",
    )

    currency = models.CharField(max_length=3)
    exchange_rate = models.DecimalField(
        max_digits=12,
        decimal_places=6,
        default=Decimal("1"),
    )
    base_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        blank=True,
        help_text="amount x exchange_rate (derived when left empty)",
    )

    description = models.CharField(max_length=255, blank=True, default="")

    reference_type = models.CharField(max_length=32)
    reference_id = models.CharField(max_length=64)

    transaction_date = models.DateField(default=timezone.localdate)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["transaction_date", "created_at"]
        indexes = [
            models.Index(
                fields=["account_kind", "account_id", "transaction_date"],
                name="ledger_account_date_idx",
            ),
            models.Index(fields=["journal_entry"], name="ledger_journal_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="ledger_reference_idx"),
            models.Index(fields=["entry_type"], name="ledger_entry_type_idx"),
            models.Index(fields=["created_at"], name="ledger_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0")),
                name="ledger_entry_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(exchange_rate__gt=Decimal("0")),
                name="ledger_entry_exchange_rate_positive",
            ),
        ]

    def __str__(self):
        return f"{self.entry_type} {self.amount} {self.currency} → {self.account_kind}:{self.account_id}"

    @property
    def signed_amount(self) -> Decimal:
        """Debit positive, credit negative (base currency)."""
        base = Decimal(self.base_amount or 0)
        return base if self.entry_type == self.DEBIT else -base

    def clean(self):
        if self.entry_type not in (self.DEBIT, self.CREDIT):
            raise ValidationError("Invalid entry_type")

        if self.account_kind not in (self.CUSTOMER, self.SUPPLIER, self.GL):
            raise ValidationError("Invalid account_kind")

        if self.amount is None or self.amount <= 0:
            raise ValidationError("Ledger amount must be > 0")

        if self.exchange_rate is None or self.exchange_rate <= 0:
            raise ValidationError("exchange_rate must be > 0")

        expected = (Decimal(self.amount) * Decimal(self.exchange_rate)).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
        if self.base_amount is None:
            self.base_amount = expected
        elif Decimal(self.base_amount) != expected:
            raise ValidationError("base_amount must equal amount x exchange_rate")

        if self.transaction_date and self.transaction_date > timezone.localdate():
            raise ValidationError("Ledger entries cannot be future-dated")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("LedgerEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are immutable and cannot be deleted")
