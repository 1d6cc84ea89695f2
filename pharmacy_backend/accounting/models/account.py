# accounting/models/account.py

from __future__ import annotations

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    A general-ledger account.

    Guarantees:
    - Account codes are unique
    - Code + name are normalized (trimmed)
    - Only ADJUSTMENT / CLAIM / EXPENSE accounts can absorb discount claims
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"
    ADJUSTMENT = "ADJUSTMENT"
    CLAIM = "CLAIM"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
        (ADJUSTMENT, "Adjustment"),
        (CLAIM, "Claim"),
    ]

    CLAIM_ACCOUNT_TYPES = (ADJUSTMENT, CLAIM, EXPENSE)

    # Debit-normal types report balance as debits - credits
    DEBIT_NORMAL_TYPES = (ASSET, EXPENSE, ADJUSTMENT, CLAIM)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=ACCOUNT_TYPES,
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["account_type"], name="account_type_idx"),
            models.Index(fields=["is_active"], name="account_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @property
    def can_receive_claims(self) -> bool:
        return bool(self.is_active) and self.account_type in self.CLAIM_ACCOUNT_TYPES

    @property
    def is_debit_normal(self) -> bool:
        return self.account_type in self.DEBIT_NORMAL_TYPES

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
