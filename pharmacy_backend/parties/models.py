# parties/models.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Counterparty(models.Model):
    """
    Shared shape of customers and suppliers.

    financial info:
    - payment_terms_days: 0 means "use the engine default"
    - credit_limit: 0 means "no limit"
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    payment_terms_days = models.PositiveIntegerField(default=0)
    credit_limit = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return f"{self.code} – {self.name}"

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError("code is required")
        if not self.name:
            raise ValidationError("name is required")
        if self.credit_limit is not None and self.credit_limit < 0:
            raise ValidationError("credit_limit cannot be negative")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class Customer(Counterparty):
    ROLE = "customer"

    class Meta(Counterparty.Meta):
        indexes = [
            models.Index(fields=["name"], name="customer_name_idx"),
            models.Index(fields=["is_active"], name="customer_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(credit_limit__gte=Decimal("0.00")),
                name="customer_credit_limit_nonnegative",
            ),
        ]


class Supplier(Counterparty):
    ROLE = "supplier"

    class Meta(Counterparty.Meta):
        indexes = [
            models.Index(fields=["name"], name="supplier_name_idx"),
            models.Index(fields=["is_active"], name="supplier_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(credit_limit__gte=Decimal("0.00")),
                name="supplier_credit_limit_nonnegative",
            ),
        ]
