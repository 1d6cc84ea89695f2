# products/models/item.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q


STOCK_FIELDS = ("quantity_on_hand", "stock_version")


class Item(models.Model):
    """
    Represents a tradable item (pharmacy SKU).

    STOCK MODEL (IMPORTANT):
    - quantity_on_hand is a cached counter of the StockMovement ledger
    - It is mutated ONLY by products.services.stock_ledger, via a conditional
      UPDATE that also bumps stock_version
    - save() never writes the stock columns of an existing row and refuses
      in-memory edits to them
    - New items start at zero; opening stock is a ledger movement too
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    cost_price = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    sale_price = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    # Tax profile (percentages)
    gst_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    wht_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text="Withholding rate. Tracked only; never added to invoice totals.",
    )

    quantity_on_hand = models.PositiveIntegerField(default=0, editable=False)
    min_stock = models.PositiveIntegerField(default=0)
    max_stock = models.PositiveIntegerField(default=0)

    stock_version = models.PositiveIntegerField(default=0, editable=False)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["sku"], name="item_sku_idx"),
            models.Index(fields=["name"], name="item_name_idx"),
            models.Index(fields=["is_active"], name="item_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(min_stock__lte=F("max_stock")),
                name="item_min_stock_lte_max_stock",
            ),
            models.CheckConstraint(
                condition=Q(cost_price__gte=Decimal("0.00"))
                & Q(sale_price__gte=Decimal("0.00")),
                name="item_prices_nonnegative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_stock = {
            name: getattr(instance, name)
            for name in STOCK_FIELDS
            if name in field_names
        }
        return instance

    def _remember_stock(self):
        self._loaded_stock = {name: getattr(self, name) for name in STOCK_FIELDS}

    def refresh_from_db(self, *args, **kwargs):
        super().refresh_from_db(*args, **kwargs)
        self._remember_stock()

    def clean(self):
        self.sku = (self.sku or "").strip()
        self.name = (self.name or "").strip()

        if not self.sku:
            raise ValidationError("sku is required")
        if not self.name:
            raise ValidationError("name is required")

        if int(self.min_stock or 0) > int(self.max_stock or 0):
            raise ValidationError("min_stock cannot exceed max_stock")

    def save(self, *args, **kwargs):
        if self._state.adding:
            if int(self.quantity_on_hand or 0) != 0 or int(self.stock_version or 0) != 0:
                raise ValidationError(
                    "New items start with zero stock; record opening stock through the stock ledger"
                )
            self.full_clean()
            result = super().save(*args, **kwargs)
            self._remember_stock()
            return result

        loaded = getattr(self, "_loaded_stock", {})
        for name, value in loaded.items():
            if getattr(self, name) != value:
                raise ValidationError(
                    f"{name} is managed by the stock ledger and cannot be edited directly"
                )

        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            if set(update_fields) & set(STOCK_FIELDS):
                raise ValidationError(
                    "quantity_on_hand / stock_version are managed by the stock ledger"
                )
        else:
            kwargs["update_fields"] = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in STOCK_FIELDS
            ]

        self.full_clean()
        return super().save(*args, **kwargs)
