# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is always positive; movement_type carries the sign
- Every movement is tied to a source document (reference_type + reference_id)
- A movement is reversed at most once (`reverses` is one-to-one)
- Σ signed quantities per item == Item.quantity_on_hand
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .item import Item


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    OPPOSITE = {
        MovementType.IN: MovementType.OUT,
        MovementType.OUT: MovementType.IN,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    item = models.ForeignKey(
        Item, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    quantity = models.PositiveIntegerField()

    reference_type = models.CharField(max_length=32)
    reference_id = models.CharField(max_length=64)

    # Batch descriptor (optional)
    batch_number = models.CharField(max_length=64, blank=True, default="")
    manufacturing_date = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)

    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversed_by",
    )

    notes = models.TextField(blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="stock_mv_created_idx"),
            models.Index(fields=["movement_type"], name="stock_mv_type_idx"),
            models.Index(fields=["item", "created_at"], name="stock_mv_item_created_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="stock_mv_reference_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="stock_movement_quantity_positive",
            ),
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError("quantity must be greater than zero")

        if not (self.reference_type or "").strip() or not (self.reference_id or "").strip():
            raise ValidationError("Stock movements must reference a source document")

        if (
            self.manufacturing_date
            and self.expiry_date
            and self.expiry_date <= self.manufacturing_date
        ):
            raise ValidationError("expiry_date must be after manufacturing_date")

        if self.reverses_id:
            original = (
                StockMovement.objects.filter(pk=self.reverses_id)
                .values("item_id", "movement_type", "quantity")
                .first()
            )
            if original is None:
                raise ValidationError("Reversed movement does not exist")
            if original["item_id"] != self.item_id:
                raise ValidationError("Reversal must target the same item")
            if original["movement_type"] == self.movement_type:
                raise ValidationError("Reversal must have the opposite direction")
            if original["quantity"] != self.quantity:
                raise ValidationError("Reversal must have the same quantity")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def signed_quantity(self) -> int:
        qty = int(self.quantity or 0)
        return qty if self.movement_type == self.MovementType.IN else -qty

    def __str__(self):
        item_name = getattr(self.item, "name", "Item")
        return f"{item_name} | {self.movement_type} {self.quantity} | {self.reference_type}:{self.reference_id}"
