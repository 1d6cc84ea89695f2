# products/services/stock_ledger.py

"""
STOCK LEDGER (AUTHORITATIVE)

This module is the ONLY place allowed to:
- Create StockMovement rows
- Change Item.quantity_on_hand

HARD RULES:
- Every on-hand change is paired with a movement in the same transaction
- Items are locked (select_for_update) in a stable id order, then updated
  with a compare-and-swap on stock_version
- OUT: every line of a document is checked BEFORE any movement is written
- Reversal appends equal-and-opposite movements; history is never edited
- A document's movements are reversed at most once (AlreadyReversed)
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date

from django.db import transaction
from django.db.models import Case, F, IntegerField, Sum, Value, When
from django.db.models.functions import Coalesce

from common.exceptions import (
    AlreadyReversed,
    ConsistencyError,
    InsufficientStock,
    InvalidLineItem,
    ItemNotFound,
)
from products.models import Item, StockMovement

logger = logging.getLogger(__name__)

IN = StockMovement.MovementType.IN
OUT = StockMovement.MovementType.OUT

REFERENCE_OPENING = "OPENING"


@dataclass(frozen=True)
class StockLine:
    item_id: object
    quantity: int
    batch_number: str = ""
    manufacturing_date: date | None = None
    expiry_date: date | None = None


@dataclass(frozen=True)
class ReconciliationResult:
    item_id: object
    quantity_on_hand: int
    ledger_quantity: int

    @property
    def is_consistent(self) -> bool:
        return self.quantity_on_hand == self.ledger_quantity


def _to_int_qty(value) -> int:
    """
    HARD RULE: quantities are integer units in this system.
    """
    if isinstance(value, bool):
        raise InvalidLineItem("quantity must be a whole integer unit")

    try:
        qty = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidLineItem("quantity must be a whole integer unit") from exc

    if qty != value and str(qty) != str(value).strip():
        raise InvalidLineItem("quantity must be a whole integer unit")

    if qty <= 0:
        raise InvalidLineItem("quantity must be greater than zero")

    return qty


def _lock_items(item_ids) -> dict:
    """
    Lock every item touched by one document.

    Ordering by id keeps two documents touching the same items from
    deadlocking on each other.
    """
    ids = sorted({str(i) for i in item_ids})
    locked = {
        str(item.id): item
        for item in Item.objects.select_for_update().filter(pk__in=ids).order_by("pk")
    }

    missing = [i for i in ids if i not in locked]
    if missing:
        raise ItemNotFound(
            "Item not found",
            details={"item_ids": missing},
        )

    return locked


def _swap_quantity(*, item: Item, new_quantity: int) -> None:
    updated = Item.objects.filter(
        pk=item.pk,
        stock_version=item.stock_version,
    ).update(
        quantity_on_hand=new_quantity,
        stock_version=F("stock_version") + 1,
    )

    if updated != 1:
        logger.error(
            "Stock version conflict",
            extra={"item_id": str(item.pk), "stock_version": item.stock_version},
        )
        raise ConsistencyError(
            "Concurrent stock update detected; nothing was committed",
            details={"item_id": str(item.pk)},
        )


# ============================================================
# APPLY
# ============================================================


@transaction.atomic
def apply_movements(
    *,
    reference_type: str,
    reference_id,
    lines,
    movement_type: str,
    user=None,
    notes: str = "",
) -> list[StockMovement]:
    """
    Post one movement per line and adjust on-hand by the same signed amount.

    For OUT, all lines are validated against the locked on-hand first; one
    short line rejects the whole document with InsufficientStock and nothing
    is written.
    """
    if movement_type not in (IN, OUT):
        raise ValueError(f"Invalid movement_type: {movement_type!r}")

    lines = list(lines or [])
    if not lines:
        raise InvalidLineItem("At least one stock line is required")

    reference_id = str(reference_id)

    required: OrderedDict[str, int] = OrderedDict()
    for line in lines:
        key = str(line.item_id)
        required[key] = required.get(key, 0) + _to_int_qty(line.quantity)

    locked = _lock_items(required.keys())

    if movement_type == OUT:
        shortages = []
        for item_id, qty in required.items():
            available = int(locked[item_id].quantity_on_hand or 0)
            if available < qty:
                shortages.append(
                    {
                        "item_id": item_id,
                        "sku": locked[item_id].sku,
                        "requested": qty,
                        "available": available,
                    }
                )

        if shortages:
            logger.warning(
                "Stock apply rejected: insufficient stock",
                extra={
                    "reference_type": reference_type,
                    "reference_id": reference_id,
                    "shortages": shortages,
                },
            )
            raise InsufficientStock(
                "Insufficient stock for one or more lines",
                shortages=shortages,
            )

    for item_id, qty in required.items():
        item = locked[item_id]
        current = int(item.quantity_on_hand or 0)
        new_quantity = current + qty if movement_type == IN else current - qty
        _swap_quantity(item=item, new_quantity=new_quantity)

    movements = []
    for line in lines:
        movements.append(
            StockMovement.objects.create(
                item=locked[str(line.item_id)],
                movement_type=movement_type,
                quantity=_to_int_qty(line.quantity),
                reference_type=reference_type,
                reference_id=reference_id,
                batch_number=(line.batch_number or "").strip(),
                manufacturing_date=line.manufacturing_date,
                expiry_date=line.expiry_date,
                notes=notes,
                performed_by=user,
            )
        )

    logger.info(
        "Stock movements applied",
        extra={
            "reference_type": reference_type,
            "reference_id": reference_id,
            "movement_type": movement_type,
            "lines": len(movements),
        },
    )
    return movements


# ============================================================
# REVERSE
# ============================================================


@transaction.atomic
def reverse_movements(
    *,
    reference_type: str,
    reference_id,
    reason: str = "",
    user=None,
    strict: bool = False,
) -> list[StockMovement]:
    """
    Append the opposite of every not-yet-reversed movement of a document.

    - No original movements: nothing to do, returns []
    - Originals exist but all are reversed: AlreadyReversed
    - strict=True: removing more than is on hand raises InsufficientStock
      before anything is written
    - otherwise on-hand is floored at zero; a reconciled ledger never needs it
    """
    reference_id = str(reference_id)

    originals = StockMovement.objects.filter(
        reference_type=reference_type,
        reference_id=reference_id,
        reverses__isnull=True,
    )

    if not originals.exists():
        return []

    pending = list(
        originals.filter(reversed_by__isnull=True)
        .select_related("item")
        .order_by("created_at", "id")
    )
    if not pending:
        raise AlreadyReversed(
            "Stock movements already reversed",
            details={"reference_type": reference_type, "reference_id": reference_id},
        )

    locked = _lock_items(m.item_id for m in pending)

    delta: dict[str, int] = {}
    for movement in pending:
        key = str(movement.item_id)
        signed = -movement.signed_quantity
        delta[key] = delta.get(key, 0) + signed

    if strict:
        shortages = [
            {
                "item_id": item_id,
                "sku": locked[item_id].sku,
                "requested": -change,
                "available": int(locked[item_id].quantity_on_hand or 0),
            }
            for item_id, change in delta.items()
            if int(locked[item_id].quantity_on_hand or 0) + change < 0
        ]
        if shortages:
            logger.warning(
                "Stock reversal rejected: insufficient stock",
                extra={
                    "reference_type": reference_type,
                    "reference_id": reference_id,
                    "shortages": shortages,
                },
            )
            raise InsufficientStock(
                "Not enough stock on hand to reverse this document",
                shortages=shortages,
            )

    for item_id in sorted(delta):
        item = locked[item_id]
        current = int(item.quantity_on_hand or 0)
        new_quantity = current + delta[item_id]
        if new_quantity < 0:
            logger.warning(
                "Stock reversal clamped at zero",
                extra={
                    "item_id": item_id,
                    "quantity_on_hand": current,
                    "delta": delta[item_id],
                    "reference_type": reference_type,
                    "reference_id": reference_id,
                },
            )
            new_quantity = 0
        _swap_quantity(item=item, new_quantity=new_quantity)

    reversals = []
    for movement in pending:
        reversals.append(
            StockMovement.objects.create(
                item=locked[str(movement.item_id)],
                movement_type=StockMovement.OPPOSITE[movement.movement_type],
                quantity=movement.quantity,
                reference_type=reference_type,
                reference_id=reference_id,
                batch_number=movement.batch_number,
                manufacturing_date=movement.manufacturing_date,
                expiry_date=movement.expiry_date,
                reverses=movement,
                notes=reason or f"Reversal of {movement.movement_type} movement",
                performed_by=user,
            )
        )

    logger.info(
        "Stock movements reversed",
        extra={
            "reference_type": reference_type,
            "reference_id": reference_id,
            "lines": len(reversals),
        },
    )
    return reversals


# ============================================================
# CHECKS / READS
# ============================================================


@transaction.atomic
def record_opening_stock(*, item: Item, quantity, user=None, notes: str = "") -> StockMovement:
    """Opening balance for an item, posted as an IN movement like any other."""
    movements = apply_movements(
        reference_type=REFERENCE_OPENING,
        reference_id=uuid.uuid4(),
        lines=[StockLine(item_id=item.pk, quantity=quantity)],
        movement_type=IN,
        user=user,
        notes=notes or "Opening stock",
    )
    return movements[0]


def get_movements_for_reference(*, reference_type: str, reference_id):
    return (
        StockMovement.objects.filter(
            reference_type=reference_type,
            reference_id=str(reference_id),
        )
        .select_related("item", "reverses")
        .order_by("created_at", "id")
    )


def get_ledger_quantity(item: Item) -> int:
    total = StockMovement.objects.filter(item=item).aggregate(
        total=Coalesce(
            Sum(
                Case(
                    When(movement_type=IN, then=F("quantity")),
                    When(movement_type=OUT, then=-F("quantity")),
                    output_field=IntegerField(),
                )
            ),
            Value(0),
        )
    )["total"]
    return int(total or 0)


def reconcile_item(item: Item) -> ReconciliationResult:
    on_hand = (
        Item.objects.filter(pk=item.pk).values_list("quantity_on_hand", flat=True).first()
    )
    return ReconciliationResult(
        item_id=item.pk,
        quantity_on_hand=int(on_hand or 0),
        ledger_quantity=get_ledger_quantity(item),
    )
