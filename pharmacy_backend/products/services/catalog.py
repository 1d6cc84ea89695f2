# products/services/catalog.py

"""
ITEM CATALOG

Read-side lookups used by invoice line processing.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError

from common.exceptions import ItemInactive, ItemNotFound
from products.models import Item


def get_item(item_id) -> Item:
    if not item_id:
        raise ItemNotFound("item_id is required")

    try:
        return Item.objects.get(pk=item_id)
    except (Item.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise ItemNotFound(details={"item_id": str(item_id)}) from exc


def get_active_item(item_id) -> Item:
    item = get_item(item_id)
    if not item.is_active:
        raise ItemInactive(
            f"Item {item.sku} is inactive",
            details={"item_id": str(item.id), "sku": item.sku},
        )
    return item
