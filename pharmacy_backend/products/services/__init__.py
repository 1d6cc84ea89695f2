from .stock_ledger import (
    StockLine,
    apply_movements,
    record_opening_stock,
    reconcile_item,
    reverse_movements,
)

__all__ = [
    "StockLine",
    "apply_movements",
    "record_opening_stock",
    "reconcile_item",
    "reverse_movements",
]
