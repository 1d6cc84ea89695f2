"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .item import Item
from .stock_movement import StockMovement

__all__ = [
    "Item",
    "StockMovement",
]
