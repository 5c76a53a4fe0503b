"""
Inventory table.

Models:
- InventoryItem (one row per part, keyed by an integer id)
"""

from .item import InventoryItem  # noqa: F401
