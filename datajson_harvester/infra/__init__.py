"""Infra layer utilities (payload storage)."""

from .storage import InventoryCache, atomic_write_bytes

__all__ = ["InventoryCache", "atomic_write_bytes"]
