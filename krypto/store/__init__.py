"""
Item stores.

- ItemStore: protocol the engine depends on
- InMemoryItemStore: process-local, nothing persisted
- SqlItemStore: SQLAlchemy persistence (SQLite by default)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import ItemStore
from .memory import InMemoryItemStore
from .sql import SqlItemStore

if TYPE_CHECKING:
    from ..config import Settings


def create_store(settings: Settings) -> ItemStore:
    """Build the store selected by `settings.store_backend`."""
    if settings.store_backend == "memory":
        return InMemoryItemStore()
    if settings.store_backend == "sql":
        return SqlItemStore(settings.database_url, echo=settings.log_level == "DEBUG")
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


__all__ = [
    "ItemStore",
    "InMemoryItemStore",
    "SqlItemStore",
    "create_store",
]
