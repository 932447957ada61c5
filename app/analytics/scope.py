"""Warehouse scope: a derived view over the ledger and the log, never stored."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional


UNKNOWN_ITEM = "Unknown Item"


@dataclass(frozen=True)
class Scope:
    warehouse_id: Optional[str] = None
    items: list = field(default_factory=list)
    transactions: list = field(default_factory=list)

    @property
    def is_global(self) -> bool:
        return self.warehouse_id is None


def resolve_scope(
    items: Iterable,
    transactions: Iterable,
    warehouse_id: Optional[str] = None,
) -> Scope:
    """Global view keeps every transaction, orphaned ones included.

    A warehouse view keeps only the transactions whose item is live in that
    warehouse, so history of deleted items drops out of it.
    """
    if warehouse_id is None:
        return Scope(None, list(items), list(transactions))

    scoped_items = [item for item in items if item.warehouse_id == warehouse_id]
    item_ids = {item.id for item in scoped_items}
    scoped_transactions = [t for t in transactions if t.item_id in item_ids]
    return Scope(warehouse_id, scoped_items, scoped_transactions)


def item_label(items_by_id: Mapping, item_id: str) -> str:
    item = items_by_id.get(item_id)
    return item.name if item is not None else UNKNOWN_ITEM
