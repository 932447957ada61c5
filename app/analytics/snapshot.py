"""Ledger snapshot metrics. None of these depend on a date range."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from app.analytics.financials import ZERO, to_decimal


def is_low_stock(item) -> bool:
    # equal to the threshold is not low
    return item.quantity < item.min_threshold


def stock_value(item) -> Decimal:
    return Decimal(item.quantity) * to_decimal(item.price)


def current_stock_value(items: Iterable) -> Decimal:
    return sum((stock_value(item) for item in items), ZERO)


def category_split(items: Iterable) -> dict[str, int]:
    counts: dict[str, int] = {}
    for item in items:
        counts[item.category] = counts.get(item.category, 0) + 1
    return counts


def top_value_items(items: Iterable, limit: int = 5) -> list:
    return sorted(items, key=stock_value, reverse=True)[:limit]


@dataclass
class StockSnapshot:
    current_stock_value: Decimal = ZERO
    item_count: int = 0
    total_units: int = 0
    low_stock_items: list = field(default_factory=list)
    categories: dict[str, int] = field(default_factory=dict)
    top_items: list = field(default_factory=list)


def take_snapshot(items: Iterable) -> StockSnapshot:
    items = list(items)
    return StockSnapshot(
        current_stock_value=current_stock_value(items),
        item_count=len(items),
        total_units=sum(item.quantity for item in items),
        low_stock_items=[item for item in items if is_low_stock(item)],
        categories=category_split(items),
        top_items=top_value_items(items),
    )
