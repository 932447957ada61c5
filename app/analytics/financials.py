"""Period metrics over a (filtered) transaction set.

All sums are exact ``Decimal`` arithmetic; rounding belongs to presentation.

Cost of goods sold uses the cost frozen on each OUT record. Records written
before cost tracking have no ``cost_price``; for those the *current* ledger
price of the item is used instead, which misstates profit if the price has
changed since the sale. Such values are counted in ``estimated_cost_count``
so reports can flag them rather than present them as exact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass
class FinancialSummary:
    sales_revenue: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    damage_loss: Decimal = ZERO
    tax_collected: Decimal = ZERO
    estimated_cost_count: int = 0

    @property
    def net_earnings(self) -> Decimal:
        return self.sales_revenue - self.cost_of_goods_sold

    @property
    def cost_is_estimated(self) -> bool:
        return self.estimated_cost_count > 0


@dataclass
class ActivityTotals:
    quantity: int = 0
    value: Decimal = ZERO


@dataclass
class ActivitySummary:
    received: ActivityTotals = field(default_factory=ActivityTotals)
    dispatched: ActivityTotals = field(default_factory=ActivityTotals)
    damaged: ActivityTotals = field(default_factory=ActivityTotals)
    count: int = 0


def unit_cost(transaction, items_by_id: Mapping) -> tuple[Decimal, bool]:
    """Returns the unit cost of an OUT record and whether it is an estimate."""
    if transaction.cost_price is not None:
        return to_decimal(transaction.cost_price), False

    item = items_by_id.get(transaction.item_id)
    if item is None:
        return ZERO, True
    return to_decimal(item.price), True


def summarize_financials(transactions: Iterable, items: Iterable) -> FinancialSummary:
    items_by_id = {item.id: item for item in items}
    summary = FinancialSummary()

    for t in transactions:
        quantity = Decimal(t.quantity)
        if t.type == "OUT":
            line = quantity * to_decimal(t.price)
            summary.sales_revenue += line
            summary.tax_collected += line * to_decimal(t.tax_percent) / HUNDRED

            cost, estimated = unit_cost(t, items_by_id)
            summary.cost_of_goods_sold += quantity * cost
            if estimated:
                summary.estimated_cost_count += 1
        elif t.type == "DAMAGE":
            # price on a DAMAGE record is the unit cost
            summary.damage_loss += quantity * to_decimal(t.price)

    return summary


def summarize_activity(transactions: Iterable) -> ActivitySummary:
    summary = ActivitySummary()
    buckets = {
        "IN": summary.received,
        "OUT": summary.dispatched,
        "DAMAGE": summary.damaged,
    }

    for t in transactions:
        bucket = buckets.get(t.type)
        if bucket is None:
            continue
        bucket.quantity += t.quantity
        bucket.value += Decimal(t.quantity) * to_decimal(t.price)
        summary.count += 1

    return summary
