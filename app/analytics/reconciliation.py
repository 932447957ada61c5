"""Detects ledger quantities that disagree with the transaction log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


SIGNS = {"IN": 1, "OUT": -1, "DAMAGE": -1}


@dataclass(frozen=True)
class Divergence:
    item_id: str
    name: str
    ledger_quantity: int
    log_quantity: int

    @property
    def delta(self) -> int:
        return self.ledger_quantity - self.log_quantity


def log_quantities(transactions: Iterable) -> dict[str, int]:
    totals: dict[str, int] = {}
    for t in transactions:
        sign = SIGNS.get(t.type, 0)
        totals[t.item_id] = totals.get(t.item_id, 0) + sign * t.quantity
    return totals


def find_divergences(items: Iterable, transactions: Iterable) -> list[Divergence]:
    totals = log_quantities(transactions)
    divergences = []
    for item in items:
        expected = totals.get(item.id, 0)
        if item.quantity != expected:
            divergences.append(
                Divergence(
                    item_id=item.id,
                    name=item.name,
                    ledger_quantity=item.quantity,
                    log_quantity=expected,
                )
            )
    return divergences
