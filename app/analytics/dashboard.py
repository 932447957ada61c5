"""Composes period and snapshot metrics for one scope and date window."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from app.analytics.date_filters import DateWindow, filter_transactions
from app.analytics.financials import (
    ActivitySummary,
    FinancialSummary,
    summarize_activity,
    summarize_financials,
)
from app.analytics.scope import resolve_scope
from app.analytics.snapshot import StockSnapshot, take_snapshot


@dataclass
class Dashboard:
    warehouse_id: Optional[str]
    window: DateWindow
    financials: FinancialSummary
    activity: ActivitySummary
    snapshot: StockSnapshot


def build_dashboard(
    items: Iterable,
    transactions: Iterable,
    window: DateWindow,
    warehouse_id: Optional[str] = None,
) -> Dashboard:
    scope = resolve_scope(items, transactions, warehouse_id)
    period = filter_transactions(scope.transactions, window)

    return Dashboard(
        warehouse_id=warehouse_id,
        window=window,
        financials=summarize_financials(period, scope.items),
        activity=summarize_activity(period),
        snapshot=take_snapshot(scope.items),
    )
