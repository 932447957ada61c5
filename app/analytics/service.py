from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from app.analytics.dashboard import Dashboard, build_dashboard
from app.analytics.date_filters import filter_transactions, sort_newest_first
from app.analytics.financials import summarize_activity
from app.analytics.reconciliation import find_divergences
from app.analytics.scope import resolve_scope
from app.analytics.snapshot import stock_value
from app.stock.transactions.service import load_snapshot, window_or_400, with_labels


def _period(window) -> dict:
    return {"range": window.name, "start": window.start, "end": window.end}


def _activity(summary) -> dict:
    return {
        "received": {"quantity": summary.received.quantity, "value": summary.received.value},
        "dispatched": {"quantity": summary.dispatched.quantity, "value": summary.dispatched.value},
        "damaged": {"quantity": summary.damaged.quantity, "value": summary.damaged.value},
        "count": summary.count,
    }


def dashboard_to_dict(dashboard: Dashboard) -> dict:
    financials = dashboard.financials
    snapshot = dashboard.snapshot

    return {
        "warehouse_id": dashboard.warehouse_id,
        "period": _period(dashboard.window),
        "financials": {
            "sales_revenue": financials.sales_revenue,
            "cost_of_goods_sold": financials.cost_of_goods_sold,
            "net_earnings": financials.net_earnings,
            "damage_loss": financials.damage_loss,
            "tax_collected": financials.tax_collected,
            "estimated_cost_count": financials.estimated_cost_count,
            "cost_is_estimated": financials.cost_is_estimated,
        },
        "activity": _activity(dashboard.activity),
        "snapshot": {
            "current_stock_value": snapshot.current_stock_value,
            "item_count": snapshot.item_count,
            "total_units": snapshot.total_units,
            "low_stock_count": len(snapshot.low_stock_items),
            "low_stock_items": snapshot.low_stock_items,
            "categories": snapshot.categories,
            "top_items": [
                {"id": item.id, "name": item.name, "value": stock_value(item)}
                for item in snapshot.top_items
            ],
        },
    }


def get_dashboard(
    db: Session,
    warehouse_id: Optional[str] = None,
    range_name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    window = window_or_400(range_name, start_date, end_date)
    items, transactions = load_snapshot(db)
    return dashboard_to_dict(build_dashboard(items, transactions, window, warehouse_id))


def get_activity_report(
    db: Session,
    warehouse_id: Optional[str] = None,
    range_name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    window = window_or_400(range_name, start_date, end_date)
    items, transactions = load_snapshot(db)

    scope = resolve_scope(items, transactions, warehouse_id)
    filtered = filter_transactions(scope.transactions, window)

    return {
        "period": _period(window),
        "summary": _activity(summarize_activity(filtered)),
        "transactions": with_labels(sort_newest_first(filtered), items),
    }


def get_reconciliation(db: Session, warehouse_id: Optional[str] = None):
    items, transactions = load_snapshot(db)
    scope = resolve_scope(items, transactions, warehouse_id)

    return [
        {
            "item_id": d.item_id,
            "name": d.name,
            "ledger_quantity": d.ledger_quantity,
            "log_quantity": d.log_quantity,
            "delta": d.delta,
        }
        for d in find_divergences(scope.items, scope.transactions)
    ]
