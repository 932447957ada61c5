from sqlalchemy.orm import Session
from fastapi import HTTPException
from datetime import date
from typing import Optional

from app.analytics.date_filters import (
    InvalidDateRange,
    filter_transactions,
    resolve_window,
    sort_newest_first,
)
from app.analytics.scope import item_label, resolve_scope
from app.stock.inventory.models import StockItem
from app.stock.transactions.models import StockTransaction, TRANSACTION_TYPES


def window_or_400(range_name: str | None, start_date: date | None, end_date: date | None):
    try:
        return resolve_window(range_name, start_date, end_date)
    except InvalidDateRange as e:
        raise HTTPException(status_code=400, detail=str(e))


def load_snapshot(db: Session, item_id: str | None = None, type: str | None = None):
    """Current ledger plus the (optionally narrowed) log, read in one go."""
    items = db.query(StockItem).all()

    query = db.query(StockTransaction)
    if item_id:
        query = query.filter(StockTransaction.item_id == item_id)
    if type:
        type = type.strip().upper()
        if type not in TRANSACTION_TYPES:
            raise HTTPException(status_code=400, detail=f"Unknown transaction type '{type}'")
        query = query.filter(StockTransaction.type == type)

    return items, query.all()


def with_labels(transactions, items) -> list[dict]:
    items_by_id = {item.id: item for item in items}
    rows = []
    for t in transactions:
        rows.append({
            "id": t.id,
            "item_id": t.item_id,
            "item_name": item_label(items_by_id, t.item_id),
            "type": t.type,
            "quantity": t.quantity,
            "price": t.price,
            "cost_price": t.cost_price,
            "tax_percent": t.tax_percent,
            "date": t.date,
            "party_name": t.party_name,
            "user_email": t.user_email,
        })
    return rows


def list_transactions(
    db: Session,
    warehouse_id: Optional[str] = None,
    range_name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    item_id: Optional[str] = None,
    type: Optional[str] = None,
):
    window = window_or_400(range_name, start_date, end_date)
    items, transactions = load_snapshot(db, item_id=item_id, type=type)

    scope = resolve_scope(items, transactions, warehouse_id)
    filtered = filter_transactions(scope.transactions, window)

    return with_labels(sort_newest_first(filtered), items)


def item_history(db: Session, item_id: str):
    """Works for deleted items too; their history stays in the log."""
    items, transactions = load_snapshot(db, item_id=item_id)
    return with_labels(sort_newest_first(transactions), items)
