from typing import Any, Dict, List, Optional
from decimal import Decimal
from datetime import datetime

from app.schemas import CamelModel
from app.stock.inventory.schemas import StockItemOut
from app.stock.transactions.schemas import StockTransactionListOut


# ---------- Period (date filtered) ----------
class PeriodOut(CamelModel):
    range: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class FinancialsOut(CamelModel):
    sales_revenue: Decimal
    cost_of_goods_sold: Decimal
    net_earnings: Decimal
    damage_loss: Decimal
    tax_collected: Decimal
    # OUT records whose cost came from the current ledger price
    estimated_cost_count: int
    cost_is_estimated: bool


class ActivityTotalsOut(CamelModel):
    quantity: int
    value: Decimal


class ActivitySummaryOut(CamelModel):
    received: ActivityTotalsOut
    dispatched: ActivityTotalsOut
    damaged: ActivityTotalsOut
    count: int


# ---------- Snapshot (never date filtered) ----------
class TopItemOut(CamelModel):
    id: str
    name: str
    value: Decimal


class SnapshotOut(CamelModel):
    current_stock_value: Decimal
    item_count: int
    total_units: int
    low_stock_count: int
    low_stock_items: List[StockItemOut]
    categories: Dict[str, int]
    top_items: List[TopItemOut]


class DashboardOut(CamelModel):
    warehouse_id: Optional[str] = None
    period: PeriodOut
    financials: FinancialsOut
    activity: ActivitySummaryOut
    snapshot: SnapshotOut


class ActivityReportOut(CamelModel):
    period: PeriodOut
    summary: ActivitySummaryOut
    transactions: List[StockTransactionListOut]


class DivergenceOut(CamelModel):
    item_id: str
    name: str
    ledger_quantity: int
    log_quantity: int
    delta: int


class EventOut(CamelModel):
    kind: str
    payload: Dict[str, Any]
    timestamp: datetime
