from pydantic import ConfigDict, Field, computed_field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from app.schemas import CamelModel
from app.stock.transactions.schemas import StockTransactionOut


# -------------------------------
# Base
# -------------------------------
class StockItemBase(CamelModel):
    name: str
    category: str = "General"
    price: Decimal = Field(default=Decimal("0"), ge=0)  # unit cost
    min_threshold: Optional[int] = None
    description: Optional[str] = None
    source: Optional[str] = None


# -------------------------------
# Create
# -------------------------------
class StockItemCreate(StockItemBase):
    warehouse_id: str
    quantity: int = 0


# -------------------------------
# Update (quantity only moves through transactions)
# -------------------------------
class StockItemUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    min_threshold: Optional[int] = None
    description: Optional[str] = None
    source: Optional[str] = None


# -------------------------------
# Output
# -------------------------------
class StockItemOut(CamelModel):
    id: str
    warehouse_id: str
    name: str
    category: str
    quantity: int
    price: Decimal
    min_threshold: int
    last_updated: Optional[datetime] = None
    description: Optional[str] = None
    source: Optional[str] = None

    @computed_field(alias="lowStock")
    @property
    def low_stock(self) -> bool:
        return self.quantity < self.min_threshold


# -------------------------------
# Movements
# -------------------------------
class ReceiveRequest(CamelModel):
    quantity: int
    cost: Optional[Decimal] = Field(default=None, ge=0)
    source: Optional[str] = None


class DispatchRequest(CamelModel):
    quantity: int
    price: Decimal = Field(ge=0)  # selling price
    tax_percent: Optional[Decimal] = Field(default=None, ge=0)
    customer: str


class DamageRequest(CamelModel):
    quantity: int
    reason: str


class MovementOut(CamelModel):
    item: StockItemOut
    transaction: StockTransactionOut


# -------------------------------
# Bulk dispatch (one invoice, many items)
# -------------------------------
class BulkDispatchLine(CamelModel):
    item_id: str
    quantity: int
    price: Decimal = Field(ge=0)
    tax_percent: Optional[Decimal] = Field(default=None, ge=0)


class BulkDispatchRequest(CamelModel):
    customer: str
    lines: List[BulkDispatchLine]


class BulkDispatchOut(CamelModel):
    customer: str
    transactions: List[StockTransactionOut]
    subtotal: Decimal
    total_tax: Decimal
    grand_total: Decimal


class ImportResult(CamelModel):
    message: str
    imported: int
    skipped: int
