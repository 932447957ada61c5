from pydantic import Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.schemas import CamelModel


class StockTransactionOut(CamelModel):
    id: str
    item_id: str
    type: str
    quantity: int
    price: Decimal
    cost_price: Optional[Decimal] = None
    tax_percent: Optional[Decimal] = None
    date: datetime
    party_name: Optional[str] = None
    user_email: Optional[str] = None


class StockTransactionListOut(StockTransactionOut):
    # "Unknown Item" when the item has been deleted
    item_name: str = Field(default="Unknown Item")
