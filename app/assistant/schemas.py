from typing import Optional

from app.schemas import CamelModel
from app.stock.inventory.schemas import StockItemOut


class AssistantReply(CamelModel):
    reply: str
    warehouse_id: Optional[str] = None


class AppliedReplyOut(CamelModel):
    message: str
    applied: bool
    item: Optional[StockItemOut] = None
    reason: Optional[str] = None


class InventoryContextOut(CamelModel):
    context: str
