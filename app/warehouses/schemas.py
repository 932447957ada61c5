from typing import Optional
from datetime import datetime

from app.schemas import CamelModel


# ================= CREATE =================
class WarehouseCreate(CamelModel):
    name: str
    location: Optional[str] = None
    type: str = "General"


# ================= RESPONSE =================
class WarehouseOut(CamelModel):
    id: str
    name: str
    location: Optional[str] = None
    type: str
    created_at: Optional[datetime] = None


class WarehouseListOut(WarehouseOut):
    item_count: int = 0
