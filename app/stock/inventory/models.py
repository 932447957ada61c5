from sqlalchemy import Column, Integer, Numeric, DateTime, String, Text
from datetime import datetime
import uuid

from app.database import Base


class StockItem(Base):
    __tablename__ = "stock_items"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)

    # No FK: items survive the deletion of their warehouse
    warehouse_id = Column(String(32), nullable=False, index=True)

    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="General", index=True)

    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(14, 2), nullable=False, default=0)  # unit cost
    min_threshold = Column(Integer, nullable=False, default=5)

    description = Column(Text, nullable=True)
    source = Column(String, nullable=True)

    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
