from sqlalchemy import Column, Integer, Numeric, DateTime, String
from datetime import datetime
import uuid

from app.database import Base


TRANSACTION_TYPES = ("IN", "OUT", "DAMAGE")


class StockTransaction(Base):
    __tablename__ = "stock_transactions"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)

    # Weak reference: the item may have been deleted since
    item_id = Column(String(32), nullable=False, index=True)

    type = Column(String(10), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)

    # Selling price for OUT, unit cost for IN and DAMAGE
    price = Column(Numeric(14, 2), nullable=False)

    # Unit cost frozen at the time of an OUT
    cost_price = Column(Numeric(14, 2), nullable=True)
    tax_percent = Column(Numeric(5, 2), nullable=True)

    date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    party_name = Column(String, nullable=True)
    user_email = Column(String, nullable=True)
