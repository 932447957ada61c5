from sqlalchemy import Column, String, DateTime
from datetime import datetime
import uuid

from app.database import Base


class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String, nullable=False)
    location = Column(String, nullable=True)
    type = Column(String, nullable=False, default="General")

    created_at = Column(DateTime, default=datetime.utcnow)
