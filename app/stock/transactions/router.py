from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.database import get_db
from app.stock.transactions import schemas, service

router = APIRouter()


@router.get("/", response_model=List[schemas.StockTransactionListOut])
def list_transactions(
    warehouse_id: Optional[str] = None,
    range: str = Query("all", description="today, yesterday, last_3_days, last_week, last_month, last_year, custom or all"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    item_id: Optional[str] = None,
    type: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Transaction log, newest first.
    A custom range needs both start_date and end_date.
    """
    return service.list_transactions(
        db,
        warehouse_id=warehouse_id,
        range_name=range,
        start_date=start_date,
        end_date=end_date,
        item_id=item_id,
        type=type,
    )


@router.get("/item/{item_id}", response_model=List[schemas.StockTransactionListOut])
def item_history(item_id: str, db: Session = Depends(get_db)):
    return service.item_history(db, item_id)
