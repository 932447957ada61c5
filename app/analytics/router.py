from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from app.database import get_db
from app.analytics import schemas, service
from app.events import bus

router = APIRouter()


@router.get("/dashboard", response_model=schemas.DashboardOut)
def get_dashboard(
    warehouse_id: Optional[str] = None,
    range: str = Query("last_month", description="Period for revenue, profit and loss"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """
    Period metrics (filtered by range) and ledger snapshot metrics
    (never filtered) for one warehouse or the global view.
    """
    return service.get_dashboard(db, warehouse_id, range, start_date, end_date)


@router.get("/dashboard/live", response_model=schemas.DashboardOut)
def get_live_dashboard(request: Request):
    live = getattr(request.app.state, "live_dashboard", None)
    if live is None or live.latest is None:
        raise HTTPException(status_code=503, detail="Live dashboard is not running")
    return service.dashboard_to_dict(live.latest)


@router.get("/activity", response_model=schemas.ActivityReportOut)
def get_activity(
    warehouse_id: Optional[str] = None,
    range: str = Query("today"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return service.get_activity_report(db, warehouse_id, range, start_date, end_date)


@router.get("/reconciliation", response_model=List[schemas.DivergenceOut])
def get_reconciliation(
    warehouse_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Items whose ledger quantity disagrees with IN - OUT - DAMAGE in the log."""
    return service.get_reconciliation(db, warehouse_id)


@router.get("/events", response_model=List[schemas.EventOut])
def get_recent_events(limit: int = 50):
    return bus.get_recent_events(limit)
