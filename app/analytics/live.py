"""Dashboard that recomputes itself whenever the ledger or log changes."""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from loguru import logger

from app.analytics.dashboard import Dashboard, build_dashboard
from app.analytics.date_filters import resolve_window
from app.database import SessionLocal
from app.events import bus
from app.stock.transactions.service import load_snapshot


class LiveDashboard:
    """Subscribes to change events and rebuilds from a fresh snapshot each time.

    Nothing is updated incrementally: ``latest`` is always a pure function of
    the ledger and log as read after the most recent event.
    """

    def __init__(
        self,
        session_factory: Callable = SessionLocal,
        warehouse_id: Optional[str] = None,
        range_name: str = "last_month",
    ) -> None:
        self.session_factory = session_factory
        self.warehouse_id = warehouse_id
        self.range_name = range_name
        self.latest: Optional[Dashboard] = None
        self.version = 0
        self._lock = threading.Lock()

    def refresh(self, event: dict[str, Any] | None = None) -> Dashboard:
        db = self.session_factory()
        try:
            items, transactions = load_snapshot(db)
        finally:
            db.close()

        window = resolve_window(self.range_name)
        dashboard = build_dashboard(items, transactions, window, self.warehouse_id)

        # publishers run in request worker threads
        with self._lock:
            self.latest = dashboard
            self.version += 1
            version = self.version

        if event is not None:
            logger.debug(f"Dashboard v{version} rebuilt after {event['kind']}")
        return dashboard

    def start(self) -> "LiveDashboard":
        bus.subscribe(self.refresh)
        self.refresh()
        return self

    def stop(self) -> None:
        bus.unsubscribe(self.refresh)
