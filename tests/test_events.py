from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from types import SimpleNamespace

from app.analytics import live as live_module
from app.analytics.live import LiveDashboard
from app.events import bus
from app.stock.inventory import schemas, service
from app.warehouses import schemas as warehouse_schemas
from app.warehouses import service as warehouse_service


def test_publish_reaches_subscribers_and_is_buffered():
    received = []
    bus.subscribe(received.append)

    bus.publish(bus.STOCK_RECEIVED, {"item_id": "a"})

    assert [event["kind"] for event in received] == [bus.STOCK_RECEIVED]
    assert bus.get_recent_events()[-1]["payload"] == {"item_id": "a"}
    assert bus.get_recent_events(0) == []


def test_failing_subscriber_does_not_block_others():
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    bus.publish(bus.ITEM_DELETED)

    assert len(received) == 1


def test_unsubscribe_stops_delivery():
    received = []
    bus.subscribe(received.append)
    bus.unsubscribe(received.append)

    bus.publish(bus.ITEM_CREATED)

    assert received == []


def test_live_dashboard_rebuilds_after_each_mutation(db, session_factory):
    live = LiveDashboard(session_factory=session_factory, range_name="today").start()
    assert live.version == 1
    assert live.latest.snapshot.item_count == 0

    warehouse = warehouse_service.create_warehouse(
        db, warehouse_schemas.WarehouseCreate(name="Main")
    )
    item = service.create_item(
        db,
        schemas.StockItemCreate(
            warehouse_id=warehouse.id, name="Lamp", quantity=10, price=Decimal("40")
        ),
    )
    service.dispatch(db, item.id, 4, price=Decimal("60"), customer="Asha")

    assert live.version == 4
    assert live.latest.snapshot.current_stock_value == Decimal("240")
    assert live.latest.financials.sales_revenue == Decimal("240")
    assert live.latest.financials.net_earnings == Decimal("80")

    live.stop()
    service.receive(db, item.id, 1)
    assert live.version == 4


def test_live_dashboard_counts_concurrent_refreshes(monkeypatch):
    monkeypatch.setattr(live_module, "load_snapshot", lambda db: ([], []))
    live = LiveDashboard(session_factory=lambda: SimpleNamespace(close=lambda: None))

    with ThreadPoolExecutor(max_workers=8) as pool:
        for _ in range(400):
            pool.submit(live.refresh, {"kind": bus.STOCK_DISPATCHED})

    assert live.version == 400
    assert live.latest.snapshot.item_count == 0
