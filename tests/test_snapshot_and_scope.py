from decimal import Decimal

from app.analytics.reconciliation import find_divergences
from app.analytics.scope import UNKNOWN_ITEM, item_label, resolve_scope
from app.analytics.snapshot import category_split, is_low_stock, take_snapshot
from conftest import make_stock, make_tx


def test_low_stock_is_strictly_below_threshold():
    assert not is_low_stock(make_stock(quantity=5, min_threshold=5))
    assert is_low_stock(make_stock(quantity=4, min_threshold=5))
    assert not is_low_stock(make_stock(quantity=6, min_threshold=5))


def test_snapshot_values_current_ledger():
    items = [
        make_stock(id="a", name="Cable", price="10", quantity=3, min_threshold=5, category="Wiring"),
        make_stock(id="b", name="Router", price="2500", quantity=2, min_threshold=1, category="Network"),
        make_stock(id="c", name="Clip", price="0.25", quantity=400, min_threshold=100, category="Wiring"),
    ]

    snapshot = take_snapshot(items)

    assert snapshot.current_stock_value == Decimal("5130.00")
    assert snapshot.item_count == 3
    assert snapshot.total_units == 405
    assert [item.id for item in snapshot.low_stock_items] == ["a"]
    assert snapshot.categories == {"Wiring": 2, "Network": 1}
    assert [item.id for item in snapshot.top_items] == ["b", "c", "a"]


def test_category_split_of_empty_ledger():
    assert category_split([]) == {}
    assert take_snapshot([]).current_stock_value == Decimal("0")


def test_warehouse_scope_narrows_items_and_transactions():
    items = [
        make_stock(id="a", warehouse_id="north"),
        make_stock(id="b", warehouse_id="south"),
    ]
    log = [
        make_tx(item_id="a", id="t1"),
        make_tx(item_id="b", id="t2"),
        make_tx(item_id="deleted", id="t3"),
    ]

    north = resolve_scope(items, log, "north")
    assert [i.id for i in north.items] == ["a"]
    assert [t.id for t in north.transactions] == ["t1"]
    assert not north.is_global

    everything = resolve_scope(items, log)
    assert everything.is_global
    assert [t.id for t in everything.transactions] == ["t1", "t2", "t3"]

    assert resolve_scope(items, log, "nowhere").items == []


def test_orphaned_reference_gets_placeholder_label():
    items_by_id = {"a": make_stock(id="a", name="Cable")}

    assert item_label(items_by_id, "a") == "Cable"
    assert item_label(items_by_id, "deleted") == UNKNOWN_ITEM


def test_reconciliation_reports_only_divergent_items():
    items = [
        make_stock(id="a", name="Cable", quantity=7),
        make_stock(id="b", name="Router", quantity=10),
    ]
    log = [
        make_tx(item_id="a", type="IN", quantity=10),
        make_tx(item_id="a", type="OUT", quantity=2),
        make_tx(item_id="a", type="DAMAGE", quantity=1),
        make_tx(item_id="b", type="IN", quantity=12),
    ]

    divergences = find_divergences(items, log)

    assert len(divergences) == 1
    assert divergences[0].item_id == "b"
    assert divergences[0].log_quantity == 12
    assert divergences[0].delta == -2
