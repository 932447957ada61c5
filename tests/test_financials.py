from decimal import Decimal

from app.analytics.financials import summarize_activity, summarize_financials
from conftest import make_stock, make_tx


def test_sale_revenue_cost_and_profit():
    item = make_stock(price="100", quantity=15)
    sale = make_tx(type="OUT", quantity=5, price="120", cost_price="100", tax_percent="18")

    summary = summarize_financials([sale], [item])

    assert summary.sales_revenue == Decimal("600")
    assert summary.cost_of_goods_sold == Decimal("500")
    assert summary.net_earnings == Decimal("100")
    assert summary.tax_collected == Decimal("108")
    assert not summary.cost_is_estimated


def test_damage_loss_uses_unit_cost():
    damage = make_tx(type="DAMAGE", quantity=2, price="50", cost_price="50")

    summary = summarize_financials([damage], [make_stock(price="50")])

    assert summary.damage_loss == Decimal("100")
    assert summary.sales_revenue == Decimal("0")
    assert summary.net_earnings == Decimal("0")


def test_missing_cost_falls_back_to_current_price_and_is_flagged():
    item = make_stock(id="item-1", price="80")
    legacy_sale = make_tx(item_id="item-1", type="OUT", quantity=2, price="100")
    orphan_sale = make_tx(item_id="gone", type="OUT", quantity=1, price="40")

    summary = summarize_financials([legacy_sale, orphan_sale], [item])

    assert summary.sales_revenue == Decimal("240")
    assert summary.cost_of_goods_sold == Decimal("160")
    assert summary.estimated_cost_count == 2
    assert summary.cost_is_estimated


def test_zero_cost_is_not_treated_as_missing():
    sale = make_tx(type="OUT", quantity=3, price="10", cost_price="0")

    summary = summarize_financials([sale], [make_stock(price="99")])

    assert summary.cost_of_goods_sold == Decimal("0")
    assert summary.estimated_cost_count == 0


def test_many_small_amounts_sum_exactly():
    sales = [make_tx(type="OUT", quantity=1, price="0.10", cost_price="0.05") for _ in range(1000)]

    summary = summarize_financials(sales, [])

    assert summary.sales_revenue == Decimal("100.00")
    assert summary.net_earnings == Decimal("50.00")


def test_receipts_do_not_affect_profit():
    receipt = make_tx(type="IN", quantity=10, price="70", cost_price="70")

    summary = summarize_financials([receipt], [make_stock()])

    assert summary.sales_revenue == summary.cost_of_goods_sold == summary.damage_loss == Decimal("0")


def test_activity_summary_per_type():
    log = [
        make_tx(type="IN", quantity=10, price="70"),
        make_tx(type="IN", quantity=5, price="70"),
        make_tx(type="OUT", quantity=4, price="120"),
        make_tx(type="DAMAGE", quantity=1, price="70"),
    ]

    summary = summarize_activity(log)

    assert (summary.received.quantity, summary.received.value) == (15, Decimal("1050"))
    assert (summary.dispatched.quantity, summary.dispatched.value) == (4, Decimal("480"))
    assert (summary.damaged.quantity, summary.damaged.value) == (1, Decimal("70"))
    assert summary.count == 4
