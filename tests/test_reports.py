from datetime import date
from decimal import Decimal

from smartware.core import reports
from smartware.core.reports import AlertType, StockStatus

AS_OF = date(2026, 10, 19)


def test_valuation(stock):
    assert reports.total_inventory_value(stock) == Decimal("32000") * 3 + Decimal("180000") * 40 + Decimal("7000") * 12
    assert reports.total_cost_value(stock) == Decimal("25000") * 3 + Decimal("150000") * 40 + Decimal("5000") * 12
    assert reports.potential_profit(stock) == (
        reports.total_inventory_value(stock) - reports.total_cost_value(stock)
    )


def test_empty_collection_values():
    assert reports.total_inventory_value([]) == 0
    assert reports.low_stock_count([]) == 0
    assert reports.by_category([]) == {}


def test_low_stock_count(stock):
    assert reports.low_stock_count(stock) == 1


def test_by_category(stock):
    assert reports.by_category(stock) == {"Sữa": 15, "Gạo": 40}


def test_expired(stock):
    assert [p.sku for p in reports.expired(stock, AS_OF)] == ["MILK-1"]


def test_expiring_within(stock):
    assert [p.sku for p in reports.expiring_within(stock, AS_OF, 60)] == ["YOG-4"]
    assert reports.expiring_within(stock, AS_OF, 7) == []


def test_expiring_within_includes_boundaries(stock):
    assert [p.sku for p in reports.expiring_within(stock, date(2026, 11, 10), 0)] == ["YOG-4"]
    assert [p.sku for p in reports.expiring_within(stock, date(2026, 10, 11), 30)] == ["YOG-4"]


def test_alerts(stock):
    found = {(a.type, a.product_id) for a in reports.alerts(stock, AS_OF, 60)}

    assert found == {
        (AlertType.LOW_STOCK, "p-milk"),
        (AlertType.EXPIRED, "p-milk"),
        (AlertType.OVER_STOCK, "p-rice"),
        (AlertType.EXPIRING_SOON, "p-yogurt"),
    }


def test_search_by_name_and_sku(stock):
    assert [p.sku for p in reports.search(stock, "sữa", StockStatus.ALL, AS_OF, 60)] == ["MILK-1", "YOG-4"]
    assert [p.sku for p in reports.search(stock, "rice", StockStatus.ALL, AS_OF, 60)] == ["RICE-5"]
    assert len(reports.search(stock, None, StockStatus.ALL, AS_OF, 60)) == 3


def test_search_with_status(stock):
    assert [p.sku for p in reports.search(stock, None, StockStatus.LOW, AS_OF, 60)] == ["MILK-1"]
    assert [p.sku for p in reports.search(stock, None, StockStatus.EXPIRED, AS_OF, 60)] == ["MILK-1"]
    assert [p.sku for p in reports.search(stock, None, StockStatus.EXPIRING, AS_OF, 60)] == ["MILK-1", "YOG-4"]
    assert reports.search(stock, "gạo", StockStatus.LOW, AS_OF, 60) == []


def test_status_counts(stock):
    assert reports.status_counts(stock, AS_OF, 60) == {
        "all": 3,
        "low": 1,
        "expired": 1,
        "expiring": 2,
    }


def test_ledger_reads_match_pure_functions(ledger, stock):
    assert ledger.total_cost_value() == reports.total_cost_value(stock)
    assert ledger.low_stock_count() == 1
    assert ledger.by_category() == {"Sữa": 15, "Gạo": 40}
    assert [p.sku for p in ledger.expired(AS_OF)] == ["MILK-1"]
    assert [p.sku for p in ledger.expiring_within(AS_OF, 60)] == ["YOG-4"]
