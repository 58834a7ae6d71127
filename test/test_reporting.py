from datetime import date
from pathlib import Path

import pytest

from conftest import build_app

from smartstock.domain.errors import ValidationError
from smartstock.domain.models import DateRange, Product, Purchase, RawMaterial, Sale
from smartstock.services.reporting_service import (
    ReportPeriod,
    dashboard_stats,
    date_range,
    filter_by_range,
    low_stock,
    summarize,
    top_n,
)

TS = "2024-05-01T00:00:00.000Z"


def _material(id_, stock, threshold):
    return RawMaterial(id_, f"M{id_}", "kg", 1.0, stock, threshold, TS, TS)


def _product(id_, stock, threshold):
    return Product(id_, f"P{id_}", "piece", 1.0, 2.0, stock, threshold, TS, TS)


def _sale(product, qty, price, day, customer="C"):
    return Sale(f"s-{product}-{day}-{qty}", customer, product, product, qty, price, qty * price, day, TS)


def _purchase(supplier, total, day, product="X"):
    return Purchase(f"p-{supplier}-{day}-{total}", supplier, product, product, False, 1, total, total, day, TS)


def test_dashboard_stats_today_and_all_time():
    today = date(2024, 5, 15)
    sales = [_sale("A", 2, 100.0, "2024-05-15"), _sale("B", 1, 50.0, "2024-05-01")]
    purchases = [_purchase("S1", 30.0, "2024-05-15"), _purchase("S2", 70.0, "2024-04-30")]
    materials = [_material("1", 5, 10), _material("2", 50, 10)]
    products = [_product("1", 10, 10)]

    stats = dashboard_stats(materials, products, sales, purchases, today)

    assert stats.total_products == 1
    assert stats.total_raw_materials == 2
    assert stats.low_stock_items == 2
    assert stats.today_sales == 200.0
    assert stats.today_purchases == 30.0
    assert stats.total_revenue == 250.0
    assert stats.total_costs == 100.0
    assert stats.profit == stats.total_revenue - stats.total_costs


def test_dashboard_profit_can_be_negative_and_empty_repo_is_zero():
    today = date(2024, 5, 15)
    empty = dashboard_stats([], [], [], [], today)
    assert empty.profit == 0
    assert empty.low_stock_items == 0

    stats = dashboard_stats([], [], [], [_purchase("S", 10.0, "2024-05-15")], today)
    assert stats.profit == -10.0


def test_low_stock_boundary_and_ordering():
    materials = [_material("m-eq", 10, 10), _material("m-above", 11, 10)]
    products = [_product("p-below", 0, 3), _product("p-above", 4, 3)]

    result = low_stock(materials, products)

    assert [it.id for it in result] == ["m-eq", "p-below"]


def test_date_range_daily_weekly_monthly():
    ref = date(2024, 3, 5)

    assert date_range("daily", ref) == DateRange("2024-03-05", "2024-03-05")
    assert date_range(ReportPeriod.WEEKLY, ref) == DateRange("2024-02-27", "2024-03-05")
    assert date_range("monthly", ref) == DateRange("2024-03-01", "2024-03-05")


def test_date_range_custom_defaults_to_today():
    ref = date(2024, 3, 5)

    assert date_range("custom", ref) == DateRange("2024-03-05", "2024-03-05")
    assert date_range("custom", ref, start="2024-01-01") == DateRange("2024-01-01", "2024-03-05")
    assert date_range("custom", ref, start=date(2023, 12, 1), end="2023-12-31") == DateRange(
        "2023-12-01", "2023-12-31"
    )


def test_date_range_rejects_unknown_period():
    with pytest.raises(ValidationError):
        date_range("yearly", date(2024, 1, 1))


def test_filter_by_range_is_inclusive_and_searches_text():
    window = DateRange("2024-05-01", "2024-05-31")
    sales = [
        _sale("Cabinet", 1, 1.0, "2024-04-30", customer="Ann"),
        _sale("Cabinet", 1, 1.0, "2024-05-01", customer="Ann"),
        _sale("Frame", 1, 1.0, "2024-05-31", customer="Bob"),
        _sale("Frame", 1, 1.0, "2024-06-01", customer="Bob"),
    ]

    assert [s.date for s in filter_by_range(sales, window)] == ["2024-05-01", "2024-05-31"]
    assert [s.customer_name for s in filter_by_range(sales, window, "ann")] == ["Ann"]
    assert [s.product_name for s in filter_by_range(sales, window, "FRAME")] == ["Frame"]
    assert filter_by_range(sales, window, "zzz") == []


def test_top_n_keeps_first_seen_group_on_ties():
    sales = [
        {"product": "A", "qty": 3},
        {"product": "B", "qty": 5},
        {"product": "A", "qty": 2},
    ]

    result = top_n(sales, lambda s: s["product"], lambda s: s["qty"], 5)

    assert result == [("A", 5), ("B", 5)]


def test_top_n_sorts_descending_and_truncates():
    rows = [("x", 1), ("y", 9), ("z", 4), ("x", 1)]

    assert top_n(rows, lambda r: r[0], lambda r: r[1], 2) == [("y", 9), ("z", 4)]
    assert top_n(rows, lambda r: r[0], lambda r: r[1], 0) == []


def test_summarize_totals_margin_and_top_lists():
    sales = [_sale("Cabinet", 2, 100.0, "2024-05-02"), _sale("Frame", 5, 10.0, "2024-05-03")]
    purchases = [_purchase("Metals", 60.0, "2024-05-02"), _purchase("Wires", 90.0, "2024-05-03")]

    summary = summarize(sales, purchases)

    assert summary.total_sales == 250.0
    assert summary.total_purchases == 150.0
    assert summary.profit == 100.0
    assert summary.profit_margin == pytest.approx(40.0)
    assert summary.top_products == [("Frame", 5), ("Cabinet", 2)]
    assert summary.top_suppliers == [("Wires", 90.0), ("Metals", 60.0)]


def test_summarize_margin_is_zero_without_sales():
    summary = summarize([], [_purchase("S", 10.0, "2024-05-01")])

    assert summary.profit == -10.0
    assert summary.profit_margin == 0.0


def test_reporting_service_uses_repository_and_clock(tmp_path: Path):
    app = build_app(tmp_path, demo=True)
    app.sales.record_sale("Acme", "1", 5)
    app.sales.record_sale("Old", "1", 1, "2024-03-01")
    app.purchases.record_purchase("Metals", "2", True, 40, 4.0)

    stats = app.reporting.dashboard()
    assert stats.today_sales == 1000.0
    assert stats.today_purchases == 160.0
    assert stats.total_revenue == 1200.0
    # Steel Sheet ok, Aluminum Wire restocked to 55, Cabinet at 19, Wire Frame 8 <= 15
    assert stats.low_stock_items == 1

    monthly = app.reporting.summary("monthly")
    assert monthly.sales_count == 1
    assert monthly.top_products == [("Metal Cabinet", 5)]

    custom = app.reporting.summary("custom", start="2024-01-01")
    assert custom.sales_count == 2


def test_stock_report_lists_products_before_materials(tmp_path: Path):
    app = build_app(tmp_path, demo=True)

    report = app.reporting.stock_report()

    assert [p.name for p in report.low_stock_products] == ["Wire Frame"]
    assert [m.name for m in report.low_stock_materials] == ["Aluminum Wire"]
    assert [it.name for it in report.low_stock_items] == ["Wire Frame", "Aluminum Wire"]
    assert [it.name for it in app.reporting.low_stock_items()] == ["Aluminum Wire", "Wire Frame"]
