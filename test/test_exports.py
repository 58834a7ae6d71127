from pathlib import Path

import pytest
from openpyxl import load_workbook

from conftest import build_app

from smartstock.domain.errors import ValidationError
from smartstock.services.export_service import render_csv


def test_render_csv_quotes_values_and_blanks_missing():
    rows = [
        {"Name": "Cabinet", "Stock": 0, "Note": None},
        {"Name": 'Frame "XL"', "Stock": 12},
    ]

    text = render_csv(rows)

    assert text.split("\n") == [
        "Name,Stock,Note",
        '"Cabinet","0",""',
        '"Frame ""XL""","12",""',
    ]


def test_render_csv_empty_input():
    assert render_csv([]) == ""


def test_export_sales_csv_uses_report_window(tmp_path: Path):
    app = build_app(tmp_path, demo=True)
    app.sales.record_sale("Acme", "1", 2)
    app.sales.record_sale("Old", "1", 1, "2023-01-01")

    path = app.exports.export_csv("sales", tmp_path / "out", period="monthly")

    assert path.name == "sales_report_2024-05-15.csv"
    lines = path.read_text(encoding="utf-8").split("\n")
    assert lines[0] == "Date,Customer,Product,Quantity,Unit Price,Total Amount"
    assert lines[1:] == ['"2024-05-15","Acme","Metal Cabinet","2","200.0","400.0"']


def test_export_purchases_csv_labels_target_type(tmp_path: Path):
    app = build_app(tmp_path, demo=True)
    app.purchases.record_purchase("Metals", "1", True, 3, 2.0)
    app.purchases.record_purchase("Metals", "1", False, 1, 150.0)

    path = app.exports.export_csv("purchases", tmp_path, period="daily")
    body = path.read_text(encoding="utf-8")

    assert '"Steel Sheet","Raw Material"' in body
    assert '"Metal Cabinet","Product"' in body


def test_export_materials_csv_filename_and_empty_export(tmp_path: Path):
    app = build_app(tmp_path, demo=True)

    path = app.exports.export_csv("materials", tmp_path)
    assert path.name == "raw_materials_report_2024-05-15.csv"
    assert path.read_text(encoding="utf-8").startswith("Name,Unit,Current Stock,Min Threshold,Price\n")

    assert app.exports.export_csv("sales", tmp_path) is None


def test_products_rows_include_unit_profit(tmp_path: Path):
    app = build_app(tmp_path, demo=True)

    rows = app.exports.rows_for("products")

    assert rows[0]["Profit per Unit"] == 50.0
    assert rows[1]["Selling Price"] == 45.0


def test_unknown_export_kind(tmp_path: Path):
    app = build_app(tmp_path)

    with pytest.raises(ValidationError):
        app.exports.rows_for("invoices")


def test_excel_report_has_all_sheets(tmp_path: Path):
    app = build_app(tmp_path, demo=True)
    app.sales.record_sale("Acme", "1", 5)
    app.purchases.record_purchase("Metals", "2", True, 10, 4.0)

    path = app.exports.export_report_excel(tmp_path / "reports" / "may.xlsx", period="monthly")

    wb = load_workbook(path)
    assert wb.sheetnames == ["Summary", "Sales", "Purchases", "Low Stock"]
    assert wb["Summary"]["B3"].value == "2024-05-01  ->  2024-05-15"
    assert wb["Summary"]["B6"].value == 1000.0
    assert wb["Sales"]["B2"].value == "Acme"
    assert wb["Purchases"]["D2"].value == "Raw Material"
    low_names = [row[0].value for row in wb["Low Stock"].iter_rows(min_row=2)]
    assert low_names == ["Wire Frame", "Aluminum Wire"]
