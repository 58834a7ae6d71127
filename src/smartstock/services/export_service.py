from __future__ import annotations

import csv
import io
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from smartstock.domain.errors import ValidationError
from smartstock.domain.models import Product, Purchase, RawMaterial, Sale
from smartstock.services.reporting_service import ReportingService, ReportPeriod

log = logging.getLogger(__name__)

Row = dict[str, Any]

EXPORT_FILENAMES = {
    "sales": "sales_report",
    "purchases": "purchases_report",
    "products": "products_report",
    "materials": "raw_materials_report",
}


def sales_rows(sales: Iterable[Sale]) -> list[Row]:
    return [
        {
            "Date": s.date,
            "Customer": s.customer_name,
            "Product": s.product_name,
            "Quantity": s.quantity,
            "Unit Price": s.unit_price,
            "Total Amount": s.total_amount,
        }
        for s in sales
    ]


def purchases_rows(purchases: Iterable[Purchase]) -> list[Row]:
    return [
        {
            "Date": p.date,
            "Supplier": p.supplier_name,
            "Product": p.product_name,
            "Type": p.target_kind.label,
            "Quantity": p.quantity,
            "Unit Cost": p.unit_cost,
            "Total Cost": p.total_cost,
        }
        for p in purchases
    ]


def products_rows(products: Iterable[Product]) -> list[Row]:
    return [
        {
            "Name": p.name,
            "Unit": p.unit,
            "Current Stock": p.stock,
            "Min Threshold": p.min_threshold,
            "Cost": p.cost,
            "Selling Price": p.selling_price,
            "Profit per Unit": p.unit_profit,
        }
        for p in products
    ]


def materials_rows(materials: Iterable[RawMaterial]) -> list[Row]:
    return [
        {
            "Name": m.name,
            "Unit": m.unit,
            "Current Stock": m.stock,
            "Min Threshold": m.min_threshold,
            "Price": m.price,
        }
        for m in materials
    ]


def render_csv(rows: list[Row]) -> str:
    """Header row of field names, then one fully quoted line per record.

    Columns come from the first row; missing or None values render as "".
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    buf = io.StringIO()
    buf.write(",".join(headers))
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="")
    for row in rows:
        buf.write("\n")
        writer.writerow(["" if row.get(h) is None else str(row.get(h)) for h in headers])
    return buf.getvalue()


class ExportService:
    def __init__(self, reporting: ReportingService):
        self.reporting = reporting

    def rows_for(
        self,
        kind: str,
        period: ReportPeriod | str = ReportPeriod.MONTHLY,
        start: date | str | None = None,
        end: date | str | None = None,
        search: str = "",
    ) -> list[Row]:
        repo = self.reporting.repo
        if kind == "sales":
            return sales_rows(self.reporting.sales_for(period, start, end, search))
        if kind == "purchases":
            return purchases_rows(self.reporting.purchases_for(period, start, end, search))
        if kind == "products":
            return products_rows(repo.products)
        if kind == "materials":
            return materials_rows(repo.raw_materials)
        raise ValidationError(f"Unknown export '{kind}'. Expected one of: {', '.join(EXPORT_FILENAMES)}")

    def export_csv(
        self,
        kind: str,
        target_dir: Path | str,
        period: ReportPeriod | str = ReportPeriod.MONTHLY,
        start: date | str | None = None,
        end: date | str | None = None,
        search: str = "",
    ) -> Optional[Path]:
        rows = self.rows_for(kind, period, start, end, search)
        if not rows:
            log.info("csv_export_skipped kind=%s reason=empty", kind)
            return None

        out_dir = Path(target_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / f"{EXPORT_FILENAMES[kind]}_{self.reporting.today().isoformat()}.csv"
        path.write_text(render_csv(rows), encoding="utf-8")
        log.info("csv_exported kind=%s rows=%s path=%s", kind, len(rows), path)
        return path

    def export_report_excel(
        self,
        path: Path | str,
        period: ReportPeriod | str = ReportPeriod.MONTHLY,
        start: date | str | None = None,
        end: date | str | None = None,
        search: str = "",
    ) -> Path:
        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, rows: list[Row], start_row: int = 1):
            headers = list(rows[0].keys()) if rows else []
            if not headers:
                return
            ws.append(headers)
            bold_row(ws, start_row)
            for row in rows:
                ws.append([row.get(h) for h in headers])
            if ws.max_row > start_row:
                ref = f"A{start_row}:{get_column_letter(len(headers))}{ws.max_row}"
                tab = Table(displayName=name, ref=ref)
                tab.tableStyleInfo = TableStyleInfo(
                    name="TableStyleMedium9",
                    showRowStripes=True,
                    showColumnStripes=False,
                )
                ws.add_table(tab)
            ws.freeze_panes = f"A{start_row + 1}"

        window = self.reporting.date_range(period, start, end)
        summary = self.reporting.summary(period, start, end, search)
        sales = self.reporting.sales_for(period, start, end, search)
        purchases = self.reporting.purchases_for(period, start, end, search)
        stock = self.reporting.stock_report()

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Summary"
        ws["A1"].font = Font(bold=True, size=14)
        ws["A3"] = "Window"
        ws["B3"] = f"{window.start}  ->  {window.end}"

        rows = [
            ("Sales count", summary.sales_count, False),
            ("Total sales", summary.total_sales, True),
            ("Purchases count", summary.purchases_count, False),
            ("Total purchases", summary.total_purchases, True),
            ("Net profit", summary.profit, True),
            ("Profit margin %", round(summary.profit_margin, 2), False),
            ("Low stock items", len(stock.low_stock_items), False),
        ]
        for i, (label, val, is_money) in enumerate(rows):
            r = 5 + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = val
            if is_money:
                money(ws[f"B{r}"])

        r = 5 + len(rows) + 1
        ws[f"A{r}"] = "Top products (units)"
        ws[f"A{r}"].font = Font(bold=True)
        for name, qty in summary.top_products:
            r += 1
            ws[f"A{r}"] = name
            ws[f"B{r}"] = qty
        r += 2
        ws[f"A{r}"] = "Top suppliers (cost)"
        ws[f"A{r}"].font = Font(bold=True)
        for name, total in summary.top_suppliers:
            r += 1
            ws[f"A{r}"] = name
            ws[f"B{r}"] = total
            money(ws[f"B{r}"])
        set_widths(ws, {"A": 28, "B": 28})

        # -------- 2) Sales --------
        ws2 = wb.create_sheet("Sales")
        add_table(ws2, "SalesDetail", sales_rows(sales))
        set_widths(ws2, {"A": 12, "B": 24, "C": 28, "D": 10, "E": 14, "F": 16})

        # -------- 3) Purchases --------
        ws3 = wb.create_sheet("Purchases")
        add_table(ws3, "PurchasesDetail", purchases_rows(purchases))
        set_widths(ws3, {"A": 12, "B": 24, "C": 28, "D": 14, "E": 10, "F": 14, "G": 16})

        # -------- 4) Low stock --------
        ws4 = wb.create_sheet("Low Stock")
        add_table(
            ws4,
            "LowStock",
            [
                {
                    "Name": it.name,
                    "Type": it.kind.label,
                    "Stock": it.stock,
                    "Min Threshold": it.min_threshold,
                    "Unit": it.unit,
                }
                for it in stock.low_stock_items
            ],
        )
        set_widths(ws4, {"A": 28, "B": 14, "C": 10, "D": 14, "E": 10})

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        wb.save(target)
        log.info("excel_report_exported path=%s sales=%s purchases=%s", target, len(sales), len(purchases))
        return target
