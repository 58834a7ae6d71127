from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Callable, Hashable, Iterable, Optional, Sequence, TypeVar

from smartstock.config import LedgerPolicy
from smartstock.domain.clock import Clock, iso_date, system_clock
from smartstock.domain.errors import ValidationError
from smartstock.domain.models import (
    DashboardStats,
    DateRange,
    Product,
    Purchase,
    RawMaterial,
    ReportSummary,
    Sale,
    StockItem,
    StockReport,
)
from smartstock.repositories.entity_repository import EntityRepository

T = TypeVar("T")


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


def dashboard_stats(
    materials: Sequence[RawMaterial],
    products: Sequence[Product],
    sales: Sequence[Sale],
    purchases: Sequence[Purchase],
    today: date,
) -> DashboardStats:
    today_iso = today.isoformat()
    total_revenue = sum(s.total_amount for s in sales)
    total_costs = sum(p.total_cost for p in purchases)
    return DashboardStats(
        total_products=len(products),
        total_raw_materials=len(materials),
        low_stock_items=len(low_stock(materials, products)),
        today_sales=sum(s.total_amount for s in sales if s.date == today_iso),
        today_purchases=sum(p.total_cost for p in purchases if p.date == today_iso),
        total_revenue=total_revenue,
        total_costs=total_costs,
        profit=total_revenue - total_costs,
    )


def date_range(
    period: ReportPeriod | str,
    today: date,
    start: date | str | None = None,
    end: date | str | None = None,
) -> DateRange:
    """Inclusive ISO date window for a report period.

    weekly reaches back seven calendar days, so it spans eight dates.
    custom bounds default to today when left empty.
    """
    try:
        period = ReportPeriod(period)
    except ValueError:
        raise ValidationError(f"Unknown report period '{period}'.") from None

    today_iso = today.isoformat()
    if period is ReportPeriod.DAILY:
        return DateRange(today_iso, today_iso)
    if period is ReportPeriod.WEEKLY:
        return DateRange((today - timedelta(days=7)).isoformat(), today_iso)
    if period is ReportPeriod.MONTHLY:
        return DateRange(today.replace(day=1).isoformat(), today_iso)

    try:
        start_iso = iso_date(start) if start else today_iso
        end_iso = iso_date(end) if end else today_iso
    except ValueError as exc:
        raise ValidationError(f"Invalid custom range: {exc}") from exc
    return DateRange(start_iso, end_iso)


def matches_search(record, search: str) -> bool:
    term = (search or "").strip().lower()
    if not term:
        return True
    return any(term in str(getattr(record, f)).lower() for f in record.search_fields)


def filter_by_range(records: Iterable[T], window: DateRange, search: str = "") -> list[T]:
    return [r for r in records if window.contains(r.date) and matches_search(r, search)]


def top_n(
    records: Iterable[T],
    key_fn: Callable[[T], Hashable],
    value_fn: Callable[[T], float],
    n: int,
) -> list[tuple[Hashable, float]]:
    """Sum ``value_fn`` per ``key_fn`` group and return the ``n`` largest.

    Equal totals keep the order in which their groups first appeared.
    """
    totals: dict[Hashable, float] = {}
    for r in records:
        key = key_fn(r)
        totals[key] = totals.get(key, 0) + value_fn(r)
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return ranked[: max(n, 0)]


def low_stock(materials: Iterable[RawMaterial], products: Iterable[Product]) -> list[StockItem]:
    return [m for m in materials if m.is_low_stock] + [p for p in products if p.is_low_stock]


def summarize(sales: Sequence[Sale], purchases: Sequence[Purchase], n: int = 5) -> ReportSummary:
    total_sales = sum(s.total_amount for s in sales)
    total_purchases = sum(p.total_cost for p in purchases)
    profit = total_sales - total_purchases
    return ReportSummary(
        total_sales=total_sales,
        total_purchases=total_purchases,
        profit=profit,
        profit_margin=(profit / total_sales) * 100 if total_sales > 0 else 0.0,
        sales_count=len(sales),
        purchases_count=len(purchases),
        top_products=top_n(sales, lambda s: s.product_name, lambda s: s.quantity, n),
        top_suppliers=top_n(purchases, lambda p: p.supplier_name, lambda p: p.total_cost, n),
    )


def stock_report(materials: Sequence[RawMaterial], products: Sequence[Product]) -> StockReport:
    low_products = [p for p in products if p.is_low_stock]
    low_materials = [m for m in materials if m.is_low_stock]
    return StockReport(
        low_stock_products=low_products,
        low_stock_materials=low_materials,
        low_stock_items=[*low_products, *low_materials],
    )


class ReportingService:
    def __init__(self, repo: EntityRepository, policy: LedgerPolicy | None = None, clock: Clock | None = None):
        self.repo = repo
        self.policy = policy or LedgerPolicy()
        self.clock = clock or system_clock

    def today(self) -> date:
        return self.clock().date()

    def dashboard(self) -> DashboardStats:
        snap = self.repo.snapshot()
        return dashboard_stats(snap.raw_materials, snap.products, snap.sales, snap.purchases, self.today())

    def date_range(
        self, period: ReportPeriod | str, start: date | str | None = None, end: date | str | None = None
    ) -> DateRange:
        return date_range(period, self.today(), start, end)

    def sales_for(
        self,
        period: ReportPeriod | str = ReportPeriod.MONTHLY,
        start: date | str | None = None,
        end: date | str | None = None,
        search: str = "",
    ) -> list[Sale]:
        return filter_by_range(self.repo.sales, self.date_range(period, start, end), search)

    def purchases_for(
        self,
        period: ReportPeriod | str = ReportPeriod.MONTHLY,
        start: date | str | None = None,
        end: date | str | None = None,
        search: str = "",
    ) -> list[Purchase]:
        return filter_by_range(self.repo.purchases, self.date_range(period, start, end), search)

    def summary(
        self,
        period: ReportPeriod | str = ReportPeriod.MONTHLY,
        start: date | str | None = None,
        end: date | str | None = None,
        search: str = "",
        n: Optional[int] = None,
    ) -> ReportSummary:
        return summarize(
            self.sales_for(period, start, end, search),
            self.purchases_for(period, start, end, search),
            self.policy.top_n if n is None else n,
        )

    def low_stock_items(self) -> list[StockItem]:
        return low_stock(self.repo.raw_materials, self.repo.products)

    def stock_report(self) -> StockReport:
        return stock_report(self.repo.raw_materials, self.repo.products)
