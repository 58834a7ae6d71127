from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import date

from smartstock.config import LedgerPolicy
from smartstock.domain.clock import Clock, iso_instant, resolve_date, system_clock
from smartstock.domain.errors import InsufficientStockError, ReferenceNotFound
from smartstock.domain.models import Sale, parse_quantity
from smartstock.repositories.entity_repository import EntityRepository
from smartstock.repositories.storage import Collection
from smartstock.services.reporting_service import matches_search

log = logging.getLogger("smartstock.ledger")


class SalesService:
    def __init__(self, repo: EntityRepository, policy: LedgerPolicy | None = None, clock: Clock | None = None):
        self.repo = repo
        self.policy = policy or LedgerPolicy()
        self.clock = clock or system_clock

    def record_sale(
        self,
        customer_name: str,
        product_id: str,
        quantity: int,
        sale_date: date | str | None = None,
    ) -> Sale:
        """Append a sale priced at the product's current selling price and take it out of stock."""
        qty = parse_quantity(quantity)
        day = resolve_date(sale_date, self.clock)

        with self.repo.unit_of_work() as uow:
            products = uow.collection(Collection.PRODUCTS)
            idx = next((i for i, p in enumerate(products) if p.id == product_id), None)
            if idx is None:
                raise ReferenceNotFound(f"Product '{product_id}' not found.")
            product = products[idx]

            if self.policy.enforce_stock_floor and qty > product.stock:
                raise InsufficientStockError(f"Not enough stock for {product.name}. Available: {product.stock}")

            ts = iso_instant(self.clock())
            sale = Sale(
                id=uuid.uuid4().hex,
                customer_name=customer_name,
                product_id=product.id,
                product_name=product.name,
                quantity=qty,
                unit_price=product.selling_price,
                total_amount=qty * product.selling_price,
                date=day,
                created_at=ts,
            )
            products[idx] = dataclasses.replace(
                product, stock=product.stock - qty, updated_at=max(ts, product.created_at)
            )

            sales = uow.collection(Collection.SALES)
            sales.append(sale)
            uow.stage(Collection.SALES, sales)
            uow.stage(Collection.PRODUCTS, products)

        log.info(
            "sale_recorded sale_id=%s product_id=%s qty=%s total=%.2f stock_after=%s",
            sale.id,
            product.id,
            qty,
            sale.total_amount,
            product.stock - qty,
        )
        return sale

    def list_sales(self, search: str = "") -> list[Sale]:
        return [s for s in self.repo.sales if matches_search(s, search)]

    def today_revenue(self) -> float:
        today = self.clock().date().isoformat()
        return sum(s.total_amount for s in self.repo.sales if s.date == today)
