from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import date

from smartstock.domain.clock import Clock, iso_instant, resolve_date, system_clock
from smartstock.domain.errors import ReferenceNotFound, ValidationError
from smartstock.domain.models import ItemKind, Purchase, parse_quantity
from smartstock.repositories.entity_repository import ITEM_COLLECTIONS, EntityRepository
from smartstock.repositories.storage import Collection
from smartstock.services.reporting_service import matches_search

log = logging.getLogger("smartstock.ledger")


class PurchaseService:
    def __init__(self, repo: EntityRepository, clock: Clock | None = None):
        self.repo = repo
        self.clock = clock or system_clock

    def record_purchase(
        self,
        supplier_name: str,
        product_id: str,
        is_raw_material: bool,
        quantity: int,
        unit_cost: float,
        purchase_date: date | str | None = None,
    ) -> Purchase:
        """Append a purchase and add its quantity to the raw material or product it targets.

        Only the collection selected by ``is_raw_material`` is touched.
        """
        qty = parse_quantity(quantity)
        try:
            cost = float(unit_cost)
        except (TypeError, ValueError):
            raise ValidationError(f"Unit cost must be a number, got {unit_cost!r}.") from None
        if cost < 0:
            raise ValidationError("Unit cost must be >= 0.")
        day = resolve_date(purchase_date, self.clock)

        kind = ItemKind.RAW_MATERIAL if is_raw_material else ItemKind.PRODUCT
        target_collection = ITEM_COLLECTIONS[kind]

        with self.repo.unit_of_work() as uow:
            items = uow.collection(target_collection)
            idx = next((i for i, it in enumerate(items) if it.id == product_id), None)
            if idx is None:
                raise ReferenceNotFound(f"{kind.label} '{product_id}' not found.")
            target = items[idx]

            ts = iso_instant(self.clock())
            purchase = Purchase(
                id=uuid.uuid4().hex,
                supplier_name=supplier_name,
                product_id=target.id,
                product_name=target.name,
                is_raw_material=bool(is_raw_material),
                quantity=qty,
                unit_cost=cost,
                total_cost=qty * cost,
                date=day,
                created_at=ts,
            )
            items[idx] = dataclasses.replace(
                target, stock=target.stock + qty, updated_at=max(ts, target.created_at)
            )

            purchases = uow.collection(Collection.PURCHASES)
            purchases.append(purchase)
            uow.stage(Collection.PURCHASES, purchases)
            uow.stage(target_collection, items)

        log.info(
            "purchase_recorded purchase_id=%s kind=%s target_id=%s qty=%s total=%.2f stock_after=%s",
            purchase.id,
            kind.value,
            target.id,
            qty,
            purchase.total_cost,
            target.stock + qty,
        )
        return purchase

    def list_purchases(self, search: str = "") -> list[Purchase]:
        return [p for p in self.repo.purchases if matches_search(p, search)]

    def today_cost(self) -> float:
        today = self.clock().date().isoformat()
        return sum(p.total_cost for p in self.repo.purchases if p.date == today)
