from __future__ import annotations

import dataclasses
import logging
import uuid
from enum import Enum
from typing import Any, Optional

from smartstock.config import LedgerPolicy
from smartstock.domain.clock import Clock, iso_instant, system_clock
from smartstock.domain.errors import ValidationError
from smartstock.domain.models import ItemKind, Product, RawMaterial, StockItem, User
from smartstock.repositories.entity_repository import ITEM_COLLECTIONS, EntityRepository
from smartstock.services.auth_service import AuthService

log = logging.getLogger("smartstock.ledger")

_IMMUTABLE_FIELDS = {"id", "created_at", "updated_at", "kind"}


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    DENIED = "denied"
    NOT_FOUND = "not_found"


def _editable_fields(kind: ItemKind) -> set[str]:
    model = RawMaterial if kind is ItemKind.RAW_MATERIAL else Product
    return {f.name for f in dataclasses.fields(model)} - _IMMUTABLE_FIELDS


def _matches(item: StockItem, search: str) -> bool:
    term = (search or "").strip().lower()
    return not term or term in item.name.lower()


class InventoryService:
    def __init__(
        self,
        repo: EntityRepository,
        auth: AuthService,
        policy: LedgerPolicy | None = None,
        clock: Clock | None = None,
    ):
        self.repo = repo
        self.auth = auth
        self.policy = policy or LedgerPolicy()
        self.clock = clock or system_clock

    def list_raw_materials(self, search: str = "") -> list[RawMaterial]:
        return [m for m in self.repo.raw_materials if _matches(m, search)]

    def list_products(self, search: str = "") -> list[Product]:
        return [p for p in self.repo.products if _matches(p, search)]

    def create_raw_material(
        self, name: str, unit: str, price: float, stock: int, min_threshold: int
    ) -> RawMaterial:
        ts = iso_instant(self.clock())
        material = RawMaterial(
            id=uuid.uuid4().hex,
            name=name,
            unit=unit,
            price=price,
            stock=stock,
            min_threshold=min_threshold,
            created_at=ts,
            updated_at=ts,
        )
        self._append(material)
        return material

    def create_product(
        self, name: str, unit: str, cost: float, selling_price: float, stock: int, min_threshold: int
    ) -> Product:
        ts = iso_instant(self.clock())
        product = Product(
            id=uuid.uuid4().hex,
            name=name,
            unit=unit,
            cost=cost,
            selling_price=selling_price,
            stock=stock,
            min_threshold=min_threshold,
            created_at=ts,
            updated_at=ts,
        )
        self._append(product)
        return product

    def _append(self, item: StockItem) -> None:
        collection = ITEM_COLLECTIONS[item.kind]
        with self.repo.unit_of_work() as uow:
            items = uow.collection(collection)
            items.append(item)
            uow.stage(collection, items)
        log.info("item_created kind=%s id=%s name=%s stock=%s", item.kind.value, item.id, item.name, item.stock)

    def update_item(self, kind: ItemKind, item_id: str, **changes: Any) -> Optional[StockItem]:
        """Merge ``changes`` into the matching item and refresh ``updated_at``.

        An unknown id is a no-op and returns None.
        """
        allowed = _editable_fields(kind)
        unknown = sorted(set(changes) - allowed)
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(unknown)}")

        existing = self.repo.get_item(kind, item_id)
        if existing is None:
            log.warning("item_update_skipped kind=%s id=%s reason=not_found", kind.value, item_id)
            return None

        collection = ITEM_COLLECTIONS[kind]
        stamp = max(iso_instant(self.clock()), existing.created_at)
        updated = dataclasses.replace(existing, **changes, updated_at=stamp)
        with self.repo.unit_of_work() as uow:
            items = [updated if it.id == item_id else it for it in uow.collection(collection)]
            uow.stage(collection, items)

        log.info("item_updated kind=%s id=%s fields=%s", kind.value, item_id, ",".join(sorted(changes)))
        return updated

    def update_raw_material(self, material_id: str, **changes: Any) -> Optional[RawMaterial]:
        return self.update_item(ItemKind.RAW_MATERIAL, material_id, **changes)

    def update_product(self, product_id: str, **changes: Any) -> Optional[Product]:
        return self.update_item(ItemKind.PRODUCT, product_id, **changes)

    def delete_item(self, kind: ItemKind, item_id: str, actor: User | None = None) -> DeleteOutcome:
        """Remove an item; admins only. Historical sales and purchases are kept."""
        user = actor if actor is not None else self.auth.current_user()
        if not self.auth.can(user, "delete_item"):
            log.warning(
                "delete_denied kind=%s id=%s role=%s",
                kind.value,
                item_id,
                user.role.value if user else "anonymous",
            )
            if self.policy.strict_permissions:
                self.auth.require_action(user, "delete_item")
            return DeleteOutcome.DENIED

        if self.repo.get_item(kind, item_id) is None:
            return DeleteOutcome.NOT_FOUND

        collection = ITEM_COLLECTIONS[kind]
        with self.repo.unit_of_work() as uow:
            remaining = [it for it in uow.collection(collection) if it.id != item_id]
            uow.stage(collection, remaining)

        log.info("item_deleted kind=%s id=%s actor=%s", kind.value, item_id, user.username if user else None)
        return DeleteOutcome.DELETED

    def delete_raw_material(self, material_id: str, actor: User | None = None) -> DeleteOutcome:
        return self.delete_item(ItemKind.RAW_MATERIAL, material_id, actor)

    def delete_product(self, product_id: str, actor: User | None = None) -> DeleteOutcome:
        return self.delete_item(ItemKind.PRODUCT, product_id, actor)
