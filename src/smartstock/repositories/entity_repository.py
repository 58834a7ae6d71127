from __future__ import annotations

import logging
from typing import Callable, Optional

from smartstock.domain.models import (
    ItemKind,
    Product,
    Purchase,
    RawMaterial,
    RepositorySnapshot,
    Sale,
    StockItem,
    find_by_id,
)
from smartstock.repositories.storage import Collection, CollectionStore
from smartstock.repositories.unit_of_work import RepositoryUnitOfWork

log = logging.getLogger(__name__)

Listener = Callable[[RepositorySnapshot], None]

ITEM_COLLECTIONS: dict[ItemKind, Collection] = {
    ItemKind.RAW_MATERIAL: Collection.RAW_MATERIALS,
    ItemKind.PRODUCT: Collection.PRODUCTS,
}


class EntityRepository:
    """In-memory owner of raw materials, products, sales and purchases.

    Every change goes through a unit of work, which persists the touched
    collections before this object's state is replaced.
    """

    def __init__(self, storage: CollectionStore):
        self.storage = storage
        self._data: dict[Collection, tuple] = {c: () for c in Collection}
        self._listeners: list[Listener] = []

    def load(self) -> None:
        loaded = {c: tuple(self.storage.load(c)) for c in Collection}
        self._data = loaded
        log.info(
            "repository_loaded materials=%s products=%s sales=%s purchases=%s",
            len(loaded[Collection.RAW_MATERIALS]),
            len(loaded[Collection.PRODUCTS]),
            len(loaded[Collection.SALES]),
            len(loaded[Collection.PURCHASES]),
        )
        self._notify()

    @property
    def raw_materials(self) -> tuple[RawMaterial, ...]:
        return self._data[Collection.RAW_MATERIALS]

    @property
    def products(self) -> tuple[Product, ...]:
        return self._data[Collection.PRODUCTS]

    @property
    def sales(self) -> tuple[Sale, ...]:
        return self._data[Collection.SALES]

    @property
    def purchases(self) -> tuple[Purchase, ...]:
        return self._data[Collection.PURCHASES]

    def current(self, collection: Collection) -> tuple:
        return self._data[collection]

    def snapshot(self) -> RepositorySnapshot:
        return RepositorySnapshot(
            raw_materials=self.raw_materials,
            products=self.products,
            sales=self.sales,
            purchases=self.purchases,
        )

    def get_raw_material(self, material_id: str) -> Optional[RawMaterial]:
        return find_by_id(self.raw_materials, material_id)

    def get_product(self, product_id: str) -> Optional[Product]:
        return find_by_id(self.products, product_id)

    def get_item(self, kind: ItemKind, item_id: str) -> Optional[StockItem]:
        return find_by_id(self._data[ITEM_COLLECTIONS[kind]], item_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def unit_of_work(self) -> RepositoryUnitOfWork:
        return RepositoryUnitOfWork(self)

    def replace(self, staged: dict[Collection, list]) -> None:
        for collection, items in staged.items():
            self._data[collection] = tuple(items)
        self._notify()

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                log.exception("listener_failed listener=%r", listener)
