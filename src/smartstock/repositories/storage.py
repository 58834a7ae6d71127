from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from smartstock.domain.clock import iso_instant
from smartstock.domain.errors import StorageError, ValidationError
from smartstock.domain.models import Product, Purchase, RawMaterial, Sale, User
from smartstock.repositories.kv_store import KeyValueStore

log = logging.getLogger("smartstock.storage")

USER_KEY = "smartstock_user"


class Collection(str, Enum):
    RAW_MATERIALS = "smartstock_raw_materials"
    PRODUCTS = "smartstock_products"
    SALES = "smartstock_sales"
    PURCHASES = "smartstock_purchases"


_MODELS: dict[Collection, Any] = {
    Collection.RAW_MATERIALS: RawMaterial,
    Collection.PRODUCTS: Product,
    Collection.SALES: Sale,
    Collection.PURCHASES: Purchase,
}


class CollectionStore:
    """Named collections and the current-user singleton on top of a key/value store."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def has(self, collection: Collection) -> bool:
        return self.kv.get(collection.value) is not None

    def load(self, collection: Collection) -> list:
        raw = self.kv.get(collection.value)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StorageError(f"Collection '{collection.value}' is not a list.")
        model = _MODELS[collection]
        try:
            return [model.from_dict(doc) for doc in raw]
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise StorageError(f"Collection '{collection.value}' holds a malformed record: {exc}") from exc

    def save(self, collection: Collection, items) -> None:
        self.kv.set(collection.value, [it.to_dict() for it in items])

    # ---------- Current user ----------
    def get_user(self) -> Optional[User]:
        raw = self.kv.get(USER_KEY)
        if raw is None:
            return None
        try:
            return User.from_dict(raw)
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise StorageError(f"Stored user is malformed: {exc}") from exc

    def set_user(self, user: User) -> None:
        self.kv.set(USER_KEY, user.to_dict())

    def clear_user(self) -> None:
        self.kv.delete(USER_KEY)

    # ---------- Demo data ----------
    def init_demo_data(self, now: datetime) -> None:
        ts = iso_instant(now)
        seeds = {
            Collection.RAW_MATERIALS: [
                RawMaterial("1", "Steel Sheet", "kg", 50.0, 100, 20, ts, ts),
                RawMaterial("2", "Aluminum Wire", "meter", 5.0, 15, 50, ts, ts),
            ],
            Collection.PRODUCTS: [
                Product("1", "Metal Cabinet", "piece", 150.0, 200.0, 25, 10, ts, ts),
                Product("2", "Wire Frame", "piece", 30.0, 45.0, 8, 15, ts, ts),
            ],
            Collection.SALES: [],
            Collection.PURCHASES: [],
        }
        for collection, items in seeds.items():
            if self.has(collection):
                continue
            self.save(collection, items)
            log.info("demo_data_seeded collection=%s items=%s", collection.value, len(items))
