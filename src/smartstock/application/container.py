from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from smartstock.config import LedgerPolicy
from smartstock.domain.clock import Clock, system_clock
from smartstock.repositories.entity_repository import EntityRepository
from smartstock.repositories.kv_store import SqliteKeyValueStore
from smartstock.repositories.storage import CollectionStore
from smartstock.services.auth_service import AuthService
from smartstock.services.export_service import ExportService
from smartstock.services.inventory_service import InventoryService
from smartstock.services.purchase_service import PurchaseService
from smartstock.services.reporting_service import ReportingService
from smartstock.services.sales_service import SalesService


@dataclass(frozen=True)
class AppContainer:
    store: SqliteKeyValueStore
    storage: CollectionStore
    repo: EntityRepository
    auth: AuthService
    inventory: InventoryService
    sales: SalesService
    purchases: PurchaseService
    reporting: ReportingService
    exports: ExportService


def build_container(
    store_path: Path | str,
    policy: LedgerPolicy | None = None,
    clock: Clock | None = None,
    seed_demo_data: bool = False,
) -> AppContainer:
    policy = policy or LedgerPolicy()
    clock = clock or system_clock

    store = SqliteKeyValueStore(store_path)
    store.init_db()
    storage = CollectionStore(store)
    if seed_demo_data:
        storage.init_demo_data(clock())

    repo = EntityRepository(storage)
    repo.load()

    auth = AuthService(storage)
    inventory = InventoryService(repo, auth, policy, clock)
    sales = SalesService(repo, policy, clock)
    purchases = PurchaseService(repo, clock)
    reporting = ReportingService(repo, policy, clock)
    exports = ExportService(reporting)

    return AppContainer(
        store=store,
        storage=storage,
        repo=repo,
        auth=auth,
        inventory=inventory,
        sales=sales,
        purchases=purchases,
        reporting=reporting,
        exports=exports,
    )
