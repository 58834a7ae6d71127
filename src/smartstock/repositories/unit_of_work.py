from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from smartstock.domain.errors import StorageError
from smartstock.repositories.storage import Collection

if TYPE_CHECKING:
    from smartstock.repositories.entity_repository import EntityRepository

log = logging.getLogger("smartstock.storage")


class UnitOfWork(Protocol):
    def __enter__(self) -> "UnitOfWork": ...
    def __exit__(self, exc_type, exc, tb) -> None: ...
    def collection(self, collection: Collection) -> list: ...
    def stage(self, collection: Collection, items: list) -> None: ...


@dataclass
class RepositoryUnitOfWork:
    """Stages whole-collection replacements and commits them on exit.

    Staged collections are written to storage first; in-memory state is only
    replaced once every write succeeded.
    """

    repo: "EntityRepository"
    staged: dict[Collection, list] = field(default_factory=dict)

    def __enter__(self) -> "RepositoryUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.staged.clear()
        return None

    def collection(self, collection: Collection) -> list:
        if collection in self.staged:
            return list(self.staged[collection])
        return list(self.repo.current(collection))

    def stage(self, collection: Collection, items: list) -> None:
        self.staged[collection] = list(items)

    def commit(self) -> None:
        if not self.staged:
            return
        written: list[Collection] = []
        try:
            for collection, items in self.staged.items():
                self.repo.storage.save(collection, items)
                written.append(collection)
        except StorageError:
            self._restore(written)
            self.staged.clear()
            raise
        self.repo.replace(self.staged)
        self.staged.clear()

    def _restore(self, written: list[Collection]) -> None:
        for collection in written:
            try:
                self.repo.storage.save(collection, self.repo.current(collection))
            except StorageError:
                log.exception("store_restore_failed collection=%s", collection.value)
