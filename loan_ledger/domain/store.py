"""Ledger store interface and the unit of work that sequences writes across collections"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Sequence, Set

logger = logging.getLogger(__name__)

# Serialises read-modify-write passes across request threads
ledger_lock = threading.RLock()


class Collection(str, Enum):
    """Named record collections held by a ledger store (written in this order)"""

    USERS = "users"
    LOANS = "loans"
    REPAYMENTS = "repayments"
    SESSION = "session"


class LedgerStore(ABC):
    """
    Collection-level persistence for users, loans, repayments and the session.

    ``load`` returns records the caller may mutate freely; nothing is visible to
    other readers until ``save`` has been called for the collection and the
    store has been committed.
    """

    @abstractmethod
    def load(self, collection: Collection) -> List[Any]:
        """Return the ordered records of a collection"""

    @abstractmethod
    def save(self, collection: Collection, records: Sequence[Any]) -> None:
        """Replace the entire collection with ``records``"""

    @abstractmethod
    def commit(self) -> None:
        """Make every saved collection durable together"""

    @abstractmethod
    def rollback(self) -> None:
        """Discard saves since the last commit"""


class UnitOfWork:
    """
    Stages collection snapshots and commits them all-or-nothing.

    Usage:
        with UnitOfWork(store) as uow:
            users = uow.load(Collection.USERS)
            ...mutate...
            uow.stage(Collection.USERS, users)
        # committed on clean exit, rolled back on exception
    """

    def __init__(self, store: LedgerStore):
        self.store = store
        self._snapshots: Dict[Collection, List[Any]] = {}
        self._staged: Set[Collection] = set()

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False

    def load(self, collection: Collection) -> List[Any]:
        """Snapshot of a collection, read once per unit of work"""
        if collection not in self._snapshots:
            self._snapshots[collection] = list(self.store.load(collection))
        return self._snapshots[collection]

    def stage(self, collection: Collection, records: Sequence[Any] | None = None) -> None:
        if records is not None:
            self._snapshots[collection] = list(records)
        elif collection not in self._snapshots:
            raise KeyError(f"Nothing loaded for collection {collection.value}")
        self._staged.add(collection)

    def commit(self) -> None:
        if not self._staged:
            return
        try:
            for collection in Collection:
                if collection in self._staged:
                    self.store.save(collection, self._snapshots[collection])
            self.store.commit()
        except Exception:
            logger.error("Ledger commit failed, rolling back", extra={"collections": sorted(c.value for c in self._staged)})
            self.store.rollback()
            raise
        finally:
            self._staged.clear()

    def rollback(self) -> None:
        self._snapshots.clear()
        self._staged.clear()
        self.store.rollback()
