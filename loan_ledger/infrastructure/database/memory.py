"""In-process ledger store holding committed and pending snapshots"""

import copy
import threading
from typing import Any, Dict, List, Sequence

from loan_ledger.domain.store import Collection, LedgerStore


class InMemoryLedgerStore(LedgerStore):
    """
    Dict-backed store; saves stay pending until commit.

    Pending saves are kept per thread, so a store shared by request threads
    (``LOAN_LEDGER_LEDGER_BACKEND=memory``) only exposes committed state to
    readers outside the writing thread.
    """

    def __init__(self, initial: Dict[Collection, Sequence[Any]] | None = None):
        self._committed: Dict[Collection, List[Any]] = {c: [] for c in Collection}
        self._local = threading.local()
        for collection, records in (initial or {}).items():
            self._committed[collection] = copy.deepcopy(list(records))

    @property
    def _pending(self) -> Dict[Collection, List[Any]]:
        if not hasattr(self._local, "pending"):
            self._local.pending = {}
        return self._local.pending

    def load(self, collection: Collection) -> List[Any]:
        records = self._pending.get(collection, self._committed[collection])
        return copy.deepcopy(records)

    def save(self, collection: Collection, records: Sequence[Any]) -> None:
        self._pending[collection] = copy.deepcopy(list(records))

    def commit(self) -> None:
        self._committed.update(self._pending)
        self._pending.clear()

    def rollback(self) -> None:
        self._pending.clear()
