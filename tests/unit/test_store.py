"""Unit tests for the in-memory store and the unit of work"""

import pytest

from loan_ledger.domain.models import Role, User
from loan_ledger.domain.store import Collection, UnitOfWork
from loan_ledger.infrastructure.database.memory import InMemoryLedgerStore


class FailingStore(InMemoryLedgerStore):
    """Fails when saving one collection, after earlier collections were saved"""

    def __init__(self, fail_on, **kwargs):
        super().__init__(**kwargs)
        self.fail_on = fail_on

    def save(self, collection, records):
        if collection == self.fail_on:
            raise IOError("disk full")
        super().save(collection, records)


def _user(username: str, wallet: float = 0) -> User:
    return User(username=username, password="pw", name=username.title(), role=Role.BORROWER, wallet=wallet)


def test_saves_are_invisible_until_commit():
    store = InMemoryLedgerStore()
    store.save(Collection.USERS, [_user("ann")])

    assert [u.username for u in store.load(Collection.USERS)] == ["ann"]
    store.rollback()
    assert store.load(Collection.USERS) == []


def test_load_returns_copies():
    store = InMemoryLedgerStore({Collection.USERS: [_user("ann")]})
    users = store.load(Collection.USERS)
    users[0].wallet = 999

    assert store.load(Collection.USERS)[0].wallet == 0


def test_unit_of_work_commits_all_staged_collections():
    store = InMemoryLedgerStore({Collection.USERS: [_user("ann")]})

    with UnitOfWork(store) as uow:
        users = uow.load(Collection.USERS)
        users[0].wallet = 50
        uow.stage(Collection.USERS)
        uow.stage(Collection.REPAYMENTS, ["r1"])

    assert store.load(Collection.USERS)[0].wallet == 50
    assert store.load(Collection.REPAYMENTS) == ["r1"]


def test_unit_of_work_rolls_back_on_exception():
    store = InMemoryLedgerStore({Collection.USERS: [_user("ann")]})

    with pytest.raises(RuntimeError):
        with UnitOfWork(store) as uow:
            users = uow.load(Collection.USERS)
            users[0].wallet = 50
            uow.stage(Collection.USERS)
            raise RuntimeError("validation failed")

    assert store.load(Collection.USERS)[0].wallet == 0


def test_unit_of_work_is_all_or_nothing_across_collections():
    """Users save first; a failure saving loans must discard the users write too"""
    store = FailingStore(fail_on=Collection.LOANS, initial={Collection.USERS: [_user("ann")]})

    with pytest.raises(IOError):
        with UnitOfWork(store) as uow:
            users = uow.load(Collection.USERS)
            users[0].wallet = 100
            uow.stage(Collection.USERS)
            uow.stage(Collection.LOANS, ["loan"])

    assert store.load(Collection.USERS)[0].wallet == 0
    assert store.load(Collection.LOANS) == []


def test_stage_without_load_raises():
    uow = UnitOfWork(InMemoryLedgerStore())
    with pytest.raises(KeyError):
        uow.stage(Collection.LOANS)


def test_load_is_read_once_per_unit_of_work():
    store = InMemoryLedgerStore({Collection.USERS: [_user("ann")]})
    uow = UnitOfWork(store)
    assert uow.load(Collection.USERS) is uow.load(Collection.USERS)
