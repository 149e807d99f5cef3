"""Unit tests for demo seeding, registration and login"""

import threading

import pytest

from loan_ledger.domain.accounts import AccountService
from loan_ledger.domain.exceptions import AuthError, ValidationError
from loan_ledger.domain.lifecycle import LoanLifecycleManager
from loan_ledger.domain.models import Role
from loan_ledger.domain.store import Collection
from loan_ledger.infrastructure.database.memory import InMemoryLedgerStore


def test_seed_demo_users_only_when_empty():
    store = InMemoryLedgerStore()
    accounts = AccountService(store)

    assert accounts.seed_demo_users() is True
    assert [(u.username, u.role) for u in store.load(Collection.USERS)] == [
        ("john", Role.BORROWER),
        ("jane", Role.BORROWER),
        ("staff", Role.STAFF),
    ]
    assert all(u.wallet == 0 for u in store.load(Collection.USERS))
    assert accounts.seed_demo_users() is False


def test_login_records_session(store):
    accounts = AccountService(store)

    user = accounts.login("staff", "vfd2024")

    assert user.role == Role.STAFF
    session = accounts.current_session()
    assert session.username == "staff"
    assert session.role == Role.STAFF


def test_login_rejects_bad_credentials(store):
    accounts = AccountService(store)
    with pytest.raises(AuthError):
        accounts.login("john", "wrong")
    assert accounts.current_session() is None


def test_logout_clears_session(store):
    accounts = AccountService(store)
    accounts.login("john", "john123")
    accounts.logout()
    assert accounts.current_session() is None


def test_register(store):
    accounts = AccountService(store)

    user = accounts.register("  ada ", "secret", "Ada Obi")

    assert user.username == "ada"
    assert user.role == Role.BORROWER
    assert user.wallet == 0
    assert accounts.login("ada", "secret").name == "Ada Obi"


def test_register_rejects_duplicates_and_blanks(store):
    accounts = AccountService(store)
    with pytest.raises(ValidationError, match="already taken"):
        accounts.register("john", "x", "Another John")
    with pytest.raises(ValidationError):
        accounts.register("", "x", "Nobody")


def test_account_writes_share_the_ledger_lock(store, recording_lock):
    """Registration and sessions serialise with loan mutations on one lock"""
    assert AccountService(store).lock is LoanLifecycleManager(store).lock

    accounts = AccountService(store, lock=recording_lock)

    accounts.register("ada", "secret", "Ada Obi")
    accounts.login("ada", "secret")
    accounts.logout()
    accounts.seed_demo_users()

    assert recording_lock.acquired == 4


def test_concurrent_duplicate_registrations_create_one_user(store):
    accounts = AccountService(store)
    outcomes = []

    def register():
        try:
            accounts.register("ada", "secret", "Ada Obi")
            outcomes.append("created")
        except ValidationError:
            outcomes.append("taken")

    threads = [threading.Thread(target=register) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["created"] + ["taken"] * 7
    assert [u.username for u in store.load(Collection.USERS)].count("ada") == 1
