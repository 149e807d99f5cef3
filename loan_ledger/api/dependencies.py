"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from loan_ledger.config import settings
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.infrastructure.database.memory import InMemoryLedgerStore
from loan_ledger.infrastructure.database.repositories import SqlLedgerStore
from loan_ledger.domain.accounts import AccountService
from loan_ledger.domain.lifecycle import LoanLifecycleManager
from loan_ledger.domain.store import LedgerStore

# Process-wide store used when settings.ledger_backend == "memory"
memory_store = InMemoryLedgerStore()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(db: Session = Depends(get_db)) -> LedgerStore:
    """Provide the configured ledger store (SQL store bound to the request's session by default)"""
    if settings.ledger_backend == "memory":
        return memory_store
    return SqlLedgerStore(db)


def get_manager(store: LedgerStore = Depends(get_store)) -> LoanLifecycleManager:
    """Provide the loan lifecycle manager"""
    return LoanLifecycleManager(store, currency_symbol=settings.currency_symbol)


def get_accounts(store: LedgerStore = Depends(get_store)) -> AccountService:
    """Provide the account service"""
    return AccountService(store)
