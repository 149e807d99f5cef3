"""SQLAlchemy-backed ledger store"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence
from sqlalchemy.orm import Session
from loan_ledger.infrastructure.database.models import (
    LoanActionRecord,
    LoanRecord,
    RepaymentRecord,
    SessionRecord,
    UserRecord,
)
from loan_ledger.domain.models import (
    EligibilityResult,
    Loan,
    LoanAction,
    LoanActionType,
    LoanStatus,
    Repayment,
    Role,
    SessionInfo,
    User,
)
from loan_ledger.domain.store import Collection, LedgerStore


def _aware(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlLedgerStore(LedgerStore):
    """
    Ledger store on a SQLAlchemy session.

    ``save`` replaces a collection by merging records onto existing rows by key
    and deleting rows that are no longer present, then flushes. Nothing is
    committed until ``commit``, so one unit of work maps to one transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def load(self, collection: Collection) -> List[Any]:
        if collection == Collection.USERS:
            rows = self.db.query(UserRecord).order_by(UserRecord.seq).all()
            return [self._user_from_row(row) for row in rows]
        if collection == Collection.LOANS:
            rows = self.db.query(LoanRecord).order_by(LoanRecord.seq).all()
            return [self._loan_from_row(row) for row in rows]
        if collection == Collection.REPAYMENTS:
            rows = self.db.query(RepaymentRecord).order_by(RepaymentRecord.seq).all()
            return [self._repayment_from_row(row) for row in rows]
        if collection == Collection.SESSION:
            rows = self.db.query(SessionRecord).order_by(SessionRecord.id).all()
            return [
                SessionInfo(username=row.username, role=Role(row.role), logged_in_at=_aware(row.logged_in_at))
                for row in rows
            ]
        raise ValueError(f"Unknown collection: {collection}")

    def save(self, collection: Collection, records: Sequence[Any]) -> None:
        if collection == Collection.USERS:
            self._replace(UserRecord, "username", records, self._apply_user)
        elif collection == Collection.LOANS:
            self._replace(LoanRecord, "id", records, self._apply_loan)
        elif collection == Collection.REPAYMENTS:
            self._replace(RepaymentRecord, "id", records, self._apply_repayment)
        elif collection == Collection.SESSION:
            self.db.query(SessionRecord).delete()
            for record in records:
                self.db.add(
                    SessionRecord(username=record.username, role=record.role.value, logged_in_at=record.logged_in_at)
                )
        else:
            raise ValueError(f"Unknown collection: {collection}")
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def _replace(self, model, key: str, records: Sequence[Any], apply) -> None:
        existing: Dict[str, Any] = {getattr(row, key): row for row in self.db.query(model).all()}
        kept = set()
        for seq, record in enumerate(records):
            record_key = getattr(record, key)
            row = existing.get(record_key)
            if row is None:
                row = model(**{key: record_key})
                self.db.add(row)
            row.seq = seq
            apply(row, record)
            kept.add(record_key)

        for record_key, row in existing.items():
            if record_key not in kept:
                self.db.delete(row)

    # Domain → row

    @staticmethod
    def _apply_user(row: UserRecord, user: User) -> None:
        row.password = user.password
        row.name = user.name
        row.role = user.role.value
        row.wallet = user.wallet

    @staticmethod
    def _apply_loan(row: LoanRecord, loan: Loan) -> None:
        row.borrower_username = loan.borrower_username
        row.principal = loan.principal
        row.balance_remaining = loan.balance_remaining
        row.tenor_months = loan.tenor_months
        row.rate_percent = loan.rate_percent
        row.monthly_payment = loan.monthly_payment
        row.status = loan.status.value
        row.created_at = loan.created_at
        row.eligibility_snapshot = loan.eligibility_snapshot.to_dict() if loan.eligibility_snapshot else None

        # Actions are append-only: reuse persisted rows, add the new ones
        persisted = {action_row.id: action_row for action_row in row.actions}
        action_rows = []
        for seq, action in enumerate(loan.actions):
            action_row = persisted.get(action.id)
            if action_row is None:
                action_row = LoanActionRecord(
                    id=action.id,
                    action=action.action.value,
                    by=action.by,
                    at=action.at,
                    note=action.note,
                )
            action_row.seq = seq
            action_rows.append(action_row)
        row.actions = action_rows

    @staticmethod
    def _apply_repayment(row: RepaymentRecord, repayment: Repayment) -> None:
        row.loan_id = repayment.loan_id
        row.amount = repayment.amount
        row.date = repayment.date
        row.by = repayment.by

    # Row → domain

    @staticmethod
    def _user_from_row(row: UserRecord) -> User:
        return User(
            username=row.username,
            password=row.password,
            name=row.name,
            role=Role(row.role),
            wallet=row.wallet,
        )

    @staticmethod
    def _loan_from_row(row: LoanRecord) -> Loan:
        return Loan(
            id=row.id,
            borrower_username=row.borrower_username,
            principal=row.principal,
            balance_remaining=row.balance_remaining,
            tenor_months=row.tenor_months,
            rate_percent=row.rate_percent,
            monthly_payment=row.monthly_payment,
            status=LoanStatus(row.status),
            created_at=_aware(row.created_at),
            eligibility_snapshot=(
                EligibilityResult.from_dict(row.eligibility_snapshot) if row.eligibility_snapshot else None
            ),
            actions=[
                LoanAction(
                    id=a.id,
                    action=LoanActionType(a.action),
                    by=a.by,
                    at=_aware(a.at),
                    note=a.note,
                )
                for a in row.actions
            ],
        )

    @staticmethod
    def _repayment_from_row(row: RepaymentRecord) -> Repayment:
        return Repayment(
            id=row.id,
            loan_id=row.loan_id,
            amount=row.amount,
            date=_aware(row.date),
            by=row.by,
        )
