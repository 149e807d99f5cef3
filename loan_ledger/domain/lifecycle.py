"""Loan lifecycle manager - disbursement, repayment, adjustment and wallet top-up"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from loan_ledger.domain import amortization, eligibility
from loan_ledger.domain.exceptions import NotFoundError, ValidationError
from loan_ledger.domain.models import (
    AmortizationSchedule,
    EligibilityResult,
    Loan,
    LoanAction,
    LoanActionType,
    LoanStatus,
    Repayment,
    Role,
    User,
)
from loan_ledger.domain.money import CURRENCY_SYMBOL, format_currency, round_currency, to_amount
from loan_ledger.domain.store import Collection, LedgerStore, UnitOfWork, ledger_lock


def _find_user(users: List[User], username: str) -> Optional[User]:
    return next((u for u in users if u.username == username), None)


def _find_loan(loans: List[Loan], loan_id: str) -> Optional[Loan]:
    return next((loan for loan in loans if loan.id == loan_id), None)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LoanLifecycleManager:
    """
    Orchestrates loan state transitions against a ledger store.

    Every mutating operation validates before staging anything and commits all
    touched collections through one UnitOfWork, so a failed operation leaves
    the store unchanged.

    State machine: active --[balance reaches 0]--> closed (terminal)
    """

    def __init__(
        self,
        store: LedgerStore,
        now: Callable[[], datetime] = _utcnow,
        new_id: Callable[[], str] = _new_id,
        lock: Any = None,
        currency_symbol: str = CURRENCY_SYMBOL,
    ):
        self.store = store
        self.now = now
        self.new_id = new_id
        self.lock = lock or ledger_lock
        self.currency_symbol = currency_symbol

    # Reads

    def get_user(self, username: str) -> User:
        user = _find_user(self.store.load(Collection.USERS), username)
        if user is None:
            raise NotFoundError(f"User {username} not found")
        return user

    def list_users(self, role: Optional[Role] = None) -> List[User]:
        users = self.store.load(Collection.USERS)
        return [u for u in users if role is None or u.role == role]

    def get_loan(self, loan_id: str) -> Loan:
        loan = _find_loan(self.store.load(Collection.LOANS), loan_id)
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} not found")
        return loan

    def list_loans(
        self,
        borrower_username: Optional[str] = None,
        status: Optional[LoanStatus] = None,
    ) -> List[Loan]:
        return [
            loan
            for loan in self.store.load(Collection.LOANS)
            if (borrower_username is None or loan.borrower_username == borrower_username)
            and (status is None or loan.status == status)
        ]

    def list_repayments(self, loan_id: Optional[str] = None, by: Optional[str] = None) -> List[Repayment]:
        return [
            r
            for r in self.store.load(Collection.REPAYMENTS)
            if (loan_id is None or r.loan_id == loan_id) and (by is None or r.by == by)
        ]

    def loan_schedule(self, loan_id: str) -> AmortizationSchedule:
        loan = self.get_loan(loan_id)
        return amortization.schedule(loan.principal, loan.rate_percent, loan.tenor_months)

    # Eligibility

    def check_eligibility(
        self,
        borrower_username: str,
        income: Any,
        existing_obligations: Any = 0,
        desired_loan_amount: Any = 0,
        tenor_months: Any = eligibility.DEFAULT_TENOR_MONTHS,
    ) -> EligibilityResult:
        """Run the eligibility engine for a known borrower with a positive income"""
        borrower = _find_user(self.store.load(Collection.USERS), borrower_username)
        if borrower is None:
            raise NotFoundError(f"Borrower {borrower_username} not found")
        if to_amount(income) <= 0:
            raise ValidationError("Income must be greater than 0")

        return eligibility.evaluate(
            income=income,
            existing_obligations=existing_obligations,
            desired_loan_amount=desired_loan_amount,
            tenor_months=tenor_months,
            now=self.now,
        )

    # Mutations

    def disburse(
        self,
        borrower_username: str,
        principal: Any,
        tenor_months: Any,
        rate_percent: Any,
        actor_username: str,
        eligibility_snapshot: Optional[EligibilityResult] = None,
    ) -> Loan:
        """
        Create an active loan and credit the principal to the borrower's wallet.

        The initial audit action records how the loan was approved:
        - no eligibility snapshot → disbursed
        - eligible snapshot → approved_disbursement
        - ineligible snapshot (staff override) → overridden_disbursement
        """
        principal = to_amount(principal)
        tenor_months = max(1, int(to_amount(tenor_months, default=eligibility.DEFAULT_TENOR_MONTHS)))
        rate_percent = to_amount(rate_percent)

        with self.lock, UnitOfWork(self.store) as uow:
            users = uow.load(Collection.USERS)
            borrower = _find_user(users, borrower_username)
            if borrower is None:
                raise NotFoundError(f"Borrower {borrower_username} not found")
            if borrower.role != Role.BORROWER:
                raise ValidationError(f"{borrower_username} is not a borrower account")
            self._require_staff(users, actor_username)
            if principal <= 0:
                raise ValidationError("Principal must be greater than 0")

            plan = amortization.schedule(principal, rate_percent, tenor_months)
            now = self.now()

            if eligibility_snapshot is None:
                action_type = LoanActionType.DISBURSED
                note = f"Disbursed {self._money(principal)} at {rate_percent:g}%"
            elif eligibility_snapshot.is_eligible:
                action_type = LoanActionType.APPROVED_DISBURSEMENT
                note = f"Approved after eligibility check, rate {rate_percent:g}%"
            else:
                action_type = LoanActionType.OVERRIDDEN_DISBURSEMENT
                note = (
                    f"Disbursed despite failed eligibility check "
                    f"({eligibility_snapshot.risk_level.value} risk), rate {rate_percent:g}%"
                )

            loan = Loan(
                id=self.new_id(),
                borrower_username=borrower.username,
                principal=principal,
                balance_remaining=principal,
                tenor_months=tenor_months,
                rate_percent=rate_percent,
                monthly_payment=plan.payment,
                status=LoanStatus.ACTIVE,
                created_at=now,
                eligibility_snapshot=eligibility_snapshot,
                actions=[LoanAction(id=self.new_id(), action=action_type, by=actor_username, at=now, note=note)],
            )

            borrower.wallet = round_currency(borrower.wallet + principal)

            loans = uow.load(Collection.LOANS)
            loans.append(loan)
            uow.stage(Collection.LOANS)
            uow.stage(Collection.USERS)

        return loan

    def pay(self, loan_id: str, payer_username: str, amount: Any) -> Repayment:
        """
        Apply a wallet payment to a loan.

        The applied amount is capped at the outstanding balance; only the
        capped amount leaves the wallet. Wallet debit, balance update, audit
        actions and the repayment record commit together.
        """
        amount = to_amount(amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than 0")

        with self.lock, UnitOfWork(self.store) as uow:
            loans = uow.load(Collection.LOANS)
            loan = _find_loan(loans, loan_id)
            if loan is None:
                raise NotFoundError(f"Loan {loan_id} not found")
            if loan.is_closed:
                raise ValidationError(f"Loan {loan_id} is already closed")

            users = uow.load(Collection.USERS)
            payer = _find_user(users, payer_username)
            if payer is None:
                raise NotFoundError(f"User {payer_username} not found")
            if payer.wallet < amount:
                raise ValidationError("Insufficient wallet funds")

            applied = min(amount, loan.balance_remaining)
            now = self.now()

            payer.wallet = round_currency(payer.wallet - applied)
            loan.balance_remaining = round_currency(loan.balance_remaining - applied)
            loan.actions.append(
                LoanAction(
                    id=self.new_id(),
                    action=LoanActionType.PAYMENT,
                    by=payer_username,
                    at=now,
                    note=f"Paid {self._money(applied)}",
                )
            )
            self._close_if_settled(loan, payer_username, now, "Paid off")

            repayment = Repayment(id=self.new_id(), loan_id=loan.id, amount=applied, date=now, by=payer_username)
            repayments = uow.load(Collection.REPAYMENTS)
            repayments.append(repayment)

            uow.stage(Collection.USERS)
            uow.stage(Collection.LOANS)
            uow.stage(Collection.REPAYMENTS)

        return repayment

    def adjust(self, loan_id: str, actor_username: str, delta: Any) -> Loan:
        """Staff write-off or correction: reduce the balance without moving money"""
        delta = to_amount(delta)
        if delta <= 0:
            raise ValidationError("Adjustment must be greater than 0")

        with self.lock, UnitOfWork(self.store) as uow:
            users = uow.load(Collection.USERS)
            self._require_staff(users, actor_username)

            loans = uow.load(Collection.LOANS)
            loan = _find_loan(loans, loan_id)
            if loan is None:
                raise NotFoundError(f"Loan {loan_id} not found")
            if loan.is_closed:
                raise ValidationError(f"Loan {loan_id} is already closed")

            now = self.now()
            previous = loan.balance_remaining
            loan.balance_remaining = round_currency(max(0.0, previous - delta))
            loan.actions.append(
                LoanAction(
                    id=self.new_id(),
                    action=LoanActionType.ADJUSTMENT,
                    by=actor_username,
                    at=now,
                    note=(
                        f"Adjusted by {self._money(delta)} "
                        f"(balance {self._money(previous)} → {self._money(loan.balance_remaining)})"
                    ),
                )
            )
            self._close_if_settled(loan, actor_username, now, "Balance adjusted to zero")

            uow.stage(Collection.LOANS)

        return loan

    def top_up(self, username: str, amount: Any) -> User:
        amount = to_amount(amount)
        if amount <= 0:
            raise ValidationError("Top-up amount must be greater than 0")

        with self.lock, UnitOfWork(self.store) as uow:
            users = uow.load(Collection.USERS)
            user = _find_user(users, username)
            if user is None:
                raise NotFoundError(f"User {username} not found")

            user.wallet = round_currency(user.wallet + amount)
            uow.stage(Collection.USERS)

        return user

    # Helpers

    def _require_staff(self, users: List[User], actor_username: str) -> User:
        actor = _find_user(users, actor_username)
        if actor is None:
            raise NotFoundError(f"User {actor_username} not found")
        if actor.role != Role.STAFF:
            raise ValidationError(f"{actor_username} is not a staff account")
        return actor

    def _money(self, value: float) -> str:
        return format_currency(value, self.currency_symbol)

    def _close_if_settled(self, loan: Loan, actor_username: str, at: datetime, note: str) -> None:
        """Closed iff balance is zero"""
        if loan.balance_remaining > 0:
            return
        loan.balance_remaining = 0.0
        loan.status = LoanStatus.CLOSED
        loan.actions.append(
            LoanAction(id=self.new_id(), action=LoanActionType.CLOSED, by=actor_username, at=at, note=note)
        )
