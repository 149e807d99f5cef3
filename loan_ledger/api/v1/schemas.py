"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from loan_ledger.domain.models import (
    AmortizationSchedule,
    EligibilityResult,
    Loan,
    LoanActionType,
    LoanStatus,
    Repayment,
    RiskLevel,
    Role,
    SessionInfo,
    User,
)


# Auth & users


class LoginRequest(BaseModel):
    """Request body for POST /v1/auth/login"""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User profile (never includes the password)"""

    username: str
    name: str
    role: Role
    wallet: float

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(username=user.username, name=user.name, role=user.role, wallet=user.wallet)


class SessionResponse(BaseModel):
    """Response for GET /v1/auth/session"""

    username: str
    role: Role
    logged_in_at: datetime

    @classmethod
    def from_domain(cls, session: SessionInfo) -> "SessionResponse":
        return cls(username=session.username, role=session.role, logged_in_at=session.logged_in_at)


class RegisterRequest(BaseModel):
    """Request body for POST /v1/users"""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: Role = Role.BORROWER


class TopUpRequest(BaseModel):
    """Request body for POST /v1/users/{username}/top-up"""

    amount: float = Field(..., allow_inf_nan=False, description="Amount to credit to the wallet")


# Eligibility & schedules


class ScheduleRequest(BaseModel):
    """Request body for POST /v1/schedule"""

    principal: float = Field(..., ge=0, allow_inf_nan=False)
    rate_percent: float = Field(..., ge=0, allow_inf_nan=False)
    months: int = Field(12, description="Floored to 1")


class ScheduleRowSchema(BaseModel):
    month: int
    payment: float
    principal_paid: float
    interest: float
    balance: float


class ScheduleResponse(BaseModel):
    """Amortization schedule with totals"""

    payment: float
    total_paid: float
    total_interest: float
    rows: List[ScheduleRowSchema]

    @classmethod
    def from_domain(cls, plan: AmortizationSchedule) -> "ScheduleResponse":
        return cls(
            payment=plan.payment,
            total_paid=plan.total_paid,
            total_interest=plan.total_interest,
            rows=[
                ScheduleRowSchema(
                    month=row.month,
                    payment=row.payment,
                    principal_paid=row.principal_paid,
                    interest=row.interest,
                    balance=row.balance,
                )
                for row in plan.rows
            ],
        )


class Financials(BaseModel):
    """Applicant financials used for an eligibility check"""

    income: float = Field(..., allow_inf_nan=False, description="Monthly income")
    existing_obligations: float = Field(0, ge=0, allow_inf_nan=False, description="Existing monthly obligations")


class EligibilityRequest(Financials):
    """Request body for POST /v1/eligibility"""

    borrower_username: str = Field(..., min_length=1)
    desired_loan_amount: float = Field(0, ge=0, allow_inf_nan=False)
    tenor_months: int = 12


class EligibilitySchema(BaseModel):
    dti: int
    max_loan: int
    is_eligible: bool
    credit_score: int
    risk_level: RiskLevel
    default_rate: float
    explanation: str
    checked_at: datetime

    @classmethod
    def from_domain(cls, result: EligibilityResult) -> "EligibilitySchema":
        return cls(
            dti=result.dti,
            max_loan=result.max_loan,
            is_eligible=result.is_eligible,
            credit_score=result.credit_score,
            risk_level=result.risk_level,
            default_rate=result.default_rate,
            explanation=result.explanation,
            checked_at=result.checked_at,
        )


class EligibilityResponse(BaseModel):
    """Eligibility verdict with a schedule preview at the suggested rate"""

    borrower_username: str
    result: EligibilitySchema
    schedule: ScheduleResponse


# Loans


class DisburseRequest(BaseModel):
    """
    Request body for POST /v1/loans.

    When ``financials`` is given the borrower is checked first; an ineligible
    result is only disbursed with ``override`` set.
    """

    borrower_username: str = Field(..., min_length=1)
    actor_username: str = Field(..., min_length=1, description="Staff member disbursing")
    principal: float = Field(..., allow_inf_nan=False)
    tenor_months: Optional[int] = None
    rate_percent: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    financials: Optional[Financials] = None
    override: bool = False


class PaymentRequest(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/payments"""

    payer_username: str = Field(..., min_length=1)
    amount: float = Field(..., allow_inf_nan=False)


class AdjustmentRequest(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/adjustments"""

    actor_username: str = Field(..., min_length=1)
    delta: float = Field(..., allow_inf_nan=False, description="Positive amount that reduces the balance")


class LoanActionSchema(BaseModel):
    id: str
    action: LoanActionType
    by: str
    at: datetime
    note: str


class LoanResponse(BaseModel):
    """Loan with audit trail"""

    id: str
    borrower_username: str
    principal: float
    balance_remaining: float
    tenor_months: int
    rate_percent: float
    monthly_payment: float
    status: LoanStatus
    created_at: datetime
    eligibility_snapshot: Optional[EligibilitySchema] = None
    actions: List[LoanActionSchema]

    @classmethod
    def from_domain(cls, loan: Loan) -> "LoanResponse":
        return cls(
            id=loan.id,
            borrower_username=loan.borrower_username,
            principal=loan.principal,
            balance_remaining=loan.balance_remaining,
            tenor_months=loan.tenor_months,
            rate_percent=loan.rate_percent,
            monthly_payment=loan.monthly_payment,
            status=loan.status,
            created_at=loan.created_at,
            eligibility_snapshot=(
                EligibilitySchema.from_domain(loan.eligibility_snapshot) if loan.eligibility_snapshot else None
            ),
            actions=[
                LoanActionSchema(id=a.id, action=a.action, by=a.by, at=a.at, note=a.note) for a in loan.actions
            ],
        )


class RepaymentSchema(BaseModel):
    id: str
    loan_id: str
    amount: float
    date: datetime
    by: str

    @classmethod
    def from_domain(cls, repayment: Repayment) -> "RepaymentSchema":
        return cls(
            id=repayment.id,
            loan_id=repayment.loan_id,
            amount=repayment.amount,
            date=repayment.date,
            by=repayment.by,
        )


class PaymentResponse(BaseModel):
    """Response for POST /v1/loans/{loan_id}/payments"""

    repayment: RepaymentSchema
    loan: LoanResponse
    wallet: float


class RepaymentHistoryResponse(BaseModel):
    """Response for GET /v1/repayments"""

    repayments: List[RepaymentSchema]
