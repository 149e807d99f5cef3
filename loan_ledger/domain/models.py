"""Domain models - pure Python dataclasses representing ledger entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from loan_ledger.domain.money import round_currency


class Role(str, Enum):
    BORROWER = "borrower"
    STAFF = "staff"


class LoanStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class LoanActionType(str, Enum):
    """Closed set of audit trail entries on a loan"""

    DISBURSED = "disbursed"
    APPROVED_DISBURSEMENT = "approved_disbursement"
    OVERRIDDEN_DISBURSEMENT = "overridden_disbursement"
    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"
    CLOSED = "closed"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class User:
    """Borrower or staff account with a simulated wallet"""

    username: str
    password: str  # plaintext demo credential
    name: str
    role: Role
    wallet: float = 0.0


@dataclass
class EligibilityResult:
    """Output of an eligibility check, optionally snapshotted into a loan"""

    dti: int
    max_loan: int
    is_eligible: bool
    credit_score: int
    risk_level: RiskLevel
    default_rate: float
    explanation: str
    checked_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dti": self.dti,
            "max_loan": self.max_loan,
            "is_eligible": self.is_eligible,
            "credit_score": self.credit_score,
            "risk_level": self.risk_level.value,
            "default_rate": self.default_rate,
            "explanation": self.explanation,
            "checked_at": self.checked_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EligibilityResult":
        return cls(
            dti=data["dti"],
            max_loan=data["max_loan"],
            is_eligible=data["is_eligible"],
            credit_score=data["credit_score"],
            risk_level=RiskLevel(data["risk_level"]),
            default_rate=data["default_rate"],
            explanation=data["explanation"],
            checked_at=datetime.fromisoformat(data["checked_at"]),
        )


@dataclass(frozen=True)
class LoanAction:
    """Single audit trail entry, immutable once appended"""

    id: str
    action: LoanActionType
    by: str
    at: datetime
    note: str = ""


@dataclass
class Loan:
    """Disbursed loan with running balance and its audit trail"""

    id: str
    borrower_username: str
    principal: float
    balance_remaining: float
    tenor_months: int
    rate_percent: float
    monthly_payment: float
    status: LoanStatus
    created_at: datetime
    eligibility_snapshot: Optional[EligibilityResult] = None
    actions: List[LoanAction] = field(default_factory=list)

    @property
    def is_closed(self) -> bool:
        return self.status == LoanStatus.CLOSED


@dataclass(frozen=True)
class Repayment:
    """Append-only ledger entry for one successful payment"""

    id: str
    loan_id: str
    amount: float
    date: datetime
    by: str


@dataclass
class SessionInfo:
    """Current logged-in identity"""

    username: str
    role: Role
    logged_in_at: datetime


@dataclass
class ScheduleRow:
    """Single month in an amortization schedule"""

    month: int
    payment: float
    principal_paid: float
    interest: float
    balance: float


@dataclass
class AmortizationSchedule:
    """Fixed-payment repayment schedule"""

    payment: float
    rows: List[ScheduleRow]

    @property
    def total_paid(self) -> float:
        return round_currency(self.payment * len(self.rows))

    @property
    def total_interest(self) -> float:
        return round_currency(sum(row.interest for row in self.rows))
