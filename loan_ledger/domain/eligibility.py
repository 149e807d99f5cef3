"""Eligibility engine - maps applicant financials to a risk verdict"""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from loan_ledger.domain.models import EligibilityResult, RiskLevel
from loan_ledger.domain.money import format_number, round_whole, to_amount

MAX_DTI_PERCENT = 50
DEFAULT_TENOR_MONTHS = 12

MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 850

ELIGIBLE_RATE_PERCENT = 12
INELIGIBLE_RATE_PERCENT = 20

# (inclusive lower income bound, multiplier), highest first
INCOME_MULTIPLIERS = (
    (500_000, 6),
    (250_000, 4),
    (100_000, 3),
)
BASE_MULTIPLIER = 2


def income_multiplier(income: float) -> int:
    for lower_bound, multiplier in INCOME_MULTIPLIERS:
        if income >= lower_bound:
            return multiplier
    return BASE_MULTIPLIER


def debt_to_income(income: float, existing_obligations: float) -> int:
    """DTI as a whole percentage; zero income is treated as maximal burden"""
    if income <= 0:
        return 100
    return round_whole(existing_obligations / income * 100)


def credit_score_for(income: float) -> int:
    """Monotonic in income, saturating at both ends"""
    score = round_whole(500 + income / 2000)
    return max(MIN_CREDIT_SCORE, min(MAX_CREDIT_SCORE, score))


def evaluate(
    income: Any = 0,
    existing_obligations: Any = 0,
    desired_loan_amount: Any = 0,
    tenor_months: Any = DEFAULT_TENOR_MONTHS,
    now: Optional[Callable[[], datetime]] = None,
) -> EligibilityResult:
    """
    Evaluate a loan application against income-based limits.

    Rules:
    - DTI above 50% is never eligible
    - Max loan is income times a tiered multiplier (2x, 3x from 100k, 4x from 250k, 6x from 500k)
    - Eligible applicants are Low risk at 12%; the rest are High (DTI) or Medium (amount) at 20%

    Example:
        income=150000, obligations=20000, desired=500000
        dti=13, max_loan=450000 → ineligible, Medium, 20%
    """
    income = to_amount(income)
    existing_obligations = to_amount(existing_obligations)
    desired_loan_amount = to_amount(desired_loan_amount)
    tenor_months = int(to_amount(tenor_months)) or DEFAULT_TENOR_MONTHS

    dti = debt_to_income(income, existing_obligations)
    max_loan = round_whole(income * income_multiplier(income))
    is_eligible = desired_loan_amount <= max_loan and dti <= MAX_DTI_PERCENT

    if is_eligible:
        risk_level = RiskLevel.LOW
    elif dti > MAX_DTI_PERCENT:
        risk_level = RiskLevel.HIGH
    else:
        risk_level = RiskLevel.MEDIUM

    checked_at = now() if now else datetime.now(timezone.utc)

    return EligibilityResult(
        dti=dti,
        max_loan=max_loan,
        is_eligible=is_eligible,
        credit_score=credit_score_for(income),
        risk_level=risk_level,
        default_rate=ELIGIBLE_RATE_PERCENT if is_eligible else INELIGIBLE_RATE_PERCENT,
        explanation=(
            f"Income {format_number(income)}, obligations {format_number(existing_obligations)}, "
            f"tenor {tenor_months} months"
        ),
        checked_at=checked_at,
    )
