"""Amortization engine - fixed-payment repayment schedules"""

from typing import Any, List

from loan_ledger.domain.models import AmortizationSchedule, ScheduleRow
from loan_ledger.domain.money import round_currency, to_amount


def monthly_rate(annual_rate_percent: float) -> float:
    return annual_rate_percent / 100 / 12


def fixed_payment(principal: float, rate: float, months: int) -> float:
    """Annuity payment for a monthly rate, straight-line when the rate is zero"""
    if rate == 0:
        return principal / months
    return principal * rate / (1 - (1 + rate) ** (-months))


def schedule(principal: Any, annual_rate_percent: Any, months: Any) -> AmortizationSchedule:
    """
    Generate a fixed-payment schedule.

    Requirements:
    - At least 1 month
    - Payment rounded to 2 decimals and held fixed on every row
    - Each row's money fields rounded independently; the next row accrues
      interest on the rounded balance
    - Final balance is left as computed (per-step rounding drift is accepted)

    Example:
        120000 at 12% for 12 months → payment 10661.85,
        first row interest 1200.00, principal 9461.85, balance 110538.15
    """
    principal = to_amount(principal)
    months = max(1, int(to_amount(months, default=1)))
    rate = monthly_rate(to_amount(annual_rate_percent))

    payment = round_currency(fixed_payment(principal, rate, months))

    rows: List[ScheduleRow] = []
    balance = principal
    for month in range(1, months + 1):
        interest = balance * rate
        principal_paid = payment - interest
        balance = round_currency(max(0.0, balance - principal_paid))

        rows.append(
            ScheduleRow(
                month=month,
                payment=payment,
                principal_paid=round_currency(principal_paid),
                interest=round_currency(interest),
                balance=balance,
            )
        )

    return AmortizationSchedule(payment=payment, rows=rows)
