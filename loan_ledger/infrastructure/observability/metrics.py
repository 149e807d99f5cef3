"""Prometheus metrics for disbursements, repayments and loan closures"""

from prometheus_client import Counter, Histogram

from loan_ledger.domain.models import EligibilityResult, Loan, Repayment

# Lending metrics
disbursement_counter = Counter(
    "loan_ledger_disbursements_total",
    "Loans disbursed",
    ["action"],  # disbursed | approved_disbursement | overridden_disbursement
)

disbursed_amount_counter = Counter(
    "loan_ledger_disbursed_amount_total",
    "Principal credited to borrower wallets",
)

repayment_counter = Counter(
    "loan_ledger_repayments_total",
    "Repayments applied to loans",
)

repaid_amount_counter = Counter(
    "loan_ledger_repaid_amount_total",
    "Amount debited from wallets for repayments",
)

loan_closed_counter = Counter(
    "loan_ledger_loans_closed_total",
    "Loans transitioned to closed",
    ["reason"],  # payment | adjustment
)

adjustment_counter = Counter(
    "loan_ledger_adjustments_total",
    "Manual balance adjustments by staff",
)

eligibility_check_counter = Counter(
    "loan_ledger_eligibility_checks_total",
    "Eligibility checks by outcome",
    ["outcome"],  # eligible | ineligible
)

topup_counter = Counter(
    "loan_ledger_wallet_topups_total",
    "Wallet top-ups",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_disbursement(loan: Loan) -> None:
    disbursement_counter.labels(action=loan.actions[0].action.value).inc()
    disbursed_amount_counter.inc(loan.principal)


def record_repayment(repayment: Repayment, closed: bool) -> None:
    repayment_counter.inc()
    repaid_amount_counter.inc(repayment.amount)
    if closed:
        loan_closed_counter.labels(reason="payment").inc()


def record_adjustment(loan: Loan) -> None:
    adjustment_counter.inc()
    if loan.is_closed:
        loan_closed_counter.labels(reason="adjustment").inc()


def record_eligibility(result: EligibilityResult) -> None:
    outcome = "eligible" if result.is_eligible else "ineligible"
    eligibility_check_counter.labels(outcome=outcome).inc()
