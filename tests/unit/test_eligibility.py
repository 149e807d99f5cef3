"""Unit tests for the eligibility engine"""

from datetime import datetime, timezone

import pytest

from loan_ledger.domain.eligibility import (
    credit_score_for,
    debt_to_income,
    evaluate,
    income_multiplier,
)
from loan_ledger.domain.models import RiskLevel


def test_evaluate_scenario_amount_above_limit():
    """150k income, 20k obligations, 500k desired: DTI fine but above 3x limit"""
    result = evaluate(income=150000, existing_obligations=20000, desired_loan_amount=500000, tenor_months=12)

    assert result.dti == 13
    assert result.max_loan == 450000
    assert result.is_eligible is False
    assert result.risk_level == RiskLevel.MEDIUM
    assert result.default_rate == 20
    assert result.credit_score == 575
    assert result.explanation == "Income 150,000, obligations 20,000, tenor 12 months"


def test_evaluate_eligible_applicant():
    result = evaluate(income=300000, existing_obligations=30000, desired_loan_amount=1_000_000, tenor_months=24)

    assert result.dti == 10
    assert result.max_loan == 1_200_000
    assert result.is_eligible is True
    assert result.risk_level == RiskLevel.LOW
    assert result.default_rate == 12


def test_evaluate_high_dti_is_high_risk():
    result = evaluate(income=100000, existing_obligations=60000, desired_loan_amount=1000)

    assert result.dti == 60
    assert result.is_eligible is False
    assert result.risk_level == RiskLevel.HIGH


def test_evaluate_dti_boundary_is_inclusive():
    result = evaluate(income=100000, existing_obligations=50000, desired_loan_amount=300000)

    assert result.dti == 50
    assert result.is_eligible is True


def test_evaluate_zero_income_assumes_maximal_burden():
    result = evaluate(income=0, existing_obligations=0, desired_loan_amount=0)

    assert result.dti == 100
    assert result.max_loan == 0
    assert result.is_eligible is False
    assert result.risk_level == RiskLevel.HIGH
    assert result.credit_score == 500


def test_evaluate_defaults_and_coercion():
    """Missing tenor falls back to 12 months; negative and None inputs become 0"""
    result = evaluate(income="200000", existing_obligations=None, desired_loan_amount=-5, tenor_months=None)

    assert result.dti == 0
    assert result.is_eligible is True
    assert "tenor 12 months" in result.explanation


def test_evaluate_uses_injected_clock():
    fixed = datetime(2026, 1, 1, tzinfo=timezone.utc)
    result = evaluate(income=1000, now=lambda: fixed)
    assert result.checked_at == fixed


@pytest.mark.parametrize(
    "income,expected",
    [(0, 2), (99_999, 2), (100_000, 3), (249_999, 3), (250_000, 4), (499_999, 4), (500_000, 6), (2_000_000, 6)],
)
def test_income_multiplier_tiers(income, expected):
    """Tier lower bounds are inclusive"""
    assert income_multiplier(income) == expected


def test_debt_to_income_rounds_half_up():
    assert debt_to_income(200, 1) == 1  # 0.5% rounds up
    assert debt_to_income(0, 5000) == 100


def test_credit_score_monotonic_and_bounded():
    incomes = [0, 1000, 50_000, 100_000, 500_000, 700_000, 701_000, 5_000_000]
    scores = [credit_score_for(i) for i in incomes]

    assert scores == sorted(scores)
    assert all(300 <= s <= 850 for s in scores)
    assert credit_score_for(0) == 500
    assert credit_score_for(10_000_000) == 850


def test_evaluate_overflowing_income_is_treated_as_missing():
    """An income that overflows a float is discarded instead of crashing the check"""
    result = evaluate(income="1e400", existing_obligations="1e400", desired_loan_amount=10**400)

    assert result.dti == 100
    assert result.max_loan == 0
    assert result.is_eligible is False
