"""Loan endpoints - disbursement, repayment, adjustment and loan views"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from loan_ledger.api.v1.schemas import (
    AdjustmentRequest,
    DisburseRequest,
    LoanResponse,
    PaymentRequest,
    PaymentResponse,
    RepaymentSchema,
    ScheduleResponse,
)
from loan_ledger.api.dependencies import get_manager, get_request_id
from loan_ledger.config import settings
from loan_ledger.domain.exceptions import NotFoundError, ValidationError
from loan_ledger.domain.lifecycle import LoanLifecycleManager
from loan_ledger.domain.models import LoanStatus
from loan_ledger.domain.money import format_currency
from loan_ledger.infrastructure.observability.logging import log_ledger_event
from loan_ledger.infrastructure.observability.metrics import (
    record_adjustment,
    record_disbursement,
    record_eligibility,
    record_repayment,
)

router = APIRouter()


@router.post("/loans", response_model=LoanResponse, status_code=201)
def disburse_loan(
    request_body: DisburseRequest,
    request: Request,
    manager: LoanLifecycleManager = Depends(get_manager),
):
    """
    Disburse a loan and credit the principal to the borrower's wallet.

    Flow:
    1. If financials are supplied, run the eligibility check for the principal
    2. Refuse an ineligible borrower unless the staff member set ``override``
    3. Disburse at the requested rate, else the suggested rate, else the default
    """
    request_id = get_request_id(request)
    tenor_months = request_body.tenor_months or settings.default_tenor_months

    try:
        snapshot = None
        if request_body.financials is not None:
            snapshot = manager.check_eligibility(
                borrower_username=request_body.borrower_username,
                income=request_body.financials.income,
                existing_obligations=request_body.financials.existing_obligations,
                desired_loan_amount=request_body.principal,
                tenor_months=tenor_months,
            )
            record_eligibility(snapshot)
            if not snapshot.is_eligible and not request_body.override:
                logging.warning(
                    "Disbursement blocked: borrower not eligible",
                    extra={"request_id": request_id, "borrower": request_body.borrower_username},
                )
                raise HTTPException(
                    status_code=409,
                    detail="Borrower is not eligible based on checks; set override to disburse anyway",
                )

        if request_body.rate_percent is not None:
            rate_percent = request_body.rate_percent
        elif snapshot is not None:
            rate_percent = snapshot.default_rate
        else:
            rate_percent = settings.default_rate_percent

        loan = manager.disburse(
            borrower_username=request_body.borrower_username,
            principal=request_body.principal,
            tenor_months=tenor_months,
            rate_percent=rate_percent,
            actor_username=request_body.actor_username,
            eligibility_snapshot=snapshot,
        )

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except ValidationError as e:
        logging.warning(f"Disbursement rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_disbursement(loan)
    log_ledger_event(
        request_id,
        loan.actions[0].action.value,
        f"Disbursed {format_currency(loan.principal, settings.currency_symbol)} to {loan.borrower_username}",
        loan_id=loan.id,
        borrower=loan.borrower_username,
        actor=request_body.actor_username,
        principal=loan.principal,
        rate_percent=loan.rate_percent,
        tenor_months=loan.tenor_months,
    )
    return LoanResponse.from_domain(loan)


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(
    borrower: Optional[str] = Query(None, description="Borrower username"),
    status: Optional[LoanStatus] = Query(None),
    manager: LoanLifecycleManager = Depends(get_manager),
):
    """All loans, newest first"""
    loans = manager.list_loans(borrower_username=borrower, status=status)
    loans.sort(key=lambda loan: loan.created_at, reverse=True)
    return [LoanResponse.from_domain(loan) for loan in loans]


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: str, manager: LoanLifecycleManager = Depends(get_manager)):
    try:
        return LoanResponse.from_domain(manager.get_loan(loan_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/loans/{loan_id}/schedule", response_model=ScheduleResponse)
def get_loan_schedule(loan_id: str, manager: LoanLifecycleManager = Depends(get_manager)):
    try:
        return ScheduleResponse.from_domain(manager.loan_schedule(loan_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/loans/{loan_id}/payments", response_model=PaymentResponse, status_code=201)
def pay_loan(
    loan_id: str,
    request_body: PaymentRequest,
    request: Request,
    manager: LoanLifecycleManager = Depends(get_manager),
):
    """Pay toward a loan from the payer's wallet; overpayment is capped at the balance"""
    request_id = get_request_id(request)
    try:
        repayment = manager.pay(loan_id, request_body.payer_username, request_body.amount)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logging.warning(f"Payment rejected: {e}", extra={"request_id": request_id, "loan_id": loan_id})
        raise HTTPException(status_code=422, detail=str(e))

    loan = manager.get_loan(loan_id)
    payer = manager.get_user(request_body.payer_username)

    record_repayment(repayment, closed=loan.is_closed)
    log_ledger_event(
        request_id,
        "payment",
        f"Paid {format_currency(repayment.amount, settings.currency_symbol)} toward loan {loan_id}",
        loan_id=loan_id,
        payer=repayment.by,
        requested=request_body.amount,
        applied=repayment.amount,
        balance_remaining=loan.balance_remaining,
        loan_status=loan.status.value,
    )
    return PaymentResponse(
        repayment=RepaymentSchema.from_domain(repayment),
        loan=LoanResponse.from_domain(loan),
        wallet=payer.wallet,
    )


@router.post("/loans/{loan_id}/adjustments", response_model=LoanResponse)
def adjust_loan(
    loan_id: str,
    request_body: AdjustmentRequest,
    request: Request,
    manager: LoanLifecycleManager = Depends(get_manager),
):
    """Staff write-off or correction; no wallet movement and no repayment record"""
    request_id = get_request_id(request)
    try:
        loan = manager.adjust(loan_id, request_body.actor_username, request_body.delta)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logging.warning(f"Adjustment rejected: {e}", extra={"request_id": request_id, "loan_id": loan_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_adjustment(loan)
    log_ledger_event(
        request_id,
        "adjustment",
        f"Adjusted loan {loan_id}",
        loan_id=loan_id,
        actor=request_body.actor_username,
        delta=request_body.delta,
        balance_remaining=loan.balance_remaining,
        loan_status=loan.status.value,
    )
    return LoanResponse.from_domain(loan)
