"""POST /v1/eligibility and POST /v1/schedule - credit check and amortization preview"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from loan_ledger.api.v1.schemas import (
    EligibilityRequest,
    EligibilityResponse,
    EligibilitySchema,
    ScheduleRequest,
    ScheduleResponse,
)
from loan_ledger.api.dependencies import get_manager, get_request_id
from loan_ledger.domain.amortization import schedule
from loan_ledger.domain.exceptions import NotFoundError, ValidationError
from loan_ledger.domain.lifecycle import LoanLifecycleManager
from loan_ledger.infrastructure.observability.metrics import record_eligibility

router = APIRouter()


@router.post("/eligibility", response_model=EligibilityResponse)
def check_eligibility(
    request_body: EligibilityRequest,
    request: Request,
    manager: LoanLifecycleManager = Depends(get_manager),
):
    """
    Quick credit check for a borrower.

    Returns the verdict plus a schedule preview for the desired amount at the
    suggested default rate.
    """
    request_id = get_request_id(request)
    try:
        result = manager.check_eligibility(
            borrower_username=request_body.borrower_username,
            income=request_body.income,
            existing_obligations=request_body.existing_obligations,
            desired_loan_amount=request_body.desired_loan_amount,
            tenor_months=request_body.tenor_months,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logging.warning(f"Eligibility check rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_eligibility(result)
    logging.info(
        "Eligibility checked",
        extra={
            "request_id": request_id,
            "borrower": request_body.borrower_username,
            "step": "eligibility_checked",
            "is_eligible": result.is_eligible,
            "risk_level": result.risk_level.value,
            "dti": result.dti,
        },
    )

    preview = schedule(request_body.desired_loan_amount, result.default_rate, request_body.tenor_months)
    return EligibilityResponse(
        borrower_username=request_body.borrower_username,
        result=EligibilitySchema.from_domain(result),
        schedule=ScheduleResponse.from_domain(preview),
    )


@router.post("/schedule", response_model=ScheduleResponse)
def preview_schedule(request_body: ScheduleRequest):
    return ScheduleResponse.from_domain(
        schedule(request_body.principal, request_body.rate_percent, request_body.months)
    )
