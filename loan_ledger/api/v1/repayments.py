"""GET /v1/repayments - Repayment ledger"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from loan_ledger.api.v1.schemas import RepaymentHistoryResponse, RepaymentSchema
from loan_ledger.api.dependencies import get_manager
from loan_ledger.domain.lifecycle import LoanLifecycleManager

router = APIRouter()


@router.get("/repayments", response_model=RepaymentHistoryResponse)
def list_repayments(
    loan_id: Optional[str] = Query(None, description="Only repayments on this loan"),
    by: Optional[str] = Query(None, description="Only repayments made by this user"),
    manager: LoanLifecycleManager = Depends(get_manager),
):
    """
    Retrieve the repayment ledger, newest first.

    Returns:
        Repayments, optionally filtered by loan and payer
    """
    repayments = manager.list_repayments(loan_id=loan_id, by=by)
    repayments.sort(key=lambda r: r.date, reverse=True)
    return RepaymentHistoryResponse(repayments=[RepaymentSchema.from_domain(r) for r in repayments])
