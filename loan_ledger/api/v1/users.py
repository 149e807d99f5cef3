"""User registration, lookup and wallet top-up"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from loan_ledger.api.v1.schemas import RegisterRequest, TopUpRequest, UserResponse
from loan_ledger.api.dependencies import get_accounts, get_manager, get_request_id
from loan_ledger.config import settings
from loan_ledger.domain.accounts import AccountService
from loan_ledger.domain.exceptions import NotFoundError, ValidationError
from loan_ledger.domain.lifecycle import LoanLifecycleManager
from loan_ledger.domain.models import Role
from loan_ledger.domain.money import format_currency
from loan_ledger.infrastructure.observability.logging import log_ledger_event
from loan_ledger.infrastructure.observability.metrics import topup_counter

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=201)
def register_user(
    request_body: RegisterRequest,
    request: Request,
    accounts: AccountService = Depends(get_accounts),
):
    request_id = get_request_id(request)
    try:
        user = accounts.register(
            username=request_body.username,
            password=request_body.password,
            name=request_body.name,
            role=request_body.role,
        )
    except ValidationError as e:
        logging.warning(f"Registration rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    log_ledger_event(request_id, "user_registered", "User registered", username=user.username, role=user.role.value)
    return UserResponse.from_domain(user)


@router.get("/users", response_model=List[UserResponse])
def list_users(
    role: Optional[Role] = Query(None, description="Filter by role"),
    manager: LoanLifecycleManager = Depends(get_manager),
):
    return [UserResponse.from_domain(u) for u in manager.list_users(role)]


@router.get("/users/{username}", response_model=UserResponse)
def get_user(username: str, manager: LoanLifecycleManager = Depends(get_manager)):
    try:
        user = manager.get_user(username)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return UserResponse.from_domain(user)


@router.post("/users/{username}/top-up", response_model=UserResponse)
def top_up(
    username: str,
    request_body: TopUpRequest,
    request: Request,
    manager: LoanLifecycleManager = Depends(get_manager),
):
    """Credit a simulated deposit to the user's wallet"""
    request_id = get_request_id(request)
    try:
        user = manager.top_up(username, request_body.amount)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logging.warning(f"Top-up rejected: {e}", extra={"request_id": request_id, "username": username})
        raise HTTPException(status_code=422, detail=str(e))

    topup_counter.inc()
    log_ledger_event(
        request_id,
        "wallet_top_up",
        f"Wallet topped up by {format_currency(request_body.amount, settings.currency_symbol)}",
        username=username,
        amount=request_body.amount,
        wallet=user.wallet,
    )
    return UserResponse.from_domain(user)
