"""POST /v1/auth/login, POST /v1/auth/logout, GET /v1/auth/session"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from loan_ledger.api.v1.schemas import LoginRequest, SessionResponse, UserResponse
from loan_ledger.api.dependencies import get_accounts, get_request_id
from loan_ledger.domain.accounts import AccountService
from loan_ledger.domain.exceptions import AuthError

router = APIRouter()


@router.post("/auth/login", response_model=UserResponse)
def login(request_body: LoginRequest, request: Request, accounts: AccountService = Depends(get_accounts)):
    """Check demo credentials and record the session"""
    request_id = get_request_id(request)
    try:
        user = accounts.login(request_body.username, request_body.password)
    except AuthError as e:
        logging.warning(f"Login rejected: {e}", extra={"request_id": request_id, "username": request_body.username})
        raise HTTPException(status_code=401, detail=str(e))

    logging.info("Login", extra={"request_id": request_id, "username": user.username, "role": user.role.value})
    return UserResponse.from_domain(user)


@router.post("/auth/logout", status_code=204)
def logout(accounts: AccountService = Depends(get_accounts)):
    accounts.logout()


@router.get("/auth/session", response_model=SessionResponse)
def current_session(accounts: AccountService = Depends(get_accounts)):
    session = accounts.current_session()
    if session is None:
        raise HTTPException(status_code=404, detail="No active session")
    return SessionResponse.from_domain(session)
