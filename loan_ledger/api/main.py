"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_ledger.api import dependencies
from loan_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_ledger.api.v1 import auth, eligibility, loans, repayments, users
from loan_ledger.domain.accounts import AccountService
from loan_ledger.infrastructure.database.repositories import SqlLedgerStore
from loan_ledger.infrastructure.database.session import SessionLocal, init_db
from loan_ledger.infrastructure.observability.logging import setup_logging
from loan_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def bootstrap() -> None:
    """Create tables (SQL backend) and seed demo users on an empty ledger"""
    if settings.ledger_backend == "memory":
        if settings.seed_demo_users and AccountService(dependencies.memory_store).seed_demo_users():
            logging.info("Seeded demo users", extra={"step": "seed_demo_users", "backend": "memory"})
        return

    init_db()
    if not settings.seed_demo_users:
        return
    db = SessionLocal()
    try:
        if AccountService(SqlLedgerStore(db)).seed_demo_users():
            logging.info("Seeded demo users", extra={"step": "seed_demo_users", "backend": "sql"})
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.bootstrap:
        bootstrap()
    yield


def create_app(run_bootstrap: bool = True) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Ledger",
        description="Microfinance loan origination, disbursement and repayment ledger",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.bootstrap = run_bootstrap

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(eligibility.router, prefix="/v1", tags=["eligibility"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(repayments.router, prefix="/v1", tags=["repayments"])

    return app


app = create_app()
