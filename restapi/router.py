"""Application configuration and router setup."""

import fastapi
from fastapi.middleware import cors
from fastapi.responses import JSONResponse

from components.core import init_db
from components.core.config import get_settings
from components.core.exceptions import LedgerError
from components.core.schemas import ErrorResponse
from components.core.logger import configure_logging, get_logger
from restapi.endpoints import health_check, accounts, transactions, budget, installment_plans, statements

logger = get_logger(__name__)


async def ledger_error_handler(request: fastapi.Request, exc: LedgerError) -> JSONResponse:
    """Map domain errors to their HTTP status."""
    logger.warning(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        detail=exc.message,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.message).model_dump(),
        headers=headers,
    )


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging()

    app = fastapi.FastAPI(
        title="Finance Ledger",
        description="Accounts, budgets, installment plans and credit card statements",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=init_db.lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)

    # Include routers
    app.include_router(health_check.router)
    app.include_router(accounts.router)
    app.include_router(transactions.router)
    app.include_router(transactions.transfers_router)
    app.include_router(budget.router)
    app.include_router(budget.rules_router)
    app.include_router(installment_plans.router)
    app.include_router(statements.router)

    return app
