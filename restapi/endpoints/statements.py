"""Credit card statement endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.ledger.schemas import Transaction
from components.statement.repository import StatementRepository
from components.statement import schemas
from restapi.endpoints.auth import get_current_owner_id

router = APIRouter(
    prefix="/statements",
    tags=["statements"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Statement])
async def read_statements(
    account_id: Optional[int] = Query(None, description="Filter by credit account"),
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get statements, latest closing date first."""
    repo = StatementRepository(db)
    return await repo.list(owner_id, account_id=account_id)


@router.post("/close", response_model=schemas.Statement, status_code=201)
async def close_statement(
    statement: schemas.StatementClose,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Close a credit account period into a statement.

    Validations:
    - Account must be a credit account of the current owner
    - period_end must not be before period_start
    - Only one statement per account and exact period (409 otherwise)
    - Without due_date the account needs credit card settings
    """
    repo = StatementRepository(db)
    return await repo.close(owner_id, statement)


@router.get("/{statement_id}", response_model=schemas.Statement)
async def read_statement(
    statement_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get a specific statement."""
    repo = StatementRepository(db)
    return await repo.get_owned(owner_id, statement_id)


@router.post("/{statement_id}/payments", response_model=schemas.Statement)
async def record_payment(
    statement_id: int,
    payment: schemas.StatementPaymentIn,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Pay a statement from another account; returns the updated statement."""
    repo = StatementRepository(db)
    return await repo.record_payment(owner_id, statement_id, payment)


@router.get("/{statement_id}/payments", response_model=List[schemas.StatementPayment])
async def read_payments(
    statement_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get payments applied to a statement."""
    repo = StatementRepository(db)
    return await repo.list_payments(owner_id, statement_id)


@router.get("/{statement_id}/transactions", response_model=List[Transaction])
async def read_statement_transactions(
    statement_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get ledger entries attached to a statement at close time."""
    repo = StatementRepository(db)
    return await repo.list_transactions(owner_id, statement_id)
