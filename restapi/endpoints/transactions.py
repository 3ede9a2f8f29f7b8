"""Ledger transaction and transfer endpoints for the API."""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import SuccessResponse
from components.ledger.repository import TransactionRepository, TransferRepository
from components.ledger import schemas
from restapi.endpoints.auth import get_current_owner_id

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    responses={404: {"description": "Not found"}},
)

transfers_router = APIRouter(
    prefix="/transfers",
    tags=["transfers"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.Transaction, status_code=201)
async def create_transaction(
    transaction: schemas.TransactionCreate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Record a ledger entry.

    Validations:
    - Account and category must belong to the current owner
    - Amount must not be zero
    - Expense categories require a negative amount, income categories a positive one
    """
    repo = TransactionRepository(db)
    return await repo.create(owner_id, transaction)


@router.get("/", response_model=List[schemas.Transaction])
async def read_transactions(
    account_id: Optional[int] = Query(None, description="Filter by account"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    from_date: Optional[date] = Query(None, description="Only entries on or after this date"),
    to_date: Optional[date] = Query(None, description="Only entries on or before this date"),
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get ledger entries with optional filtering, newest first."""
    repo = TransactionRepository(db)
    return await repo.list(
        owner_id,
        account_id=account_id,
        category_id=category_id,
        from_date=from_date,
        to_date=to_date
    )


@router.put("/{transaction_id}", response_model=schemas.Transaction)
async def update_transaction(
    transaction_id: int,
    transaction: schemas.TransactionUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Replace a ledger entry; balances of the old and new account are adjusted."""
    repo = TransactionRepository(db)
    return await repo.update(owner_id, transaction_id, transaction)


@router.delete("/{transaction_id}", response_model=SuccessResponse)
async def delete_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Delete a ledger entry and reverse its amount."""
    repo = TransactionRepository(db)
    await repo.delete(owner_id, transaction_id)
    return SuccessResponse()


@transfers_router.post("/", response_model=schemas.Transfer, status_code=201)
async def create_transfer(
    transfer: schemas.TransferCreate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Move money between two accounts of the current owner."""
    repo = TransferRepository(db)
    return await repo.create(owner_id, transfer)


@transfers_router.get("/", response_model=List[schemas.Transfer])
async def read_transfers(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get transfers, newest first."""
    repo = TransferRepository(db)
    return await repo.list(owner_id)


@transfers_router.delete("/{transfer_id}", response_model=SuccessResponse)
async def delete_transfer(
    transfer_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Delete a transfer that is not backing a statement payment."""
    repo = TransferRepository(db)
    await repo.delete(owner_id, transfer_id)
    return SuccessResponse()
