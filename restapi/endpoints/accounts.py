"""Account endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.account.repository import AccountRepository
from components.account import schemas
from restapi.endpoints.auth import get_current_owner_id

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.Account, status_code=201)
async def create_account(
    account: schemas.AccountCreate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Create a new account. The balance starts at zero and only moves through the ledger."""
    repo = AccountRepository(db)
    return await repo.create(owner_id, account)


@router.get("/", response_model=List[schemas.Account])
async def read_accounts(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get accounts of the current owner, active first."""
    repo = AccountRepository(db)
    return await repo.list(owner_id)


@router.get("/{account_id}", response_model=schemas.Account)
async def read_account(
    account_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get a specific account by ID."""
    repo = AccountRepository(db)
    return await repo.get_owned(owner_id, account_id)


@router.get("/{account_id}/reconcile", response_model=schemas.BalanceCheck)
async def reconcile_account(
    account_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Compare the stored balance with the ledger.

    Responds 500 when they disagree; nothing is corrected.
    """
    repo = AccountRepository(db)
    return await repo.reconcile(owner_id, account_id)


@router.put("/{account_id}/credit-card-settings", response_model=schemas.CreditCardSettings)
async def put_credit_card_settings(
    account_id: int,
    settings: schemas.CreditCardSettingsIn,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Create or replace billing settings of a credit account."""
    repo = AccountRepository(db)
    return await repo.upsert_credit_card_settings(owner_id, account_id, settings)
