"""Installment plan endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.installment.repository import InstallmentPlanRepository
from components.installment.splitter import build_schedule, month_key
from components.installment import schemas
from components.ledger.schemas import Transaction
from restapi.endpoints.auth import get_current_owner_id

router = APIRouter(
    prefix="/installment-plans",
    tags=["installments"],
    responses={404: {"description": "Not found"}},
)


def _detail(plan, entries) -> schemas.InstallmentPlanDetail:
    return schemas.InstallmentPlanDetail(
        plan=schemas.InstallmentPlan.model_validate(plan),
        entries=[Transaction.model_validate(entry) for entry in entries],
    )


@router.get("/", response_model=List[schemas.InstallmentPlan])
async def read_plans(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get installment plans of the current owner."""
    repo = InstallmentPlanRepository(db)
    return await repo.list(owner_id)


@router.post("/preview", response_model=List[schemas.InstallmentPreview])
async def preview_plan(
    plan: schemas.InstallmentPlanIn,
    owner_id: str = Depends(get_current_owner_id)
):
    """Show the installment schedule a plan would generate, without writing it."""
    return [
        schemas.InstallmentPreview(
            installment_number=number,
            date=due_date,
            amount=amount,
            month=month_key(due_date),
        )
        for number, due_date, amount in build_schedule(plan.total_amount, plan.months, plan.start_date)
    ]


@router.post("/", response_model=schemas.InstallmentPlanDetail, status_code=201)
async def create_plan(
    plan: schemas.InstallmentPlanIn,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Create an installment plan on a credit account.

    Active plans immediately get one ledger entry per month; the total is
    split so earlier installments carry the remainder.
    """
    repo = InstallmentPlanRepository(db)
    created = await repo.create(owner_id, plan)
    entries = await repo.list_entries(owner_id, created.id)
    return _detail(created, entries)


@router.get("/{plan_id}", response_model=schemas.InstallmentPlanDetail)
async def read_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get a plan with its generated entries."""
    repo = InstallmentPlanRepository(db)
    plan = await repo.get_owned(owner_id, plan_id)
    entries = await repo.list_entries(owner_id, plan_id)
    return _detail(plan, entries)


@router.put("/{plan_id}", response_model=schemas.InstallmentPlanDetail)
async def update_plan(
    plan_id: int,
    plan: schemas.InstallmentPlanIn,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Replace a plan. Active plans are regenerated from scratch, others lose their entries."""
    repo = InstallmentPlanRepository(db)
    updated = await repo.update(owner_id, plan_id, plan)
    entries = await repo.list_entries(owner_id, plan_id)
    return _detail(updated, entries)


@router.post("/{plan_id}/cancel", response_model=schemas.InstallmentPlan)
async def cancel_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Cancel a plan and delete its generated entries."""
    repo = InstallmentPlanRepository(db)
    return await repo.cancel(owner_id, plan_id)


@router.get("/{plan_id}/entries", response_model=List[Transaction])
async def read_plan_entries(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get the ledger entries generated for a plan, by installment number."""
    repo = InstallmentPlanRepository(db)
    await repo.get_owned(owner_id, plan_id)
    return await repo.list_entries(owner_id, plan_id)
