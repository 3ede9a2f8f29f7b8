"""Budget period, income plan, rule and allocation endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import MONTH_PATTERN, SuccessResponse
from components.budget.repository import BudgetPeriodRepository, BudgetRuleRepository
from components.budget.service import BudgetAllocationService
from components.budget import schemas
from restapi.endpoints.auth import get_current_owner_id

router = APIRouter(
    prefix="/budget-periods",
    tags=["budget"],
    responses={404: {"description": "Not found"}},
)

rules_router = APIRouter(
    prefix="/budget-rules",
    tags=["budget"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.BudgetPeriod)
async def get_or_create_period(
    period: schemas.BudgetPeriodCreate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Get the period for a month, creating it when missing.

    An existing period is returned as is; use PUT to change it.
    """
    repo = BudgetPeriodRepository(db)
    result = await repo.get_or_create(
        owner_id,
        period.month,
        period.currency,
        expected_income_amount=period.expected_income_amount,
        notes=period.notes
    )
    await db.commit()
    return result


@router.get("/", response_model=List[schemas.BudgetPeriod])
async def read_periods(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get budget periods, latest month first."""
    repo = BudgetPeriodRepository(db)
    return await repo.list(owner_id)


@router.get("/by-month/{month}", response_model=schemas.BudgetPeriod)
async def read_period_by_month(
    month: str = Path(..., pattern=MONTH_PATTERN),
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get the budget period of a YYYY-MM month."""
    repo = BudgetPeriodRepository(db)
    period = await repo.get_by_month(owner_id, month)
    if period is None:
        raise HTTPException(status_code=404, detail=f"No budget period for {month}")
    return period


@router.put("/{budget_period_id}", response_model=schemas.BudgetPeriod)
async def update_period(
    budget_period_id: int,
    period: schemas.BudgetPeriodUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Update expected income, currency or notes of a period."""
    repo = BudgetPeriodRepository(db)
    return await repo.update(owner_id, budget_period_id, period)


@router.get("/{budget_period_id}/income-items", response_model=List[schemas.IncomePlanItem])
async def read_income_items(
    budget_period_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get income plan items of a period."""
    repo = BudgetPeriodRepository(db)
    return await repo.list_income_items(owner_id, budget_period_id)


@router.post("/{budget_period_id}/income-items", response_model=schemas.IncomePlanItem, status_code=201)
async def create_income_item(
    budget_period_id: int,
    item: schemas.IncomePlanItemCreate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Add an expected income line. Used when the period has no explicit income."""
    repo = BudgetPeriodRepository(db)
    return await repo.add_income_item(owner_id, budget_period_id, item)


@router.delete("/income-items/{item_id}", response_model=SuccessResponse)
async def delete_income_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Delete an income plan item."""
    repo = BudgetPeriodRepository(db)
    await repo.delete_income_item(owner_id, item_id)
    return SuccessResponse()


@router.get("/{budget_period_id}/allocations", response_model=List[schemas.BudgetAllocation])
async def read_allocations(
    budget_period_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get planned allocations of a period, largest first."""
    service = BudgetAllocationService(db)
    return await service.list_allocations(owner_id, budget_period_id)


@router.post("/{budget_period_id}/allocations/generate", response_model=List[schemas.BudgetAllocation])
async def generate_allocations(
    budget_period_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Run the active budget rules over the period's income.

    Manually overridden categories are left untouched. Leftover income goes
    to the Buffer category when one exists.
    """
    service = BudgetAllocationService(db)
    return await service.generate_allocations(owner_id, budget_period_id)


@router.put("/{budget_period_id}/allocations/{category_id}", response_model=schemas.BudgetAllocation)
async def override_allocation(
    budget_period_id: int,
    category_id: int,
    override: schemas.AllocationOverride,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Pin a category's planned amount so regeneration keeps it."""
    service = BudgetAllocationService(db)
    return await service.set_allocation_override(
        owner_id, budget_period_id, category_id, override.planned_amount
    )


@rules_router.get("/", response_model=List[schemas.BudgetRule])
async def read_rules(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Get budget rules in evaluation order."""
    repo = BudgetRuleRepository(db)
    return await repo.list(owner_id)


@rules_router.post("/", response_model=schemas.BudgetRule, status_code=201)
async def create_rule(
    rule: schemas.BudgetRuleCreate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Create a budget rule.

    - fixed: value is an amount in minor units
    - percent_of_income: value is basis points (10000 = 100%) of the income
      still unallocated when the rule runs
    """
    repo = BudgetRuleRepository(db)
    return await repo.create(owner_id, rule)


@rules_router.put("/{rule_id}", response_model=schemas.BudgetRule)
async def update_rule(
    rule_id: int,
    rule: schemas.BudgetRuleUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Partially update a budget rule."""
    repo = BudgetRuleRepository(db)
    return await repo.update(owner_id, rule_id, rule)


@rules_router.delete("/{rule_id}", response_model=SuccessResponse)
async def delete_rule(
    rule_id: int,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Delete a budget rule."""
    repo = BudgetRuleRepository(db)
    await repo.delete(owner_id, rule_id)
    return SuccessResponse()
