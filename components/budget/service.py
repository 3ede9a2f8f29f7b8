"""Budget allocation service: runs the rule engine over a budget period."""

from typing import Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.budget.models import BudgetAllocation
from components.budget.repository import BudgetPeriodRepository, BudgetRuleRepository
from components.budget.rules import evaluate_rules, is_rule_active
from components.category.repository import CategoryRepository
from components.core import exceptions
from components.core.config import get_settings
from components.core.database import unit_of_work
from components.core.logger import get_logger

logger = get_logger(__name__)


class BudgetAllocationService:
    """Generates, overrides and lists planned allocations per budget period."""

    def __init__(self, session: AsyncSession, buffer_category_name: Optional[str] = None):
        """Initialize service with database session."""
        self.session = session
        self.periods = BudgetPeriodRepository(session)
        self.rules = BudgetRuleRepository(session)
        self.categories = CategoryRepository(session)
        self.buffer_category_name = buffer_category_name or get_settings().BUFFER_CATEGORY_NAME

    async def list_allocations(self, owner_id: str, budget_period_id: int) -> List[BudgetAllocation]:
        await self.periods.get_owned(owner_id, budget_period_id)
        return await self._allocations_for(owner_id, budget_period_id)

    async def _allocations_for(self, owner_id: str, budget_period_id: int) -> List[BudgetAllocation]:
        result = await self.session.execute(
            select(BudgetAllocation)
            .where(
                BudgetAllocation.owner_id == owner_id,
                BudgetAllocation.budget_period_id == budget_period_id,
            )
            .order_by(BudgetAllocation.planned_amount.desc(), BudgetAllocation.id)
        )
        return list(result.scalars().all())

    async def _existing_by_category(self, budget_period_id: int) -> Dict[int, BudgetAllocation]:
        result = await self.session.execute(
            select(BudgetAllocation).where(BudgetAllocation.budget_period_id == budget_period_id)
        )
        return {allocation.category_id: allocation for allocation in result.scalars().all()}

    async def generate_allocations(self, owner_id: str, budget_period_id: int) -> List[BudgetAllocation]:
        """
        Regenerate rule-driven allocations for a period.

        Rows flagged as overrides are skipped entirely. Running this twice
        with unchanged rules and income yields the same planned amounts.
        """
        async with unit_of_work(self.session):
            period = await self.periods.get_owned(owner_id, budget_period_id)
            total_income = await self.periods.total_income(period)

            rules = [rule for rule in await self.rules.list(owner_id) if is_rule_active(rule, period.month)]
            buffer_category = await self.categories.find_by_name(owner_id, self.buffer_category_name)

            evaluation = evaluate_rules(
                rules,
                total_income,
                buffer_category_id=buffer_category.id if buffer_category else None,
            )

            existing = await self._existing_by_category(period.id)
            skipped = 0
            for category_id, planned in evaluation.allocations.items():
                allocation = existing.get(category_id)
                if allocation is not None and allocation.is_override:
                    skipped += 1
                    continue
                if allocation is None:
                    allocation = BudgetAllocation(
                        owner_id=owner_id,
                        budget_period_id=period.id,
                        category_id=category_id,
                    )
                    self.session.add(allocation)
                allocation.planned_amount = planned.planned_amount
                allocation.generated_from_rule_id = planned.rule_id
                allocation.is_override = False

            await self.session.flush()

        logger.info(
            "allocations_generated",
            owner_id=owner_id,
            budget_period_id=budget_period_id,
            total_income=total_income,
            remaining=evaluation.remaining,
            rules=len(rules),
            written=len(evaluation.allocations) - skipped,
            overrides_kept=skipped,
        )
        if evaluation.remaining < 0:
            logger.warning(
                "budget_overcommitted",
                owner_id=owner_id,
                budget_period_id=budget_period_id,
                remaining=evaluation.remaining,
            )
        return await self._allocations_for(owner_id, budget_period_id)

    async def set_allocation_override(
        self, owner_id: str, budget_period_id: int, category_id: int, planned_amount: int
    ) -> BudgetAllocation:
        """Pin a category's planned amount so regeneration leaves it alone."""
        if planned_amount < 0:
            raise exceptions.ValidationError("Planned amount must not be negative")

        async with unit_of_work(self.session):
            period = await self.periods.get_owned(owner_id, budget_period_id)
            await self.categories.get_owned(owner_id, category_id)

            existing = await self._existing_by_category(period.id)
            allocation = existing.get(category_id)
            if allocation is None:
                allocation = BudgetAllocation(
                    owner_id=owner_id,
                    budget_period_id=period.id,
                    category_id=category_id,
                )
                self.session.add(allocation)
            allocation.planned_amount = planned_amount
            allocation.is_override = True
            allocation.generated_from_rule_id = None
            await self.session.flush()

        logger.info(
            "allocation_overridden",
            owner_id=owner_id,
            budget_period_id=budget_period_id,
            category_id=category_id,
            planned_amount=planned_amount,
        )
        return allocation
