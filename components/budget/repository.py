"""Repositories for budget periods, income plan items and budget rules."""

from typing import List, Optional
from sqlalchemy import select, func, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from components.budget.models import BudgetPeriod, IncomePlanItem, BudgetRule, BudgetAllocation
from components.budget import schemas
from components.category.repository import CategoryRepository
from components.core import exceptions
from components.core.database import unit_of_work
from components.core.logger import get_logger

logger = get_logger(__name__)


class BudgetPeriodRepository:
    """Repository for budget period operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_owned(self, owner_id: str, budget_period_id: int) -> BudgetPeriod:
        result = await self.session.execute(
            select(BudgetPeriod).where(
                BudgetPeriod.id == budget_period_id, BudgetPeriod.owner_id == owner_id
            )
        )
        period = result.scalar_one_or_none()
        if period is None:
            raise exceptions.NotFoundError("Budget period not found for current user")
        return period

    async def get_by_month(self, owner_id: str, month: str) -> Optional[BudgetPeriod]:
        result = await self.session.execute(
            select(BudgetPeriod).where(BudgetPeriod.owner_id == owner_id, BudgetPeriod.month == month)
        )
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        owner_id: str,
        month: str,
        currency: str,
        expected_income_amount: int = 0,
        notes: Optional[str] = None,
    ) -> BudgetPeriod:
        """
        Return the owner's period for a month, creating it when missing.

        An existing period is returned untouched. Does not commit, so it can
        run inside a larger unit of work such as installment materialization.
        """
        period = await self.get_by_month(owner_id, month)
        if period is not None:
            return period

        period = BudgetPeriod(
            owner_id=owner_id,
            month=month,
            currency=currency.upper(),
            expected_income_amount=expected_income_amount,
            notes=notes.strip() if notes else None,
        )
        self.session.add(period)
        await self.session.flush()
        logger.info("budget_period_created", owner_id=owner_id, budget_period_id=period.id, month=month)
        return period

    async def list(self, owner_id: str) -> List[BudgetPeriod]:
        result = await self.session.execute(
            select(BudgetPeriod).where(BudgetPeriod.owner_id == owner_id).order_by(BudgetPeriod.month.desc())
        )
        return list(result.scalars().all())

    async def update(
        self, owner_id: str, budget_period_id: int, data: schemas.BudgetPeriodUpdate
    ) -> BudgetPeriod:
        period = await self.get_owned(owner_id, budget_period_id)
        if data.currency is not None:
            period.currency = data.currency.upper()
        if data.expected_income_amount is not None:
            period.expected_income_amount = data.expected_income_amount
        if data.notes is not None:
            period.notes = data.notes.strip() or None
        await self.session.commit()
        await self.session.refresh(period)
        return period

    async def total_income(self, period: BudgetPeriod) -> int:
        """Explicit expected income, or the sum of income plan items when it is 0."""
        if period.expected_income_amount > 0:
            return int(period.expected_income_amount)
        result = await self.session.execute(
            select(func.coalesce(func.sum(IncomePlanItem.amount), 0)).where(
                IncomePlanItem.budget_period_id == period.id
            )
        )
        return int(result.scalar())

    async def list_income_items(self, owner_id: str, budget_period_id: int) -> List[IncomePlanItem]:
        await self.get_owned(owner_id, budget_period_id)
        result = await self.session.execute(
            select(IncomePlanItem)
            .where(IncomePlanItem.budget_period_id == budget_period_id)
            .order_by(IncomePlanItem.expected_date, IncomePlanItem.id)
        )
        return list(result.scalars().all())

    async def add_income_item(
        self, owner_id: str, budget_period_id: int, data: schemas.IncomePlanItemCreate
    ) -> IncomePlanItem:
        await self.get_owned(owner_id, budget_period_id)
        item = IncomePlanItem(
            owner_id=owner_id,
            budget_period_id=budget_period_id,
            name=data.name.strip(),
            amount=data.amount,
            expected_date=data.expected_date,
        )
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def delete_income_item(self, owner_id: str, item_id: int) -> None:
        result = await self.session.execute(
            delete(IncomePlanItem).where(IncomePlanItem.id == item_id, IncomePlanItem.owner_id == owner_id)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise exceptions.NotFoundError("Income plan item not found")
        await self.session.commit()


class BudgetRuleRepository:
    """Repository for budget rule operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self.categories = CategoryRepository(session)

    async def list(self, owner_id: str) -> List[BudgetRule]:
        """All rules of the owner in evaluation order."""
        result = await self.session.execute(
            select(BudgetRule)
            .where(BudgetRule.owner_id == owner_id)
            .order_by(BudgetRule.apply_order, BudgetRule.created_at, BudgetRule.id)
        )
        return list(result.scalars().all())

    async def get_owned(self, owner_id: str, rule_id: int) -> BudgetRule:
        result = await self.session.execute(
            select(BudgetRule).where(BudgetRule.id == rule_id, BudgetRule.owner_id == owner_id)
        )
        rule = result.scalar_one_or_none()
        if rule is None:
            raise exceptions.NotFoundError("Budget rule not found")
        return rule

    async def create(self, owner_id: str, data: schemas.BudgetRuleCreate) -> BudgetRule:
        await self.categories.get_owned(owner_id, data.category_id)
        rule = BudgetRule(owner_id=owner_id, **data.model_dump())
        rule.name = rule.name.strip()
        self.session.add(rule)
        await self.session.commit()
        await self.session.refresh(rule)
        logger.info("budget_rule_created", owner_id=owner_id, rule_id=rule.id, rule_type=rule.rule_type)
        return rule

    async def update(self, owner_id: str, rule_id: int, data: schemas.BudgetRuleUpdate) -> BudgetRule:
        rule = await self.get_owned(owner_id, rule_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("category_id") is not None:
            await self.categories.get_owned(owner_id, changes["category_id"])

        for field, value in changes.items():
            if value is None and field in ("name", "category_id", "rule_type", "value", "apply_order"):
                continue
            setattr(rule, field, value)

        if rule.min_amount is not None and rule.cap_amount is not None and rule.min_amount > rule.cap_amount:
            await self.session.rollback()
            raise exceptions.ValidationError("min_amount must not exceed cap_amount")
        if rule.active_from and rule.active_to and rule.active_from > rule.active_to:
            await self.session.rollback()
            raise exceptions.ValidationError("active_from must not be after active_to")

        await self.session.commit()
        await self.session.refresh(rule)
        return rule

    async def delete(self, owner_id: str, rule_id: int) -> None:
        """Delete a rule, detaching allocations that were generated from it."""
        async with unit_of_work(self.session):
            rule = await self.get_owned(owner_id, rule_id)
            await self.session.execute(
                update(BudgetAllocation)
                .where(BudgetAllocation.generated_from_rule_id == rule.id)
                .values(generated_from_rule_id=None)
                .execution_options(synchronize_session="evaluate")
            )
            await self.session.delete(rule)
