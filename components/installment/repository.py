"""Repository for installment plan operations."""

from collections import defaultdict
from typing import Dict, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.account.repository import AccountRepository
from components.budget.repository import BudgetPeriodRepository
from components.category.repository import CategoryRepository
from components.core import exceptions
from components.core.database import unit_of_work
from components.core.logger import get_logger
from components.installment.models import InstallmentPlan
from components.installment.splitter import build_schedule, month_key
from components.installment import schemas
from components.ledger.models import Transaction

logger = get_logger(__name__)


class InstallmentPlanRepository:
    """Repository for installment plan operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self.accounts = AccountRepository(session)
        self.categories = CategoryRepository(session)
        self.periods = BudgetPeriodRepository(session)

    async def list(self, owner_id: str) -> List[InstallmentPlan]:
        result = await self.session.execute(
            select(InstallmentPlan)
            .where(InstallmentPlan.owner_id == owner_id)
            .order_by(InstallmentPlan.status, InstallmentPlan.id.desc())
        )
        return list(result.scalars().all())

    async def get_owned(self, owner_id: str, plan_id: int) -> InstallmentPlan:
        result = await self.session.execute(
            select(InstallmentPlan).where(InstallmentPlan.id == plan_id, InstallmentPlan.owner_id == owner_id)
        )
        plan = result.scalar_one_or_none()
        if plan is None:
            raise exceptions.NotFoundError("Installment plan not found")
        return plan

    async def list_entries(self, owner_id: str, plan_id: int) -> List[Transaction]:
        """Generated ledger entries of a plan, by installment number."""
        result = await self.session.execute(
            select(Transaction)
            .where(Transaction.owner_id == owner_id, Transaction.installment_plan_id == plan_id)
            .order_by(Transaction.installment_number)
        )
        return list(result.scalars().all())

    async def _validate(self, owner_id: str, data: schemas.InstallmentPlanIn) -> None:
        await self.accounts.get_owned_credit(owner_id, data.account_id)
        category = await self.categories.get_owned(owner_id, data.category_id)
        if category.kind == "income":
            raise exceptions.ValidationError("Installment plans cannot use an income category")

    async def remove_entries(self, owner_id: str, plan_id: int) -> int:
        """
        Delete every ledger entry generated for a plan.

        Each entry's amount is reversed on the account it was booked on,
        which may differ from the plan's current account after an edit.
        """
        entries = await self.list_entries(owner_id, plan_id)
        reversal: Dict[int, int] = defaultdict(int)
        for entry in entries:
            reversal[entry.account_id] -= entry.amount
            await self.session.delete(entry)
        await self.session.flush()

        for account_id, delta in reversal.items():
            if delta:
                await self.accounts.apply_delta(owner_id, account_id, delta)
        return len(entries)

    async def materialize(self, owner_id: str, plan: InstallmentPlan) -> List[Transaction]:
        """
        Replace the plan's ledger entries with a freshly generated schedule.

        Delete-then-insert inside the caller's unit of work. Two concurrent
        calls for the same plan are not serialized and may interleave.
        """
        await self.remove_entries(owner_id, plan.id)

        entries = []
        for number, due_date, amount in build_schedule(plan.total_amount, plan.months, plan.start_date):
            period = await self.periods.get_or_create(owner_id, month_key(due_date), plan.currency)
            entries.append(
                Transaction(
                    owner_id=owner_id,
                    account_id=plan.account_id,
                    category_id=plan.category_id,
                    budget_period_id=period.id,
                    installment_plan_id=plan.id,
                    installment_number=number,
                    description=f"{plan.description} ({number}/{plan.months})",
                    amount=-amount,
                    currency=plan.currency,
                    date=due_date,
                    source="installment",
                )
            )
        self.session.add_all(entries)
        await self.session.flush()

        total = sum(entry.amount for entry in entries)
        if total:
            await self.accounts.apply_delta(owner_id, plan.account_id, total)
        return entries

    async def _sync_entries(self, owner_id: str, plan: InstallmentPlan) -> None:
        if plan.status == "active":
            await self.materialize(owner_id, plan)
        else:
            await self.remove_entries(owner_id, plan.id)

    async def create(self, owner_id: str, data: schemas.InstallmentPlanIn) -> InstallmentPlan:
        async with unit_of_work(self.session):
            await self._validate(owner_id, data)
            plan = InstallmentPlan(owner_id=owner_id, **data.model_dump())
            plan.description = plan.description.strip()
            plan.currency = plan.currency.upper()
            self.session.add(plan)
            await self.session.flush()
            await self._sync_entries(owner_id, plan)

        logger.info(
            "installment_plan_created",
            owner_id=owner_id,
            plan_id=plan.id,
            total_amount=plan.total_amount,
            months=plan.months,
            status=plan.status,
        )
        return plan

    async def update(self, owner_id: str, plan_id: int, data: schemas.InstallmentPlanIn) -> InstallmentPlan:
        """Replace every plan field. Active plans are fully regenerated."""
        async with unit_of_work(self.session):
            plan = await self.get_owned(owner_id, plan_id)
            await self._validate(owner_id, data)
            for field, value in data.model_dump().items():
                setattr(plan, field, value)
            plan.description = plan.description.strip()
            plan.currency = plan.currency.upper()
            await self.session.flush()
            await self._sync_entries(owner_id, plan)

        logger.info("installment_plan_updated", owner_id=owner_id, plan_id=plan.id, status=plan.status)
        return plan

    async def cancel(self, owner_id: str, plan_id: int) -> InstallmentPlan:
        """Flip the plan to cancelled and delete its generated entries."""
        async with unit_of_work(self.session):
            plan = await self.get_owned(owner_id, plan_id)
            plan.status = "cancelled"
            await self.session.flush()
            removed = await self.remove_entries(owner_id, plan.id)

        logger.info("installment_plan_cancelled", owner_id=owner_id, plan_id=plan_id, entries_removed=removed)
        return plan
