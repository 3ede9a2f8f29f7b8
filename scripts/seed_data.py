"""Script to seed demo data into the database."""

import asyncio
import sys
from datetime import date

from components.account import schemas as account_schemas
from components.account.repository import AccountRepository
from components.budget import schemas as budget_schemas
from components.budget.repository import BudgetPeriodRepository, BudgetRuleRepository
from components.budget.service import BudgetAllocationService
from components.category.repository import CategoryRepository
from components.core.init_db import get_db_manager
from components.core.logger import get_logger
from components.core.security import create_access_token
from components.installment import schemas as installment_schemas
from components.installment.repository import InstallmentPlanRepository
from components.ledger import schemas as ledger_schemas
from components.ledger.repository import TransactionRepository
from components.statement import schemas as statement_schemas
from components.statement.repository import StatementRepository

logger = get_logger(__name__)

DEMO_OWNER = "demo-owner"


async def seed_data(owner_id: str = DEMO_OWNER):
    """Seed accounts, categories, a budget month, an installment plan and a statement."""
    manager = get_db_manager()
    await manager.create_all()

    async with manager.get_db() as db:
        categories = CategoryRepository(db)
        food = await categories.add(owner_id, "Food", "expense")
        rent = await categories.add(owner_id, "Rent", "expense")
        electronics = await categories.add(owner_id, "Electronics", "expense")
        salary = await categories.add(owner_id, "Salary", "income")
        await categories.add(owner_id, "Buffer", "savings")
        await db.commit()

        accounts = AccountRepository(db)
        checking = await accounts.create(
            owner_id, account_schemas.AccountCreate(name="Checking", type="debit", currency="MXN")
        )
        card = await accounts.create(
            owner_id, account_schemas.AccountCreate(name="Gold Card", type="credit_card", currency="MXN")
        )
        await accounts.upsert_credit_card_settings(
            owner_id, card.id, account_schemas.CreditCardSettingsIn(statement_day=15, grace_days=20)
        )

        periods = BudgetPeriodRepository(db)
        period = await periods.get_or_create(owner_id, "2024-01", "MXN", expected_income_amount=100000)
        await db.commit()

        rules = BudgetRuleRepository(db)
        await rules.create(owner_id, budget_schemas.BudgetRuleCreate(
            name="Rent", category_id=rent.id, rule_type="fixed", value=35000, apply_order=0
        ))
        await rules.create(owner_id, budget_schemas.BudgetRuleCreate(
            name="Groceries", category_id=food.id, rule_type="percent_of_income", value=3000, apply_order=1
        ))
        await BudgetAllocationService(db).generate_allocations(owner_id, period.id)

        ledger = TransactionRepository(db)
        await ledger.create(owner_id, ledger_schemas.TransactionCreate(
            account_id=checking.id, category_id=salary.id, description="January salary",
            amount=100000, currency="MXN", date=date(2024, 1, 1), budget_period_id=period.id,
        ))
        await ledger.create(owner_id, ledger_schemas.TransactionCreate(
            account_id=card.id, category_id=food.id, description="Supermarket",
            amount=-4500, currency="MXN", date=date(2024, 1, 5), budget_period_id=period.id,
        ))

        await InstallmentPlanRepository(db).create(owner_id, installment_schemas.InstallmentPlanIn(
            account_id=card.id, category_id=electronics.id, description="Laptop",
            total_amount=120000, currency="MXN", months=12, start_date=date(2024, 1, 10),
        ))

        statement = await StatementRepository(db).close(owner_id, statement_schemas.StatementClose(
            account_id=card.id, period_start=date(2024, 1, 1), period_end=date(2024, 1, 15),
            closing_date=date(2024, 1, 15),
        ))

        logger.info(
            "seed_complete",
            owner_id=owner_id,
            checking_balance=await accounts.get_balance(owner_id, checking.id),
            card_balance=await accounts.get_balance(owner_id, card.id),
            statement_id=statement.id,
        )

    print(f"Bearer token for {owner_id}: {create_access_token(owner_id)}")


if __name__ == "__main__":
    asyncio.run(seed_data(*sys.argv[1:2]))
