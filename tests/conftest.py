"""
Shared fixtures.

Every test gets its own SQLite file through aiosqlite, so repositories run
against a real database with real transactions and rollbacks.
"""

from datetime import date

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from components.account.repository import AccountRepository
from components.account.schemas import AccountCreate, CreditCardSettingsIn
from components.budget.repository import BudgetPeriodRepository
from components.category.repository import CategoryRepository
from components.core import init_db
from components.core.database import DatabaseManager
from components.core.security import create_access_token
from components.ledger.repository import TransactionRepository
from components.ledger.schemas import TransactionCreate
from restapi.router import create_app


@pytest.fixture
def owner_id() -> str:
    return "owner-1"


@pytest.fixture
def other_owner_id() -> str:
    return "owner-2"


@pytest_asyncio.fixture
async def db_manager(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    manager = DatabaseManager(engine=engine)
    await manager.create_all()
    yield manager
    await manager.drop_all()
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_manager):
    async with db_manager.get_db() as db:
        yield db


class LedgerFactory:
    """Builds committed rows for one owner."""

    def __init__(self, session, owner_id: str):
        self.session = session
        self.owner_id = owner_id

    async def category(self, name: str, kind: str = "expense", owner_id: str = None):
        category = await CategoryRepository(self.session).add(owner_id or self.owner_id, name, kind)
        await self.session.commit()
        return category

    async def account(self, name: str = "Checking", type: str = "debit", owner_id: str = None):
        return await AccountRepository(self.session).create(
            owner_id or self.owner_id,
            AccountCreate(name=name, type=type, currency="MXN"),
        )

    async def credit_card(self, name: str = "Gold Card", grace_days: int = 20):
        account = await self.account(name=name, type="credit_card")
        await AccountRepository(self.session).upsert_credit_card_settings(
            self.owner_id, account.id, CreditCardSettingsIn(statement_day=15, grace_days=grace_days)
        )
        return account

    async def period(self, month: str = "2024-01", income: int = 0, owner_id: str = None):
        period = await BudgetPeriodRepository(self.session).get_or_create(
            owner_id or self.owner_id, month, "MXN", expected_income_amount=income
        )
        await self.session.commit()
        return period

    async def transaction(self, account_id: int, category_id: int, amount: int, on: date = date(2024, 1, 10)):
        return await TransactionRepository(self.session).create(
            self.owner_id,
            TransactionCreate(
                account_id=account_id,
                category_id=category_id,
                description="Purchase" if amount < 0 else "Deposit",
                amount=amount,
                currency="MXN",
                date=on,
            ),
        )

    async def balance(self, account_id: int) -> int:
        return await AccountRepository(self.session).get_balance(self.owner_id, account_id)


@pytest.fixture
def factory(session, owner_id):
    return LedgerFactory(session, owner_id)


@pytest_asyncio.fixture
async def client(db_manager):
    app = create_app()

    async def override_get_db():
        async with db_manager.get_db() as db:
            yield db

    app.dependency_overrides[init_db.get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def auth_headers(owner_id):
    return {"Authorization": f"Bearer {create_access_token(owner_id)}"}


@pytest.fixture
def other_auth_headers(other_owner_id):
    return {"Authorization": f"Bearer {create_access_token(other_owner_id)}"}
