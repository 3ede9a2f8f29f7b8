"""Repository for account operations and the balance ledger accessor."""

from typing import List
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from components.account.models import Account, CreditCardSettings, CREDIT_ACCOUNT_TYPES
from components.account import schemas
from components.core import exceptions
from components.core.logger import get_logger
from components.ledger.models import Transaction, Transfer

logger = get_logger(__name__)


class AccountRepository:
    """Repository for account operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def apply_delta(self, owner_id: str, account_id: int, delta: int) -> None:
        """
        Atomically add a signed delta to an account balance.

        The increment is a single UPDATE evaluated by the database, so it
        never reads the balance first. It runs in the caller's transaction;
        raising NotFoundError here rolls the whole unit of work back.
        """
        result = await self.session.execute(
            update(Account)
            .where(Account.id == account_id, Account.owner_id == owner_id)
            .values(current_balance=Account.current_balance + delta)
            .execution_options(synchronize_session="evaluate")
        )
        if result.rowcount != 1:
            logger.warning("balance_delta_rejected", owner_id=owner_id, account_id=account_id, delta=delta)
            raise exceptions.NotFoundError("Account not found for current user")
        logger.debug("balance_delta_applied", owner_id=owner_id, account_id=account_id, delta=delta)

    async def get_owned(self, owner_id: str, account_id: int) -> Account:
        """Get an account owned by the caller or raise NotFoundError."""
        result = await self.session.execute(
            select(Account).where(Account.id == account_id, Account.owner_id == owner_id)
        )
        account = result.scalar_one_or_none()
        if account is None:
            raise exceptions.NotFoundError("Account not found for current user")
        return account

    async def get_owned_credit(self, owner_id: str, account_id: int) -> Account:
        """Get an owned account of a credit type."""
        account = await self.get_owned(owner_id, account_id)
        if account.type not in CREDIT_ACCOUNT_TYPES:
            raise exceptions.ValidationError("A credit account is required")
        return account

    async def get_balance(self, owner_id: str, account_id: int) -> int:
        """Read the stored balance straight from the database."""
        result = await self.session.execute(
            select(Account.current_balance).where(
                Account.id == account_id, Account.owner_id == owner_id
            )
        )
        balance = result.scalar_one_or_none()
        if balance is None:
            raise exceptions.NotFoundError("Account not found for current user")
        return int(balance)

    async def list(self, owner_id: str) -> List[Account]:
        result = await self.session.execute(
            select(Account)
            .where(Account.owner_id == owner_id)
            .order_by(Account.is_active.desc(), Account.id)
        )
        return list(result.scalars().all())

    async def create(self, owner_id: str, data: schemas.AccountCreate) -> Account:
        """Create a new account with a zero balance."""
        account = Account(
            owner_id=owner_id,
            name=data.name.strip(),
            type=data.type,
            currency=data.currency.upper(),
            current_balance=0,
            is_active=data.is_active,
        )
        self.session.add(account)
        await self.session.commit()
        await self.session.refresh(account)
        logger.info("account_created", owner_id=owner_id, account_id=account.id, type=account.type)
        return account

    async def get_credit_card_settings(self, account_id: int):
        result = await self.session.execute(
            select(CreditCardSettings).where(CreditCardSettings.account_id == account_id)
        )
        return result.scalar_one_or_none()

    async def upsert_credit_card_settings(
        self, owner_id: str, account_id: int, data: schemas.CreditCardSettingsIn
    ) -> CreditCardSettings:
        """Create or replace the billing settings of a credit account."""
        await self.get_owned_credit(owner_id, account_id)
        settings = await self.get_credit_card_settings(account_id)
        if settings is None:
            settings = CreditCardSettings(account_id=account_id)
            self.session.add(settings)
        settings.statement_day = data.statement_day
        settings.grace_days = data.grace_days
        settings.credit_limit = data.credit_limit
        await self.session.commit()
        await self.session.refresh(settings)
        return settings

    async def reconcile(self, owner_id: str, account_id: int) -> schemas.BalanceCheck:
        """
        Compare the stored balance with the ledger.

        Expected balance is the sum of the account's transactions plus
        incoming transfers minus outgoing transfers. A mismatch raises
        InvariantViolationError and nothing is corrected.
        """
        stored = await self.get_balance(owner_id, account_id)

        result = await self.session.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0)).where(
                Transaction.account_id == account_id, Transaction.owner_id == owner_id
            )
        )
        transactions_total = int(result.scalar())

        result = await self.session.execute(
            select(func.coalesce(func.sum(Transfer.amount), 0)).where(
                Transfer.dest_account_id == account_id, Transfer.owner_id == owner_id
            )
        )
        transfers_in = int(result.scalar())

        result = await self.session.execute(
            select(func.coalesce(func.sum(Transfer.amount), 0)).where(
                Transfer.source_account_id == account_id, Transfer.owner_id == owner_id
            )
        )
        transfers_out = int(result.scalar())

        check = schemas.BalanceCheck(
            account_id=account_id,
            stored_balance=stored,
            transactions_total=transactions_total,
            transfers_in=transfers_in,
            transfers_out=transfers_out,
            expected_balance=transactions_total + transfers_in - transfers_out,
        )
        if check.expected_balance != check.stored_balance:
            logger.error("balance_mismatch", owner_id=owner_id, **check.model_dump())
            raise exceptions.InvariantViolationError(
                f"Account {account_id} balance {stored} does not match ledger total {check.expected_balance}"
            )
        return check
