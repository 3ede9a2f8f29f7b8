"""Repositories for ledger transactions and transfers."""

from datetime import date
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.account.repository import AccountRepository
from components.budget.repository import BudgetPeriodRepository
from components.category.models import Category
from components.category.repository import CategoryRepository
from components.core import exceptions
from components.core.database import unit_of_work
from components.core.logger import get_logger
from components.ledger.models import Transaction, Transfer
from components.ledger import schemas

logger = get_logger(__name__)


def check_amount_sign(category: Category, amount: int) -> None:
    """
    Reject amounts whose sign contradicts the category kind.

    Expense categories forbid positive amounts, income categories forbid
    negative ones. Other kinds accept either sign.
    """
    if amount == 0:
        raise exceptions.ValidationError("Amount must not be zero")
    if category.kind == "expense" and amount > 0:
        raise exceptions.ValidationError("Expense transactions must have a negative amount")
    if category.kind == "income" and amount < 0:
        raise exceptions.ValidationError("Income transactions must have a positive amount")


class TransactionRepository:
    """Ledger writer. Every row change moves the account balance in the same transaction."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self.accounts = AccountRepository(session)
        self.categories = CategoryRepository(session)
        self.periods = BudgetPeriodRepository(session)

    async def get_owned(self, owner_id: str, transaction_id: int) -> Transaction:
        result = await self.session.execute(
            select(Transaction).where(Transaction.id == transaction_id, Transaction.owner_id == owner_id)
        )
        transaction = result.scalar_one_or_none()
        if transaction is None:
            raise exceptions.NotFoundError("Transaction not found")
        return transaction

    async def list(
        self,
        owner_id: str,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> List[Transaction]:
        """Get transactions with optional filtering."""
        query = select(Transaction).where(Transaction.owner_id == owner_id)

        if account_id is not None:
            query = query.where(Transaction.account_id == account_id)
        if category_id is not None:
            query = query.where(Transaction.category_id == category_id)
        if from_date:
            query = query.where(Transaction.date >= from_date)
        if to_date:
            query = query.where(Transaction.date <= to_date)

        query = query.order_by(Transaction.date.desc(), Transaction.id.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _validate(self, owner_id: str, data: schemas.TransactionBase) -> None:
        await self.accounts.get_owned(owner_id, data.account_id)
        category = await self.categories.get_owned(owner_id, data.category_id)
        if data.budget_period_id is not None:
            await self.periods.get_owned(owner_id, data.budget_period_id)
        check_amount_sign(category, data.amount)

    async def create(self, owner_id: str, data: schemas.TransactionCreate) -> Transaction:
        """Insert a ledger entry and apply its amount to the account balance."""
        async with unit_of_work(self.session):
            await self._validate(owner_id, data)
            transaction = Transaction(
                owner_id=owner_id,
                account_id=data.account_id,
                category_id=data.category_id,
                budget_period_id=data.budget_period_id,
                description=data.description.strip(),
                amount=data.amount,
                currency=data.currency.upper(),
                date=data.date,
                source="manual",
                project_id=data.project_id,
            )
            self.session.add(transaction)
            await self.session.flush()
            await self.accounts.apply_delta(owner_id, data.account_id, data.amount)

        logger.info(
            "transaction_created",
            owner_id=owner_id,
            transaction_id=transaction.id,
            account_id=transaction.account_id,
            amount=transaction.amount,
        )
        return transaction

    async def update(self, owner_id: str, transaction_id: int, data: schemas.TransactionUpdate) -> Transaction:
        """
        Replace a ledger entry and re-derive the balance change.

        Same account: apply new - old. Account changed: reverse the old
        amount on the old account and apply the new amount on the new one.
        """
        async with unit_of_work(self.session):
            transaction = await self.get_owned(owner_id, transaction_id)
            await self._validate(owner_id, data)

            old_account_id = transaction.account_id
            old_amount = transaction.amount

            transaction.account_id = data.account_id
            transaction.category_id = data.category_id
            transaction.budget_period_id = data.budget_period_id
            transaction.description = data.description.strip()
            transaction.amount = data.amount
            transaction.currency = data.currency.upper()
            transaction.date = data.date
            transaction.project_id = data.project_id
            await self.session.flush()

            if old_account_id == data.account_id:
                delta = data.amount - old_amount
                if delta:
                    await self.accounts.apply_delta(owner_id, data.account_id, delta)
            else:
                await self.accounts.apply_delta(owner_id, old_account_id, -old_amount)
                await self.accounts.apply_delta(owner_id, data.account_id, data.amount)

        logger.info(
            "transaction_updated",
            owner_id=owner_id,
            transaction_id=transaction_id,
            old_account_id=old_account_id,
            account_id=data.account_id,
            old_amount=old_amount,
            amount=data.amount,
        )
        return transaction

    async def delete(self, owner_id: str, transaction_id: int) -> None:
        """Reverse the stored amount from its account and remove the row."""
        async with unit_of_work(self.session):
            transaction = await self.get_owned(owner_id, transaction_id)
            account_id = transaction.account_id
            amount = transaction.amount
            await self.session.delete(transaction)
            await self.session.flush()
            await self.accounts.apply_delta(owner_id, account_id, -amount)

        logger.info(
            "transaction_deleted",
            owner_id=owner_id,
            transaction_id=transaction_id,
            account_id=account_id,
            amount=amount,
        )


class TransferRepository:
    """Cross-account money movements."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self.accounts = AccountRepository(session)

    async def list(self, owner_id: str) -> List[Transfer]:
        result = await self.session.execute(
            select(Transfer)
            .where(Transfer.owner_id == owner_id)
            .order_by(Transfer.date.desc(), Transfer.id.desc())
        )
        return list(result.scalars().all())

    async def add(
        self,
        owner_id: str,
        source_account_id: int,
        dest_account_id: int,
        amount: int,
        currency: str,
        on_date: date,
        notes: Optional[str] = None,
    ) -> Transfer:
        """
        Stage a transfer and move both balances, without committing.

        Callers wrap this in their own unit of work; statement payments use
        it next to their payment bookkeeping.
        """
        if amount <= 0:
            raise exceptions.ValidationError("Transfer amount must be positive")
        if source_account_id == dest_account_id:
            raise exceptions.ValidationError("Destination account must be different from source account")

        transfer = Transfer(
            owner_id=owner_id,
            source_account_id=source_account_id,
            dest_account_id=dest_account_id,
            amount=amount,
            currency=currency.upper(),
            date=on_date,
            notes=notes.strip() if notes and notes.strip() else None,
        )
        self.session.add(transfer)
        await self.session.flush()
        await self.accounts.apply_delta(owner_id, source_account_id, -amount)
        await self.accounts.apply_delta(owner_id, dest_account_id, amount)
        return transfer

    async def create(self, owner_id: str, data: schemas.TransferCreate) -> Transfer:
        async with unit_of_work(self.session):
            transfer = await self.add(
                owner_id,
                data.source_account_id,
                data.dest_account_id,
                data.amount,
                data.currency,
                data.date,
                data.notes,
            )

        logger.info(
            "transfer_created",
            owner_id=owner_id,
            transfer_id=transfer.id,
            source_account_id=transfer.source_account_id,
            dest_account_id=transfer.dest_account_id,
            amount=transfer.amount,
        )
        return transfer

    async def delete(self, owner_id: str, transfer_id: int) -> None:
        """Delete a transfer and reverse both balance changes."""
        # Imported here: the statement package depends on this module.
        from components.statement.models import StatementPayment

        async with unit_of_work(self.session):
            result = await self.session.execute(
                select(Transfer).where(Transfer.id == transfer_id, Transfer.owner_id == owner_id)
            )
            transfer = result.scalar_one_or_none()
            if transfer is None:
                raise exceptions.NotFoundError("Transfer not found")

            result = await self.session.execute(
                select(StatementPayment.id).where(StatementPayment.transfer_id == transfer.id)
            )
            if result.first() is not None:
                raise exceptions.ConflictError("Transfer backs a statement payment and cannot be deleted")

            await self.accounts.apply_delta(owner_id, transfer.source_account_id, transfer.amount)
            await self.accounts.apply_delta(owner_id, transfer.dest_account_id, -transfer.amount)
            await self.session.delete(transfer)

        logger.info("transfer_deleted", owner_id=owner_id, transfer_id=transfer_id)
