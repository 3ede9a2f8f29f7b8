"""Repository for credit card statement lifecycle operations."""

from datetime import timedelta
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from components.account.repository import AccountRepository
from components.core import exceptions
from components.core.database import unit_of_work, utcnow
from components.core.logger import get_logger
from components.ledger.models import Transaction
from components.ledger.repository import TransferRepository
from components.statement.models import CreditCardStatement, StatementPayment
from components.statement import schemas

logger = get_logger(__name__)


class StatementRepository:
    """
    Statement lifecycle: (none) -> closed -> partial <-> paid.

    A statement is created once per (account, period_start, period_end). Its
    balance is frozen at close time; only payments move payments_applied and
    status afterwards.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self.accounts = AccountRepository(session)
        self.transfers = TransferRepository(session)

    async def list(self, owner_id: str, account_id: Optional[int] = None) -> List[CreditCardStatement]:
        query = select(CreditCardStatement).where(CreditCardStatement.owner_id == owner_id)
        if account_id is not None:
            query = query.where(CreditCardStatement.account_id == account_id)
        query = query.order_by(CreditCardStatement.closing_date.desc(), CreditCardStatement.id.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_owned(self, owner_id: str, statement_id: int) -> CreditCardStatement:
        result = await self.session.execute(
            select(CreditCardStatement).where(
                CreditCardStatement.id == statement_id, CreditCardStatement.owner_id == owner_id
            )
        )
        statement = result.scalar_one_or_none()
        if statement is None:
            raise exceptions.NotFoundError("Statement not found for current user")
        return statement

    async def list_payments(self, owner_id: str, statement_id: int) -> List[StatementPayment]:
        await self.get_owned(owner_id, statement_id)
        result = await self.session.execute(
            select(StatementPayment)
            .where(StatementPayment.statement_id == statement_id)
            .order_by(StatementPayment.id)
        )
        return list(result.scalars().all())

    async def list_transactions(self, owner_id: str, statement_id: int) -> List[Transaction]:
        await self.get_owned(owner_id, statement_id)
        result = await self.session.execute(
            select(Transaction)
            .where(Transaction.statement_id == statement_id)
            .order_by(Transaction.date, Transaction.id)
        )
        return list(result.scalars().all())

    async def _find_period(self, account_id: int, data: schemas.StatementClose) -> Optional[CreditCardStatement]:
        result = await self.session.execute(
            select(CreditCardStatement).where(
                CreditCardStatement.account_id == account_id,
                CreditCardStatement.period_start == data.period_start,
                CreditCardStatement.period_end == data.period_end,
            )
        )
        return result.scalar_one_or_none()

    async def _resolve_due_date(self, account_id: int, data: schemas.StatementClose):
        if data.due_date is not None:
            return data.due_date
        settings = await self.accounts.get_credit_card_settings(account_id)
        if settings is None:
            raise exceptions.ValidationError(
                "Credit card settings are required to compute the statement due date"
            )
        return data.closing_date + timedelta(days=settings.grace_days or 0)

    async def close(self, owner_id: str, data: schemas.StatementClose) -> CreditCardStatement:
        """
        Close a spending period into a statement.

        The balance is the sum of every transaction of the account dated in
        [period_start, period_end]. Only transactions not yet claimed by
        another statement get attached to the new one.
        """
        async with unit_of_work(self.session):
            account = await self.accounts.get_owned_credit(owner_id, data.account_id)
            if data.period_end < data.period_start:
                raise exceptions.ValidationError("Statement period end date must not be before start date")
            if await self._find_period(account.id, data) is not None:
                raise exceptions.ConflictError("Statement already exists for the selected period")

            due_date = await self._resolve_due_date(account.id, data)

            result = await self.session.execute(
                select(Transaction).where(
                    Transaction.owner_id == owner_id,
                    Transaction.account_id == account.id,
                    Transaction.date >= data.period_start,
                    Transaction.date <= data.period_end,
                )
            )
            in_period = list(result.scalars().all())
            statement_balance = sum(transaction.amount for transaction in in_period)

            statement = CreditCardStatement(
                owner_id=owner_id,
                account_id=account.id,
                period_start=data.period_start,
                period_end=data.period_end,
                closing_date=data.closing_date,
                due_date=due_date,
                statement_balance=statement_balance,
                payments_applied=0,
                status="closed",
                closed_at=utcnow(),
            )
            self.session.add(statement)
            try:
                await self.session.flush()
            except IntegrityError as exc:
                raise exceptions.ConflictError("Statement already exists for the selected period") from exc

            attached = 0
            for transaction in in_period:
                if transaction.statement_id is None:
                    transaction.statement_id = statement.id
                    attached += 1
            await self.session.flush()

        logger.info(
            "statement_closed",
            owner_id=owner_id,
            statement_id=statement.id,
            account_id=account.id,
            statement_balance=statement_balance,
            in_period=len(in_period),
            attached=attached,
        )
        return statement

    async def record_payment(
        self, owner_id: str, statement_id: int, data: schemas.StatementPaymentIn
    ) -> CreditCardStatement:
        """
        Pay a statement from another account.

        Creates the transfer (moving both balances), the payment link, and
        bumps payments_applied in one transaction. Overpayment is accepted.
        """
        if data.amount_applied <= 0:
            raise exceptions.ValidationError("Payment amount must be a positive integer")

        async with unit_of_work(self.session):
            statement = await self.get_owned(owner_id, statement_id)
            await self.accounts.get_owned(owner_id, data.from_account_id)
            if data.from_account_id == statement.account_id:
                raise exceptions.ValidationError("Payment source must differ from the statement account")
            credit_account = await self.accounts.get_owned(owner_id, statement.account_id)

            transfer = await self.transfers.add(
                owner_id,
                data.from_account_id,
                credit_account.id,
                data.amount_applied,
                credit_account.currency,
                data.date,
                data.notes,
            )
            self.session.add(
                StatementPayment(
                    owner_id=owner_id,
                    statement_id=statement.id,
                    transfer_id=transfer.id,
                    amount_applied=data.amount_applied,
                )
            )
            await self.session.execute(
                update(CreditCardStatement)
                .where(CreditCardStatement.id == statement.id)
                .values(payments_applied=CreditCardStatement.payments_applied + data.amount_applied)
                .execution_options(synchronize_session="evaluate")
            )
            await self.session.refresh(statement)

            was_paid = statement.status == "paid"
            if statement.payments_applied >= statement.statement_balance:
                statement.status = "paid"
                if not was_paid:
                    statement.paid_at = utcnow()
            else:
                statement.status = "partial"
                statement.paid_at = None
            await self.session.flush()

        logger.info(
            "statement_payment_recorded",
            owner_id=owner_id,
            statement_id=statement.id,
            transfer_id=transfer.id,
            amount_applied=data.amount_applied,
            payments_applied=statement.payments_applied,
            status=statement.status,
        )
        return statement
