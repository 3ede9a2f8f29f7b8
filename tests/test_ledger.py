"""Ledger writes keep stored balances equal to the ledger."""

from datetime import date

import pytest

from components.account.repository import AccountRepository
from components.core import exceptions
from components.ledger.repository import TransactionRepository, TransferRepository
from components.ledger.schemas import TransactionCreate, TransactionUpdate, TransferCreate


def _update(account_id, category_id, amount, on=date(2024, 1, 10)):
    return TransactionUpdate(
        account_id=account_id,
        category_id=category_id,
        description="Edited",
        amount=amount,
        currency="mxn",
        date=on,
    )


@pytest.mark.asyncio
async def test_create_update_delete_keep_balance_in_sync(session, factory, owner_id):
    checking = await factory.account()
    food = await factory.category("Food")
    salary = await factory.category("Salary", kind="income")
    repo = TransactionRepository(session)

    paycheck = await factory.transaction(checking.id, salary.id, 10000)
    groceries = await factory.transaction(checking.id, food.id, -2500)
    assert await factory.balance(checking.id) == 7500

    await repo.update(owner_id, groceries.id, _update(checking.id, food.id, -4000))
    assert await factory.balance(checking.id) == 6000

    await repo.update(owner_id, paycheck.id, _update(checking.id, salary.id, 12000))
    assert await factory.balance(checking.id) == 8000

    await repo.delete(owner_id, groceries.id)
    assert await factory.balance(checking.id) == 12000

    check = await AccountRepository(session).reconcile(owner_id, checking.id)
    assert check.transactions_total == 12000
    assert check.expected_balance == check.stored_balance == 12000


@pytest.mark.asyncio
async def test_moving_a_transaction_between_accounts(session, factory, owner_id):
    checking = await factory.account("Checking")
    cash = await factory.account("Wallet", type="cash")
    food = await factory.category("Food")

    lunch = await factory.transaction(checking.id, food.id, -500)
    updated = await TransactionRepository(session).update(owner_id, lunch.id, _update(cash.id, food.id, -700))

    assert updated.account_id == cash.id
    assert updated.currency == "MXN"
    assert await factory.balance(checking.id) == 0
    assert await factory.balance(cash.id) == -700
    await AccountRepository(session).reconcile(owner_id, checking.id)
    await AccountRepository(session).reconcile(owner_id, cash.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("kind,amount", [("expense", 2500), ("income", -2500), ("expense", 0)])
async def test_sign_rules_reject_before_any_write(session, factory, owner_id, kind, amount):
    checking = await factory.account()
    category = await factory.category("Misc", kind=kind)
    account_id, category_id = checking.id, category.id

    with pytest.raises(exceptions.ValidationError):
        await factory.transaction(account_id, category_id, amount)

    assert await factory.balance(account_id) == 0
    assert await TransactionRepository(session).list(owner_id) == []


@pytest.mark.asyncio
async def test_other_kinds_accept_either_sign(factory):
    checking = await factory.account()
    debt = await factory.category("Loan", kind="debt")

    await factory.transaction(checking.id, debt.id, 3000)
    await factory.transaction(checking.id, debt.id, -1000)

    assert await factory.balance(checking.id) == 2000


@pytest.mark.asyncio
async def test_foreign_account_is_not_found_and_nothing_is_written(
    session, factory, owner_id, other_owner_id
):
    foreign = await factory.account("Theirs", owner_id=other_owner_id)
    food = await factory.category("Food")
    foreign_id, food_id = foreign.id, food.id

    with pytest.raises(exceptions.NotFoundError):
        await TransactionRepository(session).create(owner_id, TransactionCreate(
            account_id=foreign_id,
            category_id=food_id,
            description="Sneaky",
            amount=-100,
            currency="MXN",
            date=date(2024, 1, 1),
        ))

    assert await TransactionRepository(session).list(owner_id) == []
    assert await AccountRepository(session).get_balance(other_owner_id, foreign_id) == 0


@pytest.mark.asyncio
async def test_delta_on_missing_account_is_not_found(session, factory, owner_id):
    checking = await factory.account()
    accounts = AccountRepository(session)

    with pytest.raises(exceptions.NotFoundError):
        await accounts.apply_delta(owner_id, checking.id + 100, 500)


@pytest.mark.asyncio
async def test_list_filters(session, factory, owner_id):
    checking = await factory.account()
    food = await factory.category("Food")
    rent = await factory.category("Rent")
    await factory.transaction(checking.id, food.id, -100, on=date(2024, 1, 5))
    await factory.transaction(checking.id, rent.id, -900, on=date(2024, 2, 1))
    await factory.transaction(checking.id, food.id, -200, on=date(2024, 2, 10))

    repo = TransactionRepository(session)
    food_rows = await repo.list(owner_id, category_id=food.id)
    february = await repo.list(owner_id, from_date=date(2024, 2, 1), to_date=date(2024, 2, 28))

    assert [row.amount for row in food_rows] == [-200, -100]
    assert [row.amount for row in february] == [-200, -900]


@pytest.mark.asyncio
async def test_transfers_move_both_balances_and_reverse_on_delete(session, factory, owner_id):
    checking = await factory.account("Checking")
    savings = await factory.account("Savings", type="savings")
    salary = await factory.category("Salary", kind="income")
    await factory.transaction(checking.id, salary.id, 10000)

    transfers = TransferRepository(session)
    transfer = await transfers.create(owner_id, TransferCreate(
        source_account_id=checking.id,
        dest_account_id=savings.id,
        amount=3000,
        currency="mxn",
        date=date(2024, 1, 15),
        notes="  ",
    ))

    assert transfer.notes is None
    assert transfer.currency == "MXN"
    assert await factory.balance(checking.id) == 7000
    assert await factory.balance(savings.id) == 3000

    accounts = AccountRepository(session)
    source_check = await accounts.reconcile(owner_id, checking.id)
    dest_check = await accounts.reconcile(owner_id, savings.id)
    assert source_check.transfers_out == 3000
    assert dest_check.transfers_in == 3000

    await transfers.delete(owner_id, transfer.id)
    assert await factory.balance(checking.id) == 10000
    assert await factory.balance(savings.id) == 0
    assert await transfers.list(owner_id) == []


def test_transfer_to_same_account_is_rejected():
    with pytest.raises(ValueError):
        TransferCreate(source_account_id=1, dest_account_id=1, amount=10, currency="MXN", date=date(2024, 1, 1))


@pytest.mark.asyncio
async def test_reconcile_reports_drift(session, factory, owner_id):
    checking = await factory.account()
    accounts = AccountRepository(session)
    await accounts.apply_delta(owner_id, checking.id, 999)
    await session.commit()

    with pytest.raises(exceptions.InvariantViolationError):
        await accounts.reconcile(owner_id, checking.id)
