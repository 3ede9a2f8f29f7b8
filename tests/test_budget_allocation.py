"""Allocation generation against a real database."""

import pytest

from components.budget.repository import BudgetPeriodRepository, BudgetRuleRepository
from components.budget.schemas import BudgetRuleCreate, BudgetRuleUpdate, IncomePlanItemCreate
from components.budget.service import BudgetAllocationService
from components.core import exceptions


async def _rule(session, owner_id, category_id, rule_type, value, apply_order=0, **extra):
    return await BudgetRuleRepository(session).create(owner_id, BudgetRuleCreate(
        name=f"rule-{category_id}-{apply_order}",
        category_id=category_id,
        rule_type=rule_type,
        value=value,
        apply_order=apply_order,
        **extra,
    ))


def _by_category(allocations):
    return {allocation.category_id: allocation for allocation in allocations}


class TestGenerateAllocations:

    @pytest.mark.asyncio
    async def test_fixed_and_percent_rules(self, session, factory, owner_id):
        food = await factory.category("Food")
        buffer = await factory.category("Buffer", kind="savings")
        period = await factory.period(income=100000)
        await _rule(session, owner_id, food.id, "fixed", 18000, apply_order=0)
        await _rule(session, owner_id, buffer.id, "percent_of_income", 1000, apply_order=1)

        allocations = await BudgetAllocationService(session).generate_allocations(owner_id, period.id)

        amounts = {row.category_id: row.planned_amount for row in allocations}
        assert amounts == {food.id: 18000, buffer.id: 8200}
        assert [row.planned_amount for row in allocations] == [18000, 8200]

    @pytest.mark.asyncio
    async def test_regeneration_is_idempotent(self, session, factory, owner_id):
        food = await factory.category("Food")
        rent = await factory.category("Rent")
        period = await factory.period(income=50000)
        await _rule(session, owner_id, food.id, "percent_of_income", 2000)
        await _rule(session, owner_id, rent.id, "fixed", 20000, apply_order=1)
        service = BudgetAllocationService(session)

        first = await service.generate_allocations(owner_id, period.id)
        first_rows = [(row.id, row.category_id, row.planned_amount) for row in first]
        second = await service.generate_allocations(owner_id, period.id)

        assert [(row.id, row.category_id, row.planned_amount) for row in second] == first_rows
        assert len(second) == 2

    @pytest.mark.asyncio
    async def test_overrides_survive_regeneration(self, session, factory, owner_id):
        food = await factory.category("Food")
        period = await factory.period(income=100000)
        await _rule(session, owner_id, food.id, "fixed", 18000)
        service = BudgetAllocationService(session)
        await service.generate_allocations(owner_id, period.id)

        override = await service.set_allocation_override(owner_id, period.id, food.id, 25000)
        assert override.is_override
        assert override.generated_from_rule_id is None

        allocations = _by_category(await service.generate_allocations(owner_id, period.id))
        assert allocations[food.id].planned_amount == 25000
        assert allocations[food.id].is_override

    @pytest.mark.asyncio
    async def test_leftover_goes_to_buffer_category(self, session, factory, owner_id):
        food = await factory.category("Food")
        buffer = await factory.category("Buffer", kind="savings")
        period = await factory.period(income=100000)
        rule = await _rule(session, owner_id, food.id, "fixed", 18000)

        allocations = _by_category(await BudgetAllocationService(session).generate_allocations(owner_id, period.id))

        assert allocations[food.id].generated_from_rule_id == rule.id
        assert allocations[buffer.id].planned_amount == 82000
        assert allocations[buffer.id].generated_from_rule_id is None

    @pytest.mark.asyncio
    async def test_buffer_name_is_configurable(self, session, factory, owner_id):
        food = await factory.category("Food")
        reserve = await factory.category("Reserve", kind="savings")
        period = await factory.period(income=1000)
        await _rule(session, owner_id, food.id, "fixed", 400)

        service = BudgetAllocationService(session, buffer_category_name="Reserve")
        allocations = _by_category(await service.generate_allocations(owner_id, period.id))

        assert allocations[reserve.id].planned_amount == 600

    @pytest.mark.asyncio
    async def test_income_items_used_when_expected_income_is_zero(self, session, factory, owner_id):
        food = await factory.category("Food")
        period = await factory.period(income=0)
        periods = BudgetPeriodRepository(session)
        await periods.add_income_item(owner_id, period.id, IncomePlanItemCreate(name="Salary", amount=60000))
        await periods.add_income_item(owner_id, period.id, IncomePlanItemCreate(name="Freelance", amount=40000))
        await _rule(session, owner_id, food.id, "percent_of_income", 1000)

        assert await periods.total_income(period) == 100000
        allocations = _by_category(await BudgetAllocationService(session).generate_allocations(owner_id, period.id))
        assert allocations[food.id].planned_amount == 10000

    @pytest.mark.asyncio
    async def test_rules_outside_their_months_are_skipped(self, session, factory, owner_id):
        food = await factory.category("Food")
        rent = await factory.category("Rent")
        period = await factory.period(month="2024-01", income=10000)
        await _rule(session, owner_id, food.id, "fixed", 1000)
        await _rule(session, owner_id, rent.id, "fixed", 5000, active_from="2024-02")

        allocations = _by_category(await BudgetAllocationService(session).generate_allocations(owner_id, period.id))

        assert set(allocations) == {food.id}

    @pytest.mark.asyncio
    async def test_foreign_period_is_not_found(self, session, factory, owner_id, other_owner_id):
        period = await factory.period(owner_id=other_owner_id)
        period_id = period.id

        with pytest.raises(exceptions.NotFoundError):
            await BudgetAllocationService(session).generate_allocations(owner_id, period_id)

    @pytest.mark.asyncio
    async def test_negative_override_is_rejected(self, session, factory, owner_id):
        food = await factory.category("Food")
        period = await factory.period()

        with pytest.raises(exceptions.ValidationError):
            await BudgetAllocationService(session).set_allocation_override(owner_id, period.id, food.id, -1)


class TestBudgetRules:

    @pytest.mark.asyncio
    async def test_delete_detaches_generated_allocations(self, session, factory, owner_id):
        food = await factory.category("Food")
        period = await factory.period(income=1000)
        rule = await _rule(session, owner_id, food.id, "fixed", 300)
        service = BudgetAllocationService(session)
        await service.generate_allocations(owner_id, period.id)

        await BudgetRuleRepository(session).delete(owner_id, rule.id)

        allocations = _by_category(await service.list_allocations(owner_id, period.id))
        assert allocations[food.id].planned_amount == 300
        assert allocations[food.id].generated_from_rule_id is None
        assert await BudgetRuleRepository(session).list(owner_id) == []

    @pytest.mark.asyncio
    async def test_partial_update_checks_ranges(self, session, factory, owner_id):
        food = await factory.category("Food")
        rule = await _rule(session, owner_id, food.id, "percent_of_income", 1000, min_amount=100)
        rule_id = rule.id
        rules = BudgetRuleRepository(session)

        updated = await rules.update(owner_id, rule_id, BudgetRuleUpdate(cap_amount=500))
        assert (updated.min_amount, updated.cap_amount) == (100, 500)

        with pytest.raises(exceptions.ValidationError):
            await rules.update(owner_id, rule_id, BudgetRuleUpdate(min_amount=900))

    def test_create_schema_checks_ranges(self):
        with pytest.raises(ValueError):
            BudgetRuleCreate(name="x", category_id=1, rule_type="fixed", value=1, min_amount=10, cap_amount=5)
        with pytest.raises(ValueError):
            BudgetRuleCreate(name="x", category_id=1, rule_type="fixed", value=1,
                             active_from="2024-05", active_to="2024-01")

    def test_unknown_rule_type_is_rejected(self):
        with pytest.raises(ValueError):
            BudgetRuleCreate(name="x", category_id=1, rule_type="envelope", value=1)
        with pytest.raises(ValueError):
            BudgetRuleUpdate(rule_type="envelope")

    @pytest.mark.asyncio
    async def test_rule_for_foreign_category_is_not_found(self, session, factory, owner_id, other_owner_id):
        theirs = await factory.category("Food", owner_id=other_owner_id)

        with pytest.raises(exceptions.NotFoundError):
            await _rule(session, owner_id, theirs.id, "fixed", 100)
