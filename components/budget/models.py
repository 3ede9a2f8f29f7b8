"""Budget planning models for the database."""

from sqlalchemy import (
    Column, Integer, BigInteger, String, Boolean, Date, DateTime, ForeignKey, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from components.core.database import Base, utcnow


class BudgetPeriod(Base):
    """Monthly planning scope, unique per owner and month."""
    __tablename__ = "budget_periods"
    __table_args__ = (UniqueConstraint("owner_id", "month", name="uq_budget_period_owner_month"),)

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    month = Column(String(7), nullable=False)  # YYYY-MM
    currency = Column(String(3), nullable=False)
    # 0 means "derive from income plan items"
    expected_income_amount = Column(BigInteger, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    income_plan_items = relationship("IncomePlanItem", back_populates="budget_period", lazy="raise")


class IncomePlanItem(Base):
    """Expected income line used when a period has no explicit income amount."""
    __tablename__ = "income_plan_items"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    budget_period_id = Column(Integer, ForeignKey("budget_periods.id"), nullable=False)
    name = Column(String(120), nullable=False)
    amount = Column(BigInteger, nullable=False)
    expected_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    budget_period = relationship("BudgetPeriod", back_populates="income_plan_items", lazy="raise")


class BudgetRule(Base):
    """Ordered allocation rule: a fixed amount or basis points of remaining income."""
    __tablename__ = "budget_rules"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    rule_type = Column(String(20), nullable=False)
    value = Column(BigInteger, nullable=False)  # minor units, or basis points out of 10000
    apply_order = Column(Integer, nullable=False, default=0)
    min_amount = Column(BigInteger, nullable=True)
    cap_amount = Column(BigInteger, nullable=True)
    active_from = Column(String(7), nullable=True)
    active_to = Column(String(7), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class BudgetAllocation(Base):
    """Planned spend for one category within one budget period."""
    __tablename__ = "budget_allocations"
    __table_args__ = (
        UniqueConstraint("budget_period_id", "category_id", name="uq_budget_allocation_period_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    budget_period_id = Column(Integer, ForeignKey("budget_periods.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    planned_amount = Column(BigInteger, nullable=False, default=0)
    # Override rows are never touched by regeneration
    is_override = Column(Boolean, nullable=False, default=False)
    generated_from_rule_id = Column(Integer, ForeignKey("budget_rules.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
