"""Ledger models for the database."""

from sqlalchemy import Column, Integer, BigInteger, String, Date, DateTime, ForeignKey, Text

from components.core.database import Base, utcnow


class Transaction(Base):
    """Ledger entry. Negative amounts are expenses, positive are income or credit."""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    budget_period_id = Column(Integer, ForeignKey("budget_periods.id"), nullable=True)
    description = Column(String(200), nullable=False)
    amount = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    date = Column(Date, nullable=False, index=True)
    source = Column(String(20), nullable=False, default="manual")
    statement_id = Column(Integer, ForeignKey("credit_card_statements.id"), nullable=True)
    installment_plan_id = Column(Integer, ForeignKey("installment_plans.id"), nullable=True, index=True)
    installment_number = Column(Integer, nullable=True)
    project_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Transfer(Base):
    """Money movement between two accounts of the same owner."""
    __tablename__ = "transfers"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    source_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    dest_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
