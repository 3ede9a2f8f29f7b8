"""Installment plan model for the database."""

from sqlalchemy import Column, Integer, BigInteger, String, Date, DateTime, ForeignKey, Numeric

from components.core.database import Base, utcnow


class InstallmentPlan(Base):
    """Purchase on a credit account paid over a number of monthly installments."""
    __tablename__ = "installment_plans"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    description = Column(String(200), nullable=False)
    total_amount = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    months = Column(Integer, nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False, default=0)  # informational only
    start_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
