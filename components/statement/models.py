"""Credit card statement models for the database."""

from sqlalchemy import Column, Integer, BigInteger, String, Date, DateTime, ForeignKey, UniqueConstraint

from components.core.database import Base, utcnow


class CreditCardStatement(Base):
    """Frozen snapshot of a credit account's spending over a closed period."""
    __tablename__ = "credit_card_statements"
    __table_args__ = (
        UniqueConstraint("account_id", "period_start", "period_end", name="uq_statement_account_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    closing_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    # Computed once at close time, never recomputed
    statement_balance = Column(BigInteger, nullable=False)
    payments_applied = Column(BigInteger, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="closed")
    closed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class StatementPayment(Base):
    """Append-only link between a payment transfer and the statement it reduces."""
    __tablename__ = "statement_payments"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    statement_id = Column(Integer, ForeignKey("credit_card_statements.id"), nullable=False, index=True)
    transfer_id = Column(Integer, ForeignKey("transfers.id"), nullable=False)
    amount_applied = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
