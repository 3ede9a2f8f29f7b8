"""Account models for the database."""

from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from components.core.database import Base, utcnow


CREDIT_ACCOUNT_TYPES = ("credit", "credit_card")


class Account(Base):
    """Account holding a running balance in minor currency units."""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    type = Column(String(20), nullable=False)
    currency = Column(String(3), nullable=False)
    # Only ever changed through AccountRepository.apply_delta
    current_balance = Column(BigInteger, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    credit_card_settings = relationship(
        "CreditCardSettings", back_populates="account", uselist=False, lazy="raise"
    )


class CreditCardSettings(Base):
    """Billing settings for a credit account."""
    __tablename__ = "credit_card_settings"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False)
    statement_day = Column(Integer, nullable=False, default=15)
    grace_days = Column(Integer, nullable=True)
    credit_limit = Column(BigInteger, nullable=True)

    account = relationship("Account", back_populates="credit_card_settings", lazy="raise")
