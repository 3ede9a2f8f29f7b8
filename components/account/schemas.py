"""Pydantic schemas for account data validation."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


AccountType = Literal["cash", "debit", "credit", "credit_card", "investment", "savings"]


class AccountCreate(BaseModel):
    """Schema for account creation. Balances always start at zero."""
    name: str = Field(..., min_length=1, max_length=120)
    type: AccountType
    currency: str = Field(..., min_length=3, max_length=3)
    is_active: bool = True


class Account(BaseModel):
    """Schema for account response."""
    id: int
    name: str
    type: str
    currency: str
    current_balance: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CreditCardSettingsIn(BaseModel):
    """Schema for credit card settings upsert."""
    statement_day: int = Field(15, ge=1, le=31)
    grace_days: Optional[int] = Field(None, ge=0, le=90)
    credit_limit: Optional[int] = Field(None, ge=0)


class CreditCardSettings(CreditCardSettingsIn):
    """Schema for credit card settings response."""
    id: int
    account_id: int

    class Config:
        from_attributes = True


class BalanceCheck(BaseModel):
    """Result of comparing a stored balance with the ledger."""
    account_id: int
    stored_balance: int
    transactions_total: int
    transfers_in: int
    transfers_out: int
    expected_balance: int
