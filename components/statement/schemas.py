"""Pydantic schemas for credit card statement data validation."""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class StatementClose(BaseModel):
    """Schema for closing a statement period."""
    account_id: int
    period_start: date
    period_end: date
    closing_date: date
    due_date: Optional[date] = Field(
        None, description="Defaults to closing_date plus the account's grace days"
    )


class StatementPaymentIn(BaseModel):
    """Schema for recording a payment against a statement."""
    from_account_id: int
    amount_applied: int = Field(..., gt=0)
    date: date
    notes: Optional[str] = Field(None, max_length=300)


class Statement(BaseModel):
    """Schema for statement response."""
    id: int
    account_id: int
    period_start: date
    period_end: date
    closing_date: date
    due_date: date
    statement_balance: int
    payments_applied: int
    status: str
    closed_at: datetime
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StatementPayment(BaseModel):
    """Schema for statement payment response."""
    id: int
    statement_id: int
    transfer_id: int
    amount_applied: int
    created_at: datetime

    class Config:
        from_attributes = True
