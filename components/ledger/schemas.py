"""Pydantic schemas for ledger data validation."""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class TransactionBase(BaseModel):
    """Fields shared by transaction create and update."""
    account_id: int
    category_id: int
    description: str = Field(..., min_length=1, max_length=200)
    amount: int = Field(..., description="Signed minor units, negative for expenses")
    currency: str = Field(..., min_length=3, max_length=3)
    date: date
    budget_period_id: Optional[int] = None
    project_id: Optional[int] = None


class TransactionCreate(TransactionBase):
    """Schema for transaction creation."""
    pass


class TransactionUpdate(TransactionBase):
    """Schema for transaction update. Replaces every editable field."""
    pass


class Transaction(TransactionBase):
    """Schema for transaction response."""
    id: int
    source: str
    statement_id: Optional[int] = None
    installment_plan_id: Optional[int] = None
    installment_number: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TransferCreate(BaseModel):
    """Schema for transfer creation."""
    source_account_id: int
    dest_account_id: int
    amount: int = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3)
    date: date
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_accounts_differ(self):
        if self.source_account_id == self.dest_account_id:
            raise ValueError("Destination account must be different from source account")
        return self


class Transfer(BaseModel):
    """Schema for transfer response."""
    id: int
    source_account_id: int
    dest_account_id: int
    amount: int
    currency: str
    date: date
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
