"""Pydantic schemas for installment plan data validation."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal
from pydantic import BaseModel, Field

from components.ledger.schemas import Transaction


class InstallmentPlanIn(BaseModel):
    """Schema for installment plan create and full update."""
    account_id: int
    category_id: int
    description: str = Field(..., min_length=1, max_length=200)
    total_amount: int = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3)
    months: int = Field(..., ge=1, le=120)
    interest_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    start_date: date
    status: Literal["active", "completed", "cancelled"] = "active"


class InstallmentPlan(BaseModel):
    """Schema for installment plan response."""
    id: int
    account_id: int
    category_id: int
    description: str
    total_amount: int
    currency: str
    months: int
    interest_rate: Decimal
    start_date: date
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class InstallmentPlanDetail(BaseModel):
    """Plan with its generated ledger entries."""
    plan: InstallmentPlan
    entries: List[Transaction]


class InstallmentPreview(BaseModel):
    """One scheduled installment before it is written."""
    installment_number: int
    date: date
    amount: int
    month: str
