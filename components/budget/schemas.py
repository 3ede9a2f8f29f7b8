"""Pydantic schemas for budget data validation."""

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator

from components.core.schemas import MONTH_PATTERN


class BudgetPeriodCreate(BaseModel):
    """Schema for get-or-create of a budget period."""
    month: str = Field(..., pattern=MONTH_PATTERN)
    currency: str = Field(..., min_length=3, max_length=3)
    expected_income_amount: int = Field(0, ge=0)
    notes: Optional[str] = Field(None, max_length=400)


class BudgetPeriodUpdate(BaseModel):
    """Schema for budget period update. Month is immutable."""
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    expected_income_amount: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=400)


class BudgetPeriod(BaseModel):
    """Schema for budget period response."""
    id: int
    month: str
    currency: str
    expected_income_amount: int
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class IncomePlanItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    amount: int = Field(..., gt=0)
    expected_date: Optional[date] = None


class IncomePlanItem(IncomePlanItemCreate):
    id: int
    budget_period_id: int

    class Config:
        from_attributes = True


class BudgetRuleBase(BaseModel):
    """Fields shared by rule create and update."""
    name: str = Field(..., min_length=1, max_length=120)
    category_id: int
    rule_type: Literal["fixed", "percent_of_income"]
    value: int = Field(..., ge=0)
    apply_order: int = Field(0, ge=0)
    min_amount: Optional[int] = Field(None, ge=0)
    cap_amount: Optional[int] = Field(None, ge=0)
    active_from: Optional[str] = Field(None, pattern=MONTH_PATTERN)
    active_to: Optional[str] = Field(None, pattern=MONTH_PATTERN)


class BudgetRuleCreate(BudgetRuleBase):
    """Schema for rule creation."""

    @model_validator(mode="after")
    def check_ranges(self):
        if self.min_amount is not None and self.cap_amount is not None and self.min_amount > self.cap_amount:
            raise ValueError("min_amount must not exceed cap_amount")
        if self.active_from and self.active_to and self.active_from > self.active_to:
            raise ValueError("active_from must not be after active_to")
        return self


class BudgetRuleUpdate(BaseModel):
    """Schema for partial rule update."""
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    category_id: Optional[int] = None
    rule_type: Optional[Literal["fixed", "percent_of_income"]] = None
    value: Optional[int] = Field(None, ge=0)
    apply_order: Optional[int] = Field(None, ge=0)
    min_amount: Optional[int] = Field(None, ge=0)
    cap_amount: Optional[int] = Field(None, ge=0)
    active_from: Optional[str] = Field(None, pattern=MONTH_PATTERN)
    active_to: Optional[str] = Field(None, pattern=MONTH_PATTERN)


class BudgetRule(BudgetRuleBase):
    """Schema for rule response."""
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


class AllocationOverride(BaseModel):
    planned_amount: int = Field(..., ge=0)


class BudgetAllocation(BaseModel):
    """Schema for allocation response."""
    id: int
    budget_period_id: int
    category_id: int
    planned_amount: int
    is_override: bool
    generated_from_rule_id: Optional[int] = None

    class Config:
        from_attributes = True
