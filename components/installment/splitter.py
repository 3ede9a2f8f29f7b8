"""Installment amount splitting and calendar month arithmetic."""

import calendar
from datetime import date
from typing import List, Tuple


def split_installment_amounts(total_amount: int, months: int) -> List[int]:
    """
    Split a total into ``months`` near-equal integer parts.

    The remainder goes one unit at a time to the earliest installments, so
    the parts always sum to ``total_amount`` and differ by at most one.

    >>> split_installment_amounts(1000, 3)
    [334, 333, 333]
    """
    if months < 1:
        raise ValueError("months must be at least 1")
    if total_amount < 0:
        raise ValueError("total_amount must not be negative")

    base = total_amount // months
    remainder = total_amount - base * months
    return [base + 1 if index < remainder else base for index in range(months)]


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_key(value: date) -> str:
    """YYYY-MM key of the budget period a date belongs to."""
    return f"{value.year:04d}-{value.month:02d}"


def build_schedule(total_amount: int, months: int, start_date: date) -> List[Tuple[int, date, int]]:
    """(installment_number, due_date, amount) for every installment, 1-based."""
    amounts = split_installment_amounts(total_amount, months)
    return [
        (index + 1, add_months(start_date, index), amount)
        for index, amount in enumerate(amounts)
    ]
