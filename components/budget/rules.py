"""
Budget rule evaluation.

Rules are folded in order over a running ``remaining`` income figure. Fixed
rules claim their value; percent rules claim basis points of whatever is
left at that point in the sequence. The functions here do no I/O so the
allocation service can be tested without a database.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol

BASIS_POINTS = 10000


class RuleLike(Protocol):
    """Anything shaped like a BudgetRule row."""
    id: int
    category_id: int
    rule_type: str
    value: int
    apply_order: int
    min_amount: Optional[int]
    cap_amount: Optional[int]
    active_from: Optional[str]
    active_to: Optional[str]
    created_at: Optional[datetime]


@dataclass(frozen=True)
class PlannedAmount:
    planned_amount: int
    rule_id: Optional[int]


@dataclass
class EvaluationResult:
    """Outcome of one rule pass for a budget period."""
    total_income: int
    remaining: int
    allocations: Dict[int, PlannedAmount] = field(default_factory=dict)

    def amounts(self) -> Dict[int, int]:
        return {category_id: planned.planned_amount for category_id, planned in self.allocations.items()}


def is_rule_active(rule: RuleLike, month: str) -> bool:
    """A rule applies when month falls within its optional YYYY-MM bounds."""
    if rule.active_from and rule.active_from > month:
        return False
    if rule.active_to and rule.active_to < month:
        return False
    return True


def apply_bounds(candidate: int, min_amount: Optional[int], cap_amount: Optional[int]) -> int:
    """Raise to min_amount, lower to cap_amount, then floor at zero."""
    value = candidate
    if min_amount is not None:
        value = max(value, min_amount)
    if cap_amount is not None:
        value = min(value, cap_amount)
    return max(0, value)


def percent_of(base: int, basis_points: int) -> int:
    """Basis points of a non-negative base, rounded half up in integer math."""
    return (base * basis_points + BASIS_POINTS // 2) // BASIS_POINTS


def _naive_utc(value: Optional[datetime]) -> datetime:
    # Rows read back from some backends lose their tzinfo; both forms are UTC.
    if value is None:
        return datetime.min
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def sort_rules(rules: Iterable[RuleLike]) -> List[RuleLike]:
    """Order by apply_order, then creation time, then id."""
    return sorted(
        rules,
        key=lambda rule: (rule.apply_order, _naive_utc(rule.created_at), rule.id or 0),
    )


def evaluate_rules(
    rules: Iterable[RuleLike],
    total_income: int,
    buffer_category_id: Optional[int] = None,
) -> EvaluationResult:
    """
    Compute planned amounts per category.

    ``remaining`` is not floored and may go negative when fixed rules
    overcommit; later percent rules then see a base of zero. When several
    rules target one category the later rule wins. Leftover income goes to
    the buffer category unless a rule already wrote it.
    """
    result = EvaluationResult(total_income=total_income, remaining=total_income)

    for rule in sort_rules(rules):
        if rule.rule_type == "fixed":
            candidate = rule.value
        elif rule.rule_type == "percent_of_income":
            candidate = percent_of(max(result.remaining, 0), rule.value)
        else:
            raise ValueError(f"Unknown rule type: {rule.rule_type}")

        planned = apply_bounds(candidate, rule.min_amount, rule.cap_amount)
        result.remaining -= planned
        result.allocations[rule.category_id] = PlannedAmount(planned, rule.id)

    if (
        buffer_category_id is not None
        and result.remaining > 0
        and buffer_category_id not in result.allocations
    ):
        result.allocations[buffer_category_id] = PlannedAmount(result.remaining, None)

    return result
