"""Spending insights derived from transaction history."""
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence, Tuple

from pocket_tracker.automation.budget import month_spend
from pocket_tracker.domain.enums import TransactionType
from pocket_tracker.domain.models import Transaction

MIN_EXPENSES_FOR_BUDGET = 10
BUDGET_BUFFER = Decimal("1.1")
TOP_CATEGORY_SHARE = Decimal("0.4")


@dataclass(frozen=True)
class CategoryInsight:
    category: str
    amount: Decimal
    month_total: Decimal

    @property
    def share(self) -> Decimal:
        return self.amount / self.month_total * 100

    def __str__(self) -> str:
        return f"{self.category} accounts for {self.share:.0f}% of spending"


@dataclass(frozen=True)
class QuickExpense:
    label: str
    amount: Decimal
    category: str
    count: int


def _months_back(day: date, months: int) -> date:
    """First day of the month `months` before `day`'s month"""
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def suggest_budget(transactions: Sequence[Transaction], now: date) -> Optional[Decimal]:
    """
    Suggest a monthly budget: average spend since three months back plus 10%.

    Returns:
        Whole-unit budget, or None with fewer than 10 recent expenses
    """
    start = _months_back(now, 3)
    recent = [
        t for t in transactions
        if t.type == TransactionType.EXPENSE and t.date >= start
    ]

    if len(recent) < MIN_EXPENSES_FOR_BUDGET:
        return None

    total = sum((t.amount for t in recent), Decimal("0"))
    months = max(1, math.ceil((now - start).days / 30))
    return Decimal(math.ceil(total / months * BUDGET_BUFFER))


def top_category_insight(transactions: Sequence[Transaction], now: date) -> Optional[CategoryInsight]:
    """The month's top spending category, if it takes more than 40% of spend"""
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for t in transactions:
        if t.type == TransactionType.EXPENSE and t.date.year == now.year and t.date.month == now.month:
            totals[t.category] += t.amount

    if not totals:
        return None

    month_total = month_spend(transactions, now)
    category, amount = max(totals.items(), key=lambda x: x[1])

    if amount <= month_total * TOP_CATEGORY_SHARE:
        return None

    return CategoryInsight(category=category, amount=amount, month_total=month_total)


def suggest_quick_expenses(
    transactions: Sequence[Transaction],
    limit: int = 8,
    min_count: int = 3
) -> List[QuickExpense]:
    """
    Most frequent (description, category) expense pairs.

    Args:
        transactions: Full history
        limit: Maximum suggestions returned
        min_count: Minimum occurrences for a pair to be suggested

    Returns:
        Suggestions by descending frequency, amount rounded to whole units
    """
    frequency: Dict[Tuple[str, str], List[Decimal]] = defaultdict(list)
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            frequency[(t.description, t.category)].append(t.amount)

    frequent = [
        (key, amounts) for key, amounts in frequency.items()
        if len(amounts) >= min_count
    ]
    frequent.sort(key=lambda x: len(x[1]), reverse=True)

    suggestions = []
    for (description, category), amounts in frequent[:limit]:
        average = sum(amounts, Decimal("0")) / len(amounts)
        suggestions.append(QuickExpense(
            label=description,
            amount=average.quantize(Decimal("1"), rounding=ROUND_HALF_UP),
            category=category,
            count=len(amounts),
        ))

    return suggestions
