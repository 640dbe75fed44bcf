"""
Service layer models - DTOs for service operations.

These models represent the results of service operations, not domain entities.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from pocket_tracker.automation.budget import BudgetAlert
from pocket_tracker.automation.insights import CategoryInsight
from pocket_tracker.automation.recurrence import RecurrenceCandidate
from pocket_tracker.automation.reminders import Reminder
from pocket_tracker.domain.models import ShoppingItem, Task, Transaction

@dataclass
class RecurrenceSweepResult:
    """
    Result of one recurrence sweep.

    Every due candidate is listed; only accepted ones were persisted.
    """
    candidates: List[RecurrenceCandidate] = field(default_factory=list)
    created: List[Transaction] = field(default_factory=list)
    declined: List[RecurrenceCandidate] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return len(self.error_messages)

    def __str__(self) -> str:
        lines = [
            f"Recurring sweep:",
            f" 🔁 Due: {len(self.candidates)}",
            f" ✅ Added: {len(self.created)}",
            f" ⏭️ Declined: {len(self.declined)}",
        ]
        if self.errors:
            lines.append(f" ❌ Errors: {self.errors}")
        return "\n".join(lines)


@dataclass
class BudgetSweepResult:
    alerts: List[BudgetAlert] = field(default_factory=list)
    insight: Optional[CategoryInsight] = None
    error_messages: List[str] = field(default_factory=list)


@dataclass
class ReminderSweepResult:
    reminders: List[Reminder] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)


@dataclass
class PurchaseResult:
    """Outcome of toggling a shopping item's purchased flag"""
    item: ShoppingItem
    expense: Optional[Transaction] = None

    @property
    def created_expense(self) -> bool:
        return self.expense is not None


@dataclass
class CommandResult:
    """Outcome of a text command"""
    action: str
    message: str
    transaction: Optional[Transaction] = None
    task: Optional[Task] = None
    shopping_item: Optional[ShoppingItem] = None
