"""
Monthly budget threshold alerts.

Each threshold fires at most once per suppression epoch. The epoch is the
calendar month: flags are keyed by `budget:YYYY-MM`, so they are never
retracted within the month, even if a deleted expense drops spend back
under the threshold.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from pocket_tracker.automation.ledger import SuppressionLedger
from pocket_tracker.domain.enums import BudgetAlertKind, TransactionType
from pocket_tracker.domain.models import Settings, Transaction
from pocket_tracker.repositories.base import StoreUnavailableError

logger = logging.getLogger(__name__)

MESSAGES = {
    BudgetAlertKind.NINETY_PERCENT: ("Budget Alert", "You have used 90% of your monthly budget"),
    BudgetAlertKind.EXCEEDED: ("Budget Exceeded", "You have exceeded your monthly budget"),
}


@dataclass(frozen=True)
class BudgetStatus:
    """Month-to-date spend against the configured budget"""
    year: int
    month: int
    spent: Decimal
    budget: Decimal

    @property
    def percentage(self) -> Optional[Decimal]:
        """Percent of budget used, None when no budget is set"""
        if self.budget <= 0:
            return None
        return self.spent / self.budget * 100

    @property
    def epoch(self) -> str:
        return f"budget:{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class BudgetAlert:
    kind: BudgetAlertKind
    status: BudgetStatus
    notify: bool = False # eligible for out-of-band delivery

    @property
    def title(self) -> str:
        return MESSAGES[self.kind][0]

    @property
    def message(self) -> str:
        return MESSAGES[self.kind][1]

    def __str__(self) -> str:
        icon = "🚨" if self.kind == BudgetAlertKind.EXCEEDED else "⚠️"
        return f"{icon} {self.title}: {self.message} ({self.status.percentage:.0f}%)"


def month_spend(transactions: Sequence[Transaction], day: date) -> Decimal:
    """Sum of expenses in the calendar month containing `day`"""
    return sum(
        (
            t.amount for t in transactions
            if t.type == TransactionType.EXPENSE
            and t.date.year == day.year
            and t.date.month == day.month
        ),
        Decimal("0"),
    )


class BudgetMonitor:
    """
    Compares month-to-date spend with `settings.budget`.

    Usage:
        monitor = BudgetMonitor(ledger)
        for alert in monitor.evaluate(transactions, settings, now=date.today()):
            print(alert)
    """

    def __init__(
        self,
        ledger: SuppressionLedger,
        ninety_percent: int = 90,
        exceeded: int = 100,
    ):
        self.ledger = ledger
        self.thresholds: List[Tuple[BudgetAlertKind, Decimal]] = [
            (BudgetAlertKind.NINETY_PERCENT, Decimal(ninety_percent)),
            (BudgetAlertKind.EXCEEDED, Decimal(exceeded)),
        ]

    @staticmethod
    def status(transactions: Sequence[Transaction], settings: Settings, now: date) -> BudgetStatus:
        return BudgetStatus(
            year=now.year,
            month=now.month,
            spent=month_spend(transactions, now),
            budget=settings.budget,
        )

    def evaluate(
        self,
        transactions: Sequence[Transaction],
        settings: Settings,
        now: date,
        errors: Optional[List[str]] = None,
    ) -> List[BudgetAlert]:
        """
        Raise each threshold alert the first time it is reached this month.

        A threshold whose ledger flag cannot be read or written is skipped
        and retried on the next evaluation; the others are still raised.

        Args:
            transactions: Full transaction history
            settings: Settings snapshot (budget and notifications flag)
            now: Current day
            errors: If given, ledger failure messages are appended here

        Returns:
            Newly raised alerts, lowest threshold first
        """
        status = self.status(transactions, settings, now)
        percentage = status.percentage
        if percentage is None:
            return []

        alerts: List[BudgetAlert] = []
        for kind, threshold in self.thresholds:
            if percentage < threshold:
                continue

            try:
                claimed = self.ledger.claim(status.epoch, kind.value)
            except StoreUnavailableError as e:
                logger.warning("Skipping budget %s alert for %s: %s", kind.value, status.epoch, e)
                if errors is not None:
                    errors.append(str(e))
                continue

            if not claimed:
                continue

            logger.info("Budget %s alert at %.1f%% for %s", kind.value, percentage, status.epoch)
            alerts.append(BudgetAlert(
                kind=kind,
                status=status,
                notify=settings.notifications,
            ))

        return alerts
