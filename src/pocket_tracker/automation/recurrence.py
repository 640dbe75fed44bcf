"""
Recurring transaction detection.

Transactions are grouped by (lower-cased description, amount). A group of
two or more is periodic with the average gap between consecutive dates.
When the time since the last occurrence reaches 90% of that average the
group is due and surfaces a candidate. Candidates are advisory: nothing is
written until the caller accepts one.

Irregular gaps are averaged as-is. A 5-day and a 60-day gap give a 32.5-day
period; no outlier rejection is done.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from pocket_tracker.domain.models import Transaction

logger = logging.getLogger(__name__)

DEFAULT_DUE_RATIO = 0.9

GroupKey = Tuple[str, Decimal]


@dataclass(frozen=True)
class RecurrenceCandidate:
    """A detected but unconfirmed recurring transaction"""
    last_occurrence: Transaction
    average_interval_days: float

    @property
    def description(self) -> str:
        return self.last_occurrence.description

    @property
    def amount(self) -> Decimal:
        return self.last_occurrence.amount

    def __str__(self) -> str:
        txn = self.last_occurrence
        return (
            f"Recurring {txn.type.value}: {txn.description} (${txn.amount:,.2f}) "
            f"every ~{self.average_interval_days:.1f} days"
        )


class RecurrenceDetector:
    """
    Detects recurring transactions that are due again.

    Usage:
        detector = RecurrenceDetector()
        for candidate in detector.detect_due(transactions, as_of=date.today()):
            if user_confirms(candidate):
                store.save_transaction(detector.accept(candidate, as_of, now))
    """

    def __init__(self, due_ratio: float = DEFAULT_DUE_RATIO):
        """
        Args:
            due_ratio: Fraction of the average interval after which a group is due
        """
        self.due_ratio = due_ratio

    @staticmethod
    def group(transactions: Sequence[Transaction]) -> Dict[GroupKey, List[Transaction]]:
        """Partition transactions by (lower-cased description, amount), first-seen order"""
        groups: Dict[GroupKey, List[Transaction]] = defaultdict(list)
        for txn in transactions:
            groups[(txn.description.lower(), txn.amount)].append(txn)
        return groups

    @staticmethod
    def average_interval(occurrences: Sequence[Transaction]) -> float:
        """
        Average gap in whole days between consecutive occurrences.

        Args:
            occurrences: At least two transactions, sorted by date ascending
        """
        gaps = [
            (occurrences[i].date - occurrences[i - 1].date).days
            for i in range(1, len(occurrences))
        ]
        return sum(gaps) / len(gaps)

    def detect_due(
        self,
        transactions: Sequence[Transaction],
        as_of: date
    ) -> List[RecurrenceCandidate]:
        """
        Find groups whose next occurrence is due on `as_of`.

        Args:
            transactions: Full transaction history, in stored order
            as_of: Day to evaluate

        Returns:
            Candidates in group first-seen order
        """
        candidates: List[RecurrenceCandidate] = []

        for occurrences in self.group(transactions).values():
            if len(occurrences) < 2:
                continue

            ordered = sorted(occurrences, key=lambda t: t.date)
            average = self.average_interval(ordered)
            last = ordered[-1]
            days_since_last = (as_of - last.date).days

            if days_since_last < average * self.due_ratio:
                continue

            if self._already_recorded(transactions, last, as_of):
                logger.debug("Skipping %s, already recorded on %s", last.description, as_of)
                continue

            candidates.append(RecurrenceCandidate(
                last_occurrence=last,
                average_interval_days=average,
            ))

        logger.info("Found %d due recurring transaction(s) as of %s", len(candidates), as_of)
        return candidates

    @staticmethod
    def _already_recorded(
        transactions: Sequence[Transaction],
        template: Transaction,
        as_of: date
    ) -> bool:
        """True if an identical transaction already exists on `as_of`"""
        return any(
            t.description == template.description
            and t.amount == template.amount
            and t.date == as_of
            for t in transactions
        )

    @staticmethod
    def accept(
        candidate: RecurrenceCandidate,
        as_of: date,
        now: datetime
    ) -> Transaction:
        """
        Build the new occurrence for an accepted candidate.

        Copies the template fields, stamps `date=as_of`, a fresh id and
        created_at, and marks it recurring. The caller persists it.
        """
        return candidate.last_occurrence.copy_for(
            as_of,
            now,
            recurring=True,
        )
