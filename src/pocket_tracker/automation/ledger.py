"""
Suppression ledger: records which (subject, condition) pairs already fired.

Components never keep "already notified" state of their own. They receive
a ledger, check it before raising an alert and mark it when they do, so a
test can hand in a fresh or pre-populated ledger.
"""
from abc import ABC, abstractmethod
from typing import Set, Tuple


class SuppressionLedger(ABC):
    """Boolean flags keyed by (subject, condition)."""

    @abstractmethod
    def is_set(self, subject: str, condition: str) -> bool:
        pass

    @abstractmethod
    def mark(self, subject: str, condition: str) -> None:
        """Set the flag. Marking an already set flag is a no-op."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every flag, starting a new suppression epoch."""
        pass

    def claim(self, subject: str, condition: str) -> bool:
        """
        Mark the flag if it was not set yet.

        Returns:
            True if the caller should fire, False if already fired
        """
        if self.is_set(subject, condition):
            return False
        self.mark(subject, condition)
        return True


class InMemorySuppressionLedger(SuppressionLedger):
    """Session-scoped ledger: flags live as long as the process."""

    def __init__(self):
        self._flags: Set[Tuple[str, str]] = set()

    def is_set(self, subject: str, condition: str) -> bool:
        return (subject, condition) in self._flags

    def mark(self, subject: str, condition: str) -> None:
        self._flags.add((subject, condition))

    def clear(self) -> None:
        self._flags.clear()

    def __len__(self) -> int:
        return len(self._flags)

    def __repr__(self) -> str:
        return f"InMemorySuppressionLedger({len(self._flags)} flags)"
