"""
Due-date reminders for open tasks.

A task's due instant is local midnight at the start of its due day, taken
in the same naive local time the clock reports. Reading a bare "YYYY-MM-DD"
as UTC midnight instead would shift every window by the local UTC offset.
Every scan places the hours left into at most one window:

    23 < hours <= 24    DAY_BEFORE   (narrow band approximating "crossing 24h")
     0 < hours <= 1     HOUR_BEFORE
         hours < 0      OVERDUE

Each (task, due date, window) fires once. Because the due date is part of
the ledger subject, moving a task's due date re-arms its reminders.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import List, Optional, Sequence

from pocket_tracker.automation.ledger import SuppressionLedger
from pocket_tracker.domain.enums import ReminderWindow
from pocket_tracker.domain.models import Task

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class Reminder:
    task: Task
    window: ReminderWindow
    hours_until_due: float

    @property
    def message(self) -> str:
        if self.window == ReminderWindow.OVERDUE:
            return f"⏰ Task overdue: {self.task.title}"
        timing = "24 hours" if self.window == ReminderWindow.DAY_BEFORE else "1 hour"
        return f"⏰ Task due in {timing}: {self.task.title}"

    def __str__(self) -> str:
        return self.message


def hours_until_due(task: Task, now: datetime) -> float:
    due = datetime.combine(task.due_date, time.min)
    return (due - now).total_seconds() / SECONDS_PER_HOUR


def window_for(hours: float) -> Optional[ReminderWindow]:
    """The lead-time window `hours` falls into, if any"""
    if 23 < hours <= 24:
        return ReminderWindow.DAY_BEFORE
    if 0 < hours <= 1:
        return ReminderWindow.HOUR_BEFORE
    if hours < 0:
        return ReminderWindow.OVERDUE
    return None


class ReminderScheduler:
    """
    Scans tasks and raises one-shot reminders.

    Usage:
        scheduler = ReminderScheduler(ledger)
        for reminder in scheduler.scan(tasks, now=datetime.now()):
            sink.notify("reminder", "Task Reminder", reminder.message)
    """

    def __init__(self, ledger: SuppressionLedger):
        self.ledger = ledger

    @staticmethod
    def subject(task: Task) -> str:
        return f"task:{task.id}:{task.due_date.isoformat()}"

    def scan(self, tasks: Sequence[Task], now: datetime) -> List[Reminder]:
        """
        Args:
            tasks: All tasks, in stored order
            now: Current instant

        Returns:
            Reminders raised by this scan
        """
        reminders: List[Reminder] = []

        for task in tasks:
            if task.completed or task.due_date is None:
                continue

            hours = hours_until_due(task, now)
            window = window_for(hours)
            if window is None:
                continue

            if not self.ledger.claim(self.subject(task), window.value):
                continue

            logger.info("Reminder %s for task %s", window.value, task.id)
            reminders.append(Reminder(task=task, window=window, hours_until_due=hours))

        return reminders
