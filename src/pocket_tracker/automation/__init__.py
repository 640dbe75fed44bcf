"""
Automation engine: recurrence detection, budget alerts, task reminders
and shopping-to-expense conversion.

Every component is pure given (records, settings, now) plus an injected
suppression ledger; the periodic driver and persistence live elsewhere.
"""
from pocket_tracker.automation.budget import BudgetAlert, BudgetMonitor, BudgetStatus
from pocket_tracker.automation.clock import Clock, FixedClock, SystemClock
from pocket_tracker.automation.ledger import InMemorySuppressionLedger, SuppressionLedger
from pocket_tracker.automation.notifications import ConsoleNotificationSink, NotificationSink
from pocket_tracker.automation.recurrence import RecurrenceCandidate, RecurrenceDetector
from pocket_tracker.automation.reminders import Reminder, ReminderScheduler
from pocket_tracker.automation.scheduler import AutomationScheduler
from pocket_tracker.automation.shopping import ShoppingConverter

__all__ = [
    "AutomationScheduler",
    "BudgetAlert",
    "BudgetMonitor",
    "BudgetStatus",
    "Clock",
    "ConsoleNotificationSink",
    "FixedClock",
    "InMemorySuppressionLedger",
    "NotificationSink",
    "RecurrenceCandidate",
    "RecurrenceDetector",
    "Reminder",
    "ReminderScheduler",
    "ShoppingConverter",
    "SuppressionLedger",
    "SystemClock",
]
