import logging
from datetime import timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from pocket_tracker.automation.budget import BudgetMonitor, BudgetStatus
from pocket_tracker.automation.clock import Clock, SystemClock
from pocket_tracker.automation.insights import (
    QuickExpense,
    suggest_budget,
    suggest_quick_expenses,
    top_category_insight,
)
from pocket_tracker.automation.ledger import SuppressionLedger
from pocket_tracker.automation.notifications import NotificationSink, deliver
from pocket_tracker.automation.recurrence import RecurrenceCandidate, RecurrenceDetector
from pocket_tracker.automation.reminders import ReminderScheduler
from pocket_tracker.automation.scheduler import AutomationScheduler
from pocket_tracker.automation.shopping import ShoppingConverter
from pocket_tracker.categorization import CategorizationEngine
from pocket_tracker.config.settings import AutomationConfig
from pocket_tracker.repositories.base import RecordStore, StoreUnavailableError
from pocket_tracker.services.models import (
    BudgetSweepResult,
    PurchaseResult,
    RecurrenceSweepResult,
    ReminderSweepResult,
)

logger = logging.getLogger(__name__)

AcceptCallback = Callable[[RecurrenceCandidate], bool]


class AutomationService:
    """
    Runs automation sweeps against the record store.

    Each sweep reads a full snapshot, evaluates it, and writes records back
    one at a time. A store failure on one item is logged and the sweep moves
    on to the next item; a failed snapshot read ends only that sweep.
    """

    def __init__(
        self,
        store: RecordStore,
        ledger: SuppressionLedger,
        clock: Optional[Clock] = None,
        sink: Optional[NotificationSink] = None,
        categorization_engine: Optional[CategorizationEngine] = None,
        config: Optional[AutomationConfig] = None,
    ):
        self.store = store
        self.ledger = ledger
        self.clock = clock or SystemClock()
        self.sink = sink
        self.config = config or AutomationConfig.load()
        self._categorization_engine = categorization_engine

        self.detector = RecurrenceDetector(due_ratio=self.config.recurrence_due_ratio)
        self.budget_monitor = BudgetMonitor(
            ledger,
            ninety_percent=self.config.ninety_percent_threshold,
            exceeded=self.config.exceeded_threshold,
        )
        self.reminder_scheduler = ReminderScheduler(ledger)

    @property
    def categorization_engine(self) -> CategorizationEngine:
        """Lazy-load categorization engine"""
        if self._categorization_engine is None:
            self._categorization_engine = CategorizationEngine()
        return self._categorization_engine

    def sweep_recurring(self, accept: Optional[AcceptCallback] = None) -> RecurrenceSweepResult:
        """
        Detect due recurring transactions and create the accepted ones.

        Args:
            accept: Called once per candidate; a new transaction is saved only
                when it returns True. If None, candidates are only reported.

        Returns:
            RecurrenceSweepResult with candidates, created and declined
        """
        result = RecurrenceSweepResult()
        now = self.clock.now()
        as_of = now.date()

        try:
            transactions = self.store.transactions()
        except StoreUnavailableError as e:
            logger.warning("Recurring sweep aborted: %s", e)
            result.error_messages.append(str(e))
            return result

        result.candidates = self.detector.detect_due(transactions, as_of)

        for candidate in result.candidates:
            if accept is None or not accept(candidate):
                result.declined.append(candidate)
                continue

            new_transaction = self.detector.accept(candidate, as_of, now)
            try:
                self.store.save_transaction(new_transaction)
            except StoreUnavailableError as e:
                logger.warning("Skipping recurring %s: %s", candidate.description, e)
                result.error_messages.append(str(e))
                continue

            result.created.append(new_transaction)
            logger.info("Recurring transaction added: %s", new_transaction.description)

        return result

    def sweep_budget(self) -> BudgetSweepResult:
        """Raise budget threshold alerts and compute the monthly insight."""
        result = BudgetSweepResult()
        now = self.clock.now()

        try:
            transactions = self.store.transactions()
            settings = self.store.get_settings()
        except StoreUnavailableError as e:
            logger.warning("Budget sweep aborted: %s", e)
            result.error_messages.append(str(e))
            return result

        result.alerts = self.budget_monitor.evaluate(
            transactions, settings, now.date(), errors=result.error_messages,
        )

        for alert in result.alerts:
            if alert.notify:
                deliver(self.sink, "budget", alert.title, alert.message)

        result.insight = top_category_insight(transactions, now.date())
        if result.insight:
            logger.info("Insight: %s", result.insight)

        return result

    def sweep_reminders(self) -> ReminderSweepResult:
        """Raise due-date reminders. Skipped when notifications are off."""
        result = ReminderSweepResult()
        now = self.clock.now()

        try:
            settings = self.store.get_settings()
            tasks = self.store.tasks()
        except StoreUnavailableError as e:
            logger.warning("Reminder sweep aborted: %s", e)
            result.error_messages.append(str(e))
            return result

        if not settings.notifications:
            logger.debug("Notifications disabled, skipping reminders")
            return result

        for task in tasks:
            try:
                reminders = self.reminder_scheduler.scan([task], now)
            except StoreUnavailableError as e:
                logger.warning("Skipping reminder for task %s: %s", task.id, e)
                result.error_messages.append(str(e))
                continue

            for reminder in reminders:
                deliver(self.sink, "reminder", "Task Reminder", reminder.message)
            result.reminders.extend(reminders)

        return result

    def toggle_purchased(self, item_id: str) -> PurchaseResult:
        """
        Flip a shopping item's purchased flag.

        On the transition to purchased, a priced item with no expense yet
        gets one, classified from its name. The expense is written before
        the item, so a failed write leaves the item unpurchased and the
        toggle can simply be retried.

        Raises:
            RecordNotFoundError: If no item has this id
            StoreUnavailableError: If the store cannot be read or written
        """
        item = self.store.get_shopping_item(item_id)
        item.purchased = not item.purchased
        result = PurchaseResult(item=item)

        history = self.store.transactions()
        if ShoppingConverter.should_convert(item, history):
            now = self.clock.now()
            converter = ShoppingConverter(self.categorization_engine)
            result.expense = converter.to_expense(item, history, now.date(), now)
            self.store.save_transaction(result.expense)
            logger.info("Added expense %s from shopping item %s", result.expense.amount, item.id)

        self.store.save_shopping_item(item)
        return result

    def budget_status(self) -> BudgetStatus:
        return BudgetMonitor.status(
            self.store.transactions(),
            self.store.get_settings(),
            self.clock.today(),
        )

    def suggest_budget(self) -> Optional[Decimal]:
        return suggest_budget(self.store.transactions(), self.clock.today())

    def quick_expenses(self) -> List[QuickExpense]:
        return suggest_quick_expenses(self.store.transactions())

    def build_scheduler(
        self,
        accept: Optional[AcceptCallback] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> AutomationScheduler:
        """Periodic driver running all three sweeps at their configured cadence"""
        scheduler = AutomationScheduler(self.clock, sleep) if sleep else AutomationScheduler(self.clock)
        scheduler.every(
            timedelta(minutes=self.config.recurrence_interval_minutes),
            "recurrence",
            lambda: self.sweep_recurring(accept),
        )
        scheduler.every(
            timedelta(minutes=self.config.budget_interval_minutes),
            "budget",
            self.sweep_budget,
        )
        scheduler.every(
            timedelta(minutes=self.config.reminders_interval_minutes),
            "reminders",
            self.sweep_reminders,
        )
        return scheduler
