import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pocket_tracker.automation.clock import Clock, SystemClock
from pocket_tracker.categorization import CategorizationEngine
from pocket_tracker.categorization.categories import INCOME
from pocket_tracker.domain.enums import RecordKind, TransactionType
from pocket_tracker.domain.models import Task, ShoppingItem, Transaction
from pocket_tracker.repositories.base import RecordStore

logger = logging.getLogger(__name__)

class TransactionService:
    """Creates and queries records, classifying new expenses on the way in."""

    def __init__(
        self,
        store: RecordStore,
        categorization_engine: Optional[CategorizationEngine] = None,
        clock: Optional[Clock] = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self._categorization_engine: Optional[CategorizationEngine] = categorization_engine

    @property
    def categorization_engine(self) -> CategorizationEngine:
        """Lazy-load categorization engine"""
        if self._categorization_engine is None:
            self._categorization_engine = CategorizationEngine()
        return self._categorization_engine

    def classify(self, description: str, history: Optional[List[Transaction]] = None) -> str:
        """
        Pick a category for a new expense description.

        Returns the fallback category when auto-categorization is turned off
        in settings.
        """
        if not self.store.get_settings().auto_categ:
            return self.categorization_engine.fallback
        if history is None:
            history = self.store.transactions()
        return self.categorization_engine.classify(description, history)

    def add_transaction(
        self,
        transaction_type: TransactionType,
        description: str,
        amount: Decimal,
        category: Optional[str] = None,
        day: Optional[date] = None,
        payment: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Transaction:
        """
        Record a new income or expense.

        Args:
            transaction_type: EXPENSE or INCOME
            description: Free text, e.g. "Lunch with Sam"
            amount: Non-negative amount
            category: Explicit category. If None, expenses are classified
                and incomes get "Income".
            day: Transaction day, defaults to today
            payment: Payment method, e.g. "card"
            notes: Free-form notes

        Raises:
            ValueError: If amount is negative
            StoreUnavailableError: If the store cannot be written
        """
        if amount < 0:
            raise ValueError(f"Amount cannot be negative, got {amount}")

        if category is None:
            if transaction_type == TransactionType.INCOME:
                category = INCOME
            else:
                category = self.classify(description)

        now = self.clock.now()
        transaction = Transaction(
            type=transaction_type,
            description=description,
            amount=amount,
            category=category,
            date=day or now.date(),
            payment=payment,
            notes=notes,
            created_at=now,
        )

        self.store.save_transaction(transaction)
        logger.info("Added %s %s (%s)", transaction_type.value, description, category)
        return transaction

    def add_task(self, title: str, **fields) -> Task:
        task = Task(title=title, created_at=self.clock.now(), **fields)
        self.store.save_task(task)
        return task

    def toggle_task(self, task_id: str) -> Task:
        """
        Flip a task's completed flag. Completed tasks get no reminders.

        Raises:
            RecordNotFoundError: If no task has this id
        """
        task = self.store.get_task(task_id)
        task.completed = not task.completed
        self.store.save_task(task)
        logger.info("Task %s %s", task.id, "completed" if task.completed else "reopened")
        return task

    def set_due_date(self, task_id: str, due_date: Optional[date]) -> Task:
        """
        Move or clear a task's due day.

        Reminders are keyed on the due day, so a new date re-arms them.

        Raises:
            RecordNotFoundError: If no task has this id
        """
        task = self.store.get_task(task_id)
        task.due_date = due_date
        self.store.save_task(task)
        return task

    def add_shopping_item(self, item: str, **fields) -> ShoppingItem:
        shopping_item = ShoppingItem(item=item, created_at=self.clock.now(), **fields)
        self.store.save_shopping_item(shopping_item)
        return shopping_item

    def get_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        """
        Query transactions with optional filters, newest first.

        Example:
            ### Get all January 2025 expenses
            transactions = service.get_transactions(
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 31),
                transaction_type=TransactionType.EXPENSE
            )
        """
        transactions = [
            t for t in self.store.transactions()
            if (start_date is None or t.date >= start_date)
            and (end_date is None or t.date <= end_date)
            and (transaction_type is None or t.type == transaction_type)
        ]
        transactions.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return transactions

    def delete_transaction(self, transaction_id: str) -> bool:
        return self.store.delete(RecordKind.TRANSACTIONS, transaction_id)
