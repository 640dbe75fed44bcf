import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, TypeVar

from pocket_tracker.domain.enums import RecordKind
from pocket_tracker.domain.models import Settings, ShoppingItem, Task, Transaction

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
T = TypeVar("T")

SETTINGS_ID = "settings"

# What a hand-edited or half-written record raises from `from_record`
MALFORMED_RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError, ArithmeticError)

class StoreUnavailableError(Exception):
    """Raised when the record store cannot be read or written."""
    pass

class RecordNotFoundError(Exception):
    """Raised when a record cannot be found."""
    pass

class RecordStore(ABC):
    """
    Abstract keyed store for transactions, tasks, shopping items and settings.

    Implementations only provide `list`, `upsert` and `delete` over plain
    dict records. The typed helpers below convert to and from domain models.
    Insertion order is not guaranteed; callers sort when order matters.
    """

    @abstractmethod
    def list(self, kind: RecordKind) -> List[Record]:
        """
        Return every record of a kind.

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    def upsert(self, kind: RecordKind, record: Record) -> Record:
        """
        Insert a record, or replace the existing one with the same id.

        Args:
            kind: Collection to write to
            record: Record with an "id" key

        Returns:
            The stored record

        Raises:
            StoreUnavailableError: If the store cannot be written
        """
        pass

    @abstractmethod
    def delete(self, kind: RecordKind, record_id: str) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        pass

    # Typed helpers

    def _convert(self, kind: RecordKind, from_record: Callable[[Record], T]) -> List[T]:
        """Convert every record of a kind, skipping and logging malformed ones"""
        converted: List[T] = []
        for record in self.list(kind):
            try:
                converted.append(from_record(record))
            except MALFORMED_RECORD_ERRORS as e:
                record_id = record.get("id") if isinstance(record, dict) else None
                logger.warning("Skipping malformed %s record %s: %r", kind.value, record_id, e)
        return converted

    def transactions(self) -> List[Transaction]:
        return self._convert(RecordKind.TRANSACTIONS, Transaction.from_record)

    def save_transaction(self, transaction: Transaction) -> Transaction:
        self.upsert(RecordKind.TRANSACTIONS, transaction.to_record())
        return transaction

    def tasks(self) -> List[Task]:
        return self._convert(RecordKind.TASKS, Task.from_record)

    def save_task(self, task: Task) -> Task:
        self.upsert(RecordKind.TASKS, task.to_record())
        return task

    def get_task(self, task_id: str) -> Task:
        """
        Raises:
            RecordNotFoundError: If no task has this id
        """
        for task in self.tasks():
            if task.id == task_id:
                return task
        raise RecordNotFoundError(f"Task with ID {task_id} not found")

    def shopping_items(self) -> List[ShoppingItem]:
        return self._convert(RecordKind.SHOPPING, ShoppingItem.from_record)

    def save_shopping_item(self, item: ShoppingItem) -> ShoppingItem:
        self.upsert(RecordKind.SHOPPING, item.to_record())
        return item

    def get_shopping_item(self, item_id: str) -> ShoppingItem:
        """
        Raises:
            RecordNotFoundError: If no item has this id
        """
        for item in self.shopping_items():
            if item.id == item_id:
                return item
        raise RecordNotFoundError(f"Shopping item with ID {item_id} not found")

    def get_settings(self) -> Settings:
        """Settings snapshot, stored values merged over defaults"""
        for settings in self._convert(RecordKind.SETTINGS, self._settings_from_record):
            if settings is not None:
                return settings
        return Settings()

    @staticmethod
    def _settings_from_record(record: Record):
        if record.get("id") != SETTINGS_ID:
            return None
        return Settings.from_record(record)

    def save_settings(self, settings: Settings) -> Settings:
        self.upsert(RecordKind.SETTINGS, settings.to_record())
        return settings
