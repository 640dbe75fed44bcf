from datetime import date, datetime
from typing import Optional, Sequence

from pocket_tracker.categorization import CategorizationEngine
from pocket_tracker.domain.enums import TransactionType
from pocket_tracker.domain.models import ShoppingItem, Transaction

SHOPPING_NOTE = "Auto-created from shopping list"


class ShoppingConverter:
    """Turns a purchased shopping item into an expense."""

    def __init__(self, categorization_engine: CategorizationEngine):
        self.categorization_engine = categorization_engine

    @staticmethod
    def should_convert(item: ShoppingItem, history: Sequence[Transaction]) -> bool:
        """
        True for a purchased, priced item that has no expense yet.

        The check is derived from stored transactions, so toggling an item
        off and on again never produces a second expense.
        """
        if not item.purchased or item.price <= 0:
            return False
        return find_expense_for(item, history) is None

    def to_expense(
        self,
        item: ShoppingItem,
        history: Sequence[Transaction],
        today: date,
        now: datetime,
    ) -> Transaction:
        return Transaction(
            type=TransactionType.EXPENSE,
            description=item.item,
            amount=item.total,
            category=self.categorization_engine.classify(item.item, history),
            date=today,
            payment="card",
            notes=SHOPPING_NOTE,
            created_at=now,
            from_shopping=True,
            shopping_item_id=item.id,
        )


def find_expense_for(item: ShoppingItem, history: Sequence[Transaction]) -> Optional[Transaction]:
    for txn in history:
        if txn.shopping_item_id == item.id:
            return txn
    return None
