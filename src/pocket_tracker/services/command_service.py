import logging
from typing import Any, Callable, Dict, Optional

from pocket_tracker.automation.budget import BudgetMonitor
from pocket_tracker.commands.grammar import CommandAction, CommandGrammar
from pocket_tracker.domain.enums import Priority, TransactionType
from pocket_tracker.services.models import CommandResult
from pocket_tracker.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

COMMAND_NOTE = "Added via voice"


def capitalize(text: str) -> str:
    """Upper-case the first letter only"""
    return text[:1].upper() + text[1:]


class CommandService:
    """
    Applies text commands to the record store.

    Parsing is all-or-nothing: an InputMalformedError from the grammar
    propagates before anything is written.
    """

    def __init__(
        self,
        transaction_service: TransactionService,
        grammar: Optional[CommandGrammar] = None,
    ):
        self.transactions = transaction_service
        self.grammar = grammar or CommandGrammar()
        self._handlers: Dict[CommandAction, Callable[..., CommandResult]] = {
            CommandAction.ADD_EXPENSE: self._add_expense,
            CommandAction.ADD_INCOME: self._add_income,
            CommandAction.ADD_SHOPPING: self._add_shopping,
            CommandAction.ADD_TASK: self._add_task,
            CommandAction.SHOW_BUDGET: self._show_budget,
        }

    def execute(self, text: str) -> CommandResult:
        """
        Parse and apply one command.

        Raises:
            InputMalformedError: If the command is not recognized
            StoreUnavailableError: If the store cannot be written
        """
        command = self.grammar.parse(text)
        logger.debug("Parsed %r as %s", text, command.action.value)
        return self._handlers[command.action](**command.args)

    def _add_expense(self, description: str, amount: Any) -> CommandResult:
        txn = self.transactions.add_transaction(
            TransactionType.EXPENSE,
            capitalize(description),
            amount,
            payment="card",
            notes=COMMAND_NOTE,
        )
        return CommandResult(
            action=CommandAction.ADD_EXPENSE.value,
            message=f"Added expense: {txn.description} - ${txn.amount:,.2f} ({txn.category})",
            transaction=txn,
        )

    def _add_income(self, description: str, amount: Any) -> CommandResult:
        txn = self.transactions.add_transaction(
            TransactionType.INCOME,
            capitalize(description),
            amount,
            notes=COMMAND_NOTE,
        )
        return CommandResult(
            action=CommandAction.ADD_INCOME.value,
            message=f"Added income: {txn.description} - ${txn.amount:,.2f}",
            transaction=txn,
        )

    def _add_shopping(self, item: str) -> CommandResult:
        shopping_item = self.transactions.add_shopping_item(capitalize(item))
        return CommandResult(
            action=CommandAction.ADD_SHOPPING.value,
            message=f"Added to shopping: {shopping_item.item}",
            shopping_item=shopping_item,
        )

    def _add_task(self, title: str) -> CommandResult:
        task = self.transactions.add_task(
            capitalize(title),
            priority=Priority.MEDIUM,
            category="personal",
        )
        return CommandResult(
            action=CommandAction.ADD_TASK.value,
            message=f"Added task: {task.title}",
            task=task,
        )

    def _show_budget(self) -> CommandResult:
        store = self.transactions.store
        status = BudgetMonitor.status(
            store.transactions(),
            store.get_settings(),
            self.transactions.clock.today(),
        )
        if status.percentage is None:
            message = f"Spent ${status.spent:,.2f} this month (no budget set)"
        else:
            message = (
                f"Spent ${status.spent:,.2f} of ${status.budget:,.2f} "
                f"({status.percentage:.0f}%)"
            )
        return CommandResult(action=CommandAction.SHOW_BUDGET.value, message=message)
