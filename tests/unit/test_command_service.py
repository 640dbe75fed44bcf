import pytest
from datetime import date, datetime
from decimal import Decimal

from pocket_tracker.automation.clock import FixedClock
from pocket_tracker.commands.grammar import InputMalformedError
from pocket_tracker.domain.enums import Priority, TransactionType
from pocket_tracker.domain.models import Settings
from pocket_tracker.services.command_service import CommandService, capitalize
from pocket_tracker.services.transaction_service import TransactionService
from tests.factories import make_transaction


@pytest.fixture
def mock_store(mocker):
    store = mocker.Mock()
    store.transactions.return_value = []
    store.get_settings.return_value = Settings()
    return store

@pytest.fixture
def commands(mock_store) -> CommandService:
    clock = FixedClock(datetime(2025, 1, 20, 8, 0))
    return CommandService(TransactionService(mock_store, clock=clock))


@pytest.mark.unit
class TestCommandService:

    def test_expense_command(self, commands, mock_store):
        # Act
        result = commands.execute("Add coffee 5 dollars")

        # Assert
        txn = result.transaction
        assert txn.type == TransactionType.EXPENSE
        assert txn.description == "Coffee"
        assert txn.amount == Decimal("5")
        assert txn.category == "Food"
        assert txn.payment == "card"
        assert txn.notes == "Added via voice"
        assert result.message == "Added expense: Coffee - $5.00 (Food)"
        mock_store.save_transaction.assert_called_once_with(txn)

    def test_expense_keeps_original_case(self, commands):
        result = commands.execute("add coffee at KFC 12")

        assert result.transaction.description == "Coffee at KFC"

    def test_income_command(self, commands):
        result = commands.execute("income freelance work 250.50")

        assert result.transaction.type == TransactionType.INCOME
        assert result.transaction.description == "Freelance work"
        assert result.transaction.category == "Income"

    def test_shopping_command(self, commands, mock_store):
        result = commands.execute("add milk to shopping")

        assert result.shopping_item.item == "Milk"
        assert result.message == "Added to shopping: Milk"
        mock_store.save_shopping_item.assert_called_once_with(result.shopping_item)

    def test_task_command(self, commands, mock_store):
        result = commands.execute("remind me to call the bank")

        assert result.task.title == "Call the bank"
        assert result.task.priority == Priority.MEDIUM
        assert result.task.category == "personal"
        mock_store.save_task.assert_called_once_with(result.task)

    def test_budget_command(self, commands, mock_store):
        # Arrange
        mock_store.get_settings.return_value = Settings(budget=Decimal("1000"))
        mock_store.transactions.return_value = [
            make_transaction("Rent", "900", date(2025, 1, 1), "Bills"),
        ]

        # Act
        result = commands.execute("What's my budget?")

        # Assert
        assert result.message == "Spent $900.00 of $1,000.00 (90%)"
        mock_store.save_transaction.assert_not_called()

    def test_budget_command_without_budget(self, commands):
        result = commands.execute("show budget")

        assert result.message == "Spent $0.00 this month (no budget set)"

    def test_malformed_command_writes_nothing(self, commands, mock_store):
        with pytest.raises(InputMalformedError):
            commands.execute("buy me a pony")

        mock_store.save_transaction.assert_not_called()
        mock_store.save_task.assert_not_called()
        mock_store.save_shopping_item.assert_not_called()


@pytest.mark.unit
def test_capitalize():
    assert capitalize("coffee beans") == "Coffee beans"
    assert capitalize("") == ""
