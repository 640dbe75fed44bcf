import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from pocket_tracker.automation.clock import FixedClock
from pocket_tracker.config.settings import AutomationConfig
from pocket_tracker.domain.enums import RecordKind, TransactionType
from pocket_tracker.domain.models import Settings, ShoppingItem
from pocket_tracker.repositories.sqlite_record_store import SQLiteRecordStore
from pocket_tracker.repositories.sqlite_suppression_ledger import SQLiteSuppressionLedger
from pocket_tracker.services.automation_service import AutomationService
from pocket_tracker.services.command_service import CommandService
from pocket_tracker.services.transaction_service import TransactionService


@pytest.fixture
def flags(test_db) -> SQLiteSuppressionLedger:
    return SQLiteSuppressionLedger(test_db)

@pytest.fixture
def make_service(store, flags, clock, mocker):
    """Build a fresh service on the same database, like a restarted process"""
    def build(sink=None):
        return AutomationService(
            store,
            flags,
            clock=clock,
            sink=sink or mocker.Mock(),
            config=AutomationConfig(),
        )
    return build


@pytest.mark.integration
class TestSQLiteSuppressionLedger:

    def test_claim_marks_once(self, flags):
        assert flags.claim("budget:2024-01", "exceeded") is True
        assert flags.claim("budget:2024-01", "exceeded") is False
        assert flags.is_set("budget:2024-01", "exceeded")
        assert not flags.is_set("budget:2024-02", "exceeded")

    def test_mark_is_idempotent(self, flags):
        flags.mark("task:1:2024-01-01", "overdue")
        flags.mark("task:1:2024-01-01", "overdue")

        assert flags.is_set("task:1:2024-01-01", "overdue")

    def test_clear_starts_new_epoch(self, flags):
        flags.mark("budget:2024-01", "ninety-percent")

        flags.clear()

        assert flags.claim("budget:2024-01", "ninety-percent") is True


@pytest.mark.integration
class TestAutomationFlow:

    def test_budget_alert_survives_restart(self, store, make_service):
        # Arrange
        store.save_settings(Settings(budget=Decimal("100")))
        TransactionService(store).add_transaction(
            TransactionType.EXPENSE, "Dinner", Decimal("95"), day=date(2024, 1, 10),
        )

        # Act
        first = make_service().sweep_budget()
        after_restart = make_service().sweep_budget()

        # Assert
        assert len(first.alerts) == 1
        assert after_restart.alerts == []

    def test_shopping_purchase_creates_one_expense(self, store, make_service):
        # Arrange
        service = make_service()
        milk = store.save_shopping_item(ShoppingItem(item="Milk", quantity=2, price=Decimal("3")))

        # Act - purchase, un-purchase, purchase again
        bought = service.toggle_purchased(milk.id)
        service.toggle_purchased(milk.id)
        again = service.toggle_purchased(milk.id)

        # Assert
        expenses = store.transactions()
        assert len(expenses) == 1
        assert expenses[0].amount == Decimal("6")
        assert expenses[0].shopping_item_id == milk.id
        assert bought.created_expense is True
        assert again.created_expense is False
        assert store.get_shopping_item(milk.id).purchased is True

    def test_accepted_recurrence_is_persisted_once(self, store, make_service, clock):
        # Arrange
        for day in (date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)):
            TransactionService(store).add_transaction(
                TransactionType.EXPENSE, "Coffee", Decimal("5"), day=day,
            )
        service = make_service()

        # Act
        first = service.sweep_recurring(lambda candidate: True)
        clock.advance(timedelta(hours=1))
        second = service.sweep_recurring(lambda candidate: True)

        # Assert
        assert len(first.created) == 1
        assert second.candidates == []
        coffees = [t for t in store.transactions() if t.date == date(2024, 1, 22)]
        assert len(coffees) == 1
        assert coffees[0].recurring is True

    def test_voice_commands_feed_the_store(self, store, clock):
        # Arrange
        commands = CommandService(TransactionService(store, clock=clock))

        # Act
        commands.execute("add coffee 4.50")
        commands.execute("add milk to shopping")
        commands.execute("task pay rent")

        # Assert
        assert [t.description for t in store.transactions()] == ["Coffee"]
        assert [i.item for i in store.shopping_items()] == ["Milk"]
        assert [t.title for t in store.tasks()] == ["Pay rent"]

    def test_overdue_reminder_delivered_once_across_restarts(self, store, make_service, mocker):
        # Arrange
        sink = mocker.Mock()
        TransactionService(store).add_task("Call plumber", due_date=date(2024, 1, 20))

        # Act
        make_service(sink).sweep_reminders()
        make_service(sink).sweep_reminders()

        # Assert
        sink.notify.assert_called_once_with(
            "reminder", "Task Reminder", "⏰ Task overdue: Call plumber"
        )

    def test_completed_task_is_not_reminded(self, store, make_service, mocker):
        # Arrange
        sink = mocker.Mock()
        tasks = TransactionService(store)
        task = tasks.add_task("Call plumber", due_date=date(2024, 1, 20))
        tasks.toggle_task(task.id)

        # Act
        result = make_service(sink).sweep_reminders()

        # Assert
        assert result.reminders == []
        sink.notify.assert_not_called()

    def test_moving_due_date_rearms_reminder(self, store, make_service, mocker):
        # Arrange
        sink = mocker.Mock()
        tasks = TransactionService(store)
        task = tasks.add_task("Call plumber", due_date=date(2024, 1, 20))
        make_service(sink).sweep_reminders()

        # Act
        tasks.set_due_date(task.id, date(2024, 1, 21))
        moved = make_service(sink).sweep_reminders()
        repeat = make_service(sink).sweep_reminders()

        # Assert
        assert len(moved.reminders) == 1
        assert repeat.reminders == []
        assert sink.notify.call_count == 2

    def test_malformed_record_does_not_stop_sweeps(self, store, make_service):
        # Arrange
        store.save_settings(Settings(budget=Decimal("100")))
        store.upsert(RecordKind.TRANSACTIONS, {
            "id": "bad", "type": "expense", "description": "Broken", "amount": "abc", "date": "2024-01-10",
        })
        TransactionService(store).add_transaction(
            TransactionType.EXPENSE, "Dinner", Decimal("95"), day=date(2024, 1, 10),
        )
        service = make_service()

        # Act
        budget = service.sweep_budget()
        recurring = service.sweep_recurring()

        # Assert
        assert [a.status.spent for a in budget.alerts] == [Decimal("95")]
        assert budget.error_messages == []
        assert recurring.error_messages == []
