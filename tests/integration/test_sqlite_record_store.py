import pytest
from datetime import date
from decimal import Decimal

from pocket_tracker.domain.enums import Priority, RecordKind, TransactionType
from pocket_tracker.domain.models import Settings, ShoppingItem, Task, Transaction
from pocket_tracker.repositories.base import RecordNotFoundError, StoreUnavailableError
from pocket_tracker.repositories.sqlite_record_store import SQLiteRecordStore
from tests.factories import make_transaction

@pytest.fixture
def sample_transaction() -> Transaction:
    """Reusable sample transaction."""
    return make_transaction(
        "Test Purchase", "99.99", date(2025, 1, 15), "Shopping",
        payment="card", notes="gift",
    )

@pytest.mark.integration
class TestSQLiteRecordStore:
    """Test suite for the SQLite record store. Uses a real temp db."""

    def test_save_and_read_transaction(self, store: SQLiteRecordStore, sample_transaction: Transaction):
        # Act
        store.save_transaction(sample_transaction)
        loaded = store.transactions()

        # Assert
        assert loaded == [sample_transaction]
        assert loaded[0].amount == Decimal("99.99")

    def test_records_keep_insertion_order(self, store: SQLiteRecordStore):
        # Arrange
        first = make_transaction("Rent", "900", date(2025, 1, 1))
        second = make_transaction("Coffee", "5", date(2024, 12, 1))
        third = make_transaction("Lunch", "12", date(2025, 2, 1))

        # Act
        for txn in (first, second, third):
            store.save_transaction(txn)

        # Assert
        assert [t.description for t in store.transactions()] == ["Rent", "Coffee", "Lunch"]

    def test_upsert_replaces_in_place(self, store: SQLiteRecordStore, sample_transaction: Transaction):
        # Arrange
        other = make_transaction("Coffee", "5", date(2025, 1, 16))
        store.save_transaction(sample_transaction)
        store.save_transaction(other)

        # Act
        sample_transaction.category = "Bills"
        store.save_transaction(sample_transaction)

        # Assert
        loaded = store.transactions()
        assert len(loaded) == 2
        assert loaded[0].id == sample_transaction.id
        assert loaded[0].category == "Bills"

    def test_kinds_are_separate(self, store: SQLiteRecordStore, sample_transaction: Transaction):
        store.save_transaction(sample_transaction)

        assert store.tasks() == []
        assert store.shopping_items() == []

    def test_upsert_without_id_is_rejected(self, store: SQLiteRecordStore):
        with pytest.raises(ValueError, match="without ID"):
            store.upsert(RecordKind.TASKS, {"title": "No id"})

    def test_delete(self, store: SQLiteRecordStore, sample_transaction: Transaction):
        store.save_transaction(sample_transaction)

        assert store.delete(RecordKind.TRANSACTIONS, sample_transaction.id) is True
        assert store.delete(RecordKind.TRANSACTIONS, sample_transaction.id) is False
        assert store.transactions() == []

    def test_task_round_trip(self, store: SQLiteRecordStore):
        task = Task(title="File taxes", priority=Priority.HIGH, due_date=date(2025, 4, 15))

        store.save_task(task)

        assert store.tasks() == [task]

    def test_get_shopping_item(self, store: SQLiteRecordStore):
        # Arrange
        milk = ShoppingItem(item="Milk", quantity=2, price=Decimal("3"))
        store.save_shopping_item(milk)

        # Act & Assert
        assert store.get_shopping_item(milk.id) == milk
        with pytest.raises(RecordNotFoundError):
            store.get_shopping_item("missing")

    def test_get_task(self, store: SQLiteRecordStore):
        task = store.save_task(Task(title="File taxes", due_date=date(2025, 4, 15)))

        assert store.get_task(task.id) == task
        with pytest.raises(RecordNotFoundError, match="Task with ID missing"):
            store.get_task("missing")

    def test_malformed_records_are_skipped(self, store: SQLiteRecordStore, sample_transaction: Transaction):
        # Arrange
        store.save_transaction(sample_transaction)
        store.upsert(RecordKind.TRANSACTIONS, {
            "id": "bad-amount", "type": "expense", "description": "x", "amount": "abc", "date": "2025-01-10",
        })
        store.upsert(RecordKind.TRANSACTIONS, {"id": "no-type", "description": "x", "amount": "1"})
        store.upsert(RecordKind.TASKS, {"id": "bad-date", "title": "x", "dueDate": "someday"})

        # Act & Assert
        assert store.transactions() == [sample_transaction]
        assert store.tasks() == []

    def test_malformed_settings_fall_back_to_defaults(self, store: SQLiteRecordStore):
        store.upsert(RecordKind.SETTINGS, {"id": "settings", "budget": "lots"})

        assert store.get_settings() == Settings()

    def test_settings_default_until_saved(self, store: SQLiteRecordStore):
        # Arrange
        assert store.get_settings() == Settings()
        updated = Settings(budget=Decimal("1500"), currency="EUR", notifications=False)

        # Act
        store.save_settings(updated)

        # Assert
        assert store.get_settings() == updated
        assert len(store.list(RecordKind.SETTINGS)) == 1

    def test_partial_settings_record_uses_defaults(self, store: SQLiteRecordStore):
        store.upsert(RecordKind.SETTINGS, {"id": "settings", "budget": "200"})

        settings = store.get_settings()

        assert settings.budget == Decimal("200")
        assert settings.notifications is True
        assert settings.currency == "USD"

    def test_income_type_survives(self, store: SQLiteRecordStore):
        salary = make_transaction("Salary", "4000", date(2025, 1, 31), "Income", type=TransactionType.INCOME)

        store.save_transaction(salary)

        assert store.transactions()[0].type == TransactionType.INCOME

    def test_database_errors_become_store_unavailable(self, store: SQLiteRecordStore, test_db):
        # Arrange
        with test_db.transaction() as conn:
            conn.execute("DROP TABLE records")

        # Act & Assert
        with pytest.raises(StoreUnavailableError):
            store.transactions()
        with pytest.raises(StoreUnavailableError):
            store.save_transaction(make_transaction("Coffee", "5", date(2025, 1, 1)))


@pytest.mark.integration
def test_schema_version_is_recorded(test_db):
    row = test_db.get_connection().execute("SELECT MAX(version) AS v FROM schema_version").fetchone()
    assert row["v"] == 1


@pytest.mark.integration
def test_initialize_is_idempotent(test_db):
    test_db.initialize()

    count = test_db.get_connection().execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
    assert count == 1
