import pytest
from datetime import date, datetime

from pocket_tracker.automation.clock import FixedClock
from pocket_tracker.automation.ledger import InMemorySuppressionLedger
from pocket_tracker.database.connection import DatabaseConfig, DatabaseManager
from pocket_tracker.repositories.sqlite_record_store import SQLiteRecordStore
from tests.factories import make_transaction


@pytest.fixture
def ledger() -> InMemorySuppressionLedger:
    """Fresh suppression ledger for each test"""
    return InMemorySuppressionLedger()

@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 22, 9, 0))

@pytest.fixture
def coffee_history():
    """Weekly coffee, last bought on 2024-01-15"""
    return [
        make_transaction("Coffee", "5", date(2024, 1, 1), "Food"),
        make_transaction("Coffee", "5", date(2024, 1, 8), "Food"),
        make_transaction("Coffee", "5", date(2024, 1, 15), "Food"),
    ]

@pytest.fixture
def test_db(tmp_path):
    """
    Create a real test database.

    Use pytest's tmp_path fixture to create a temporary directory.
    Database is automatically cleaned up after each test.
    """
    db_manager = DatabaseManager(DatabaseConfig(tmp_path / "test.db"))
    db_manager.initialize()

    yield db_manager

    db_manager.close()

@pytest.fixture
def store(test_db) -> SQLiteRecordStore:
    """Record store on a temporary database"""
    return SQLiteRecordStore(test_db)
