import sqlite3

from pocket_tracker.automation.ledger import SuppressionLedger
from pocket_tracker.database.connection import DatabaseManager
from pocket_tracker.repositories.base import StoreUnavailableError

class SQLiteSuppressionLedger(SuppressionLedger):
    """
    Persistent ledger backed by the `suppression_flags` table.

    Flags survive restarts, so a `watch` process and a one-off `sweep`
    share the same epoch.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    def is_set(self, subject: str, condition: str) -> bool:
        try:
            conn = self.db.get_connection()
            cursor = conn.execute(
                "SELECT 1 FROM suppression_flags WHERE subject = ? AND condition = ?",
                (subject, condition),
            )
            return cursor.fetchone() is not None
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not read suppression flags: {e}") from e

    def mark(self, subject: str, condition: str) -> None:
        try:
            with self.db.transaction() as conn:
                conn.execute(
                    """
                    INSERT OR IGNORE INTO suppression_flags (subject, condition)
                    VALUES (?, ?)
                    """,
                    (subject, condition),
                )
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not write suppression flag: {e}") from e

    def clear(self) -> None:
        try:
            with self.db.transaction() as conn:
                conn.execute("DELETE FROM suppression_flags")
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not clear suppression flags: {e}") from e
