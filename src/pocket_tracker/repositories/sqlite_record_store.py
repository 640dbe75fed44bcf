import json
import logging
import sqlite3
from typing import List

from pocket_tracker.database.connection import DatabaseManager
from pocket_tracker.domain.enums import RecordKind
from pocket_tracker.repositories.base import Record, RecordStore, StoreUnavailableError

logger = logging.getLogger(__name__)

class SQLiteRecordStore(RecordStore):
    """
    SQLite implementation of the RecordStore.

    Each record is a JSON document in the `records` table, keyed by
    (kind, id). Records come back in insertion order; an upsert of an
    existing id keeps its original position.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    def list(self, kind: RecordKind) -> List[Record]:
        """Return all records of a kind in insertion order"""
        try:
            conn = self.db.get_connection()
            cursor = conn.execute(
                "SELECT body FROM records WHERE kind = ? ORDER BY position",
                (kind.value,)
            )
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not read {kind.value}: {e}") from e

        return [json.loads(row["body"]) for row in rows]

    def upsert(self, kind: RecordKind, record: Record) -> Record:
        """Insert or replace a single record."""
        if not record.get("id"):
            raise ValueError("Cannot store a record without ID")

        try:
            with self.db.transaction() as conn:
                cursor = conn.execute(
                    "UPDATE records SET body = ? WHERE kind = ? AND id = ?",
                    (json.dumps(record), kind.value, record["id"])
                )

                if cursor.rowcount == 0:
                    conn.execute(
                        """
                        INSERT INTO records (kind, id, body, position)
                        VALUES (?, ?, ?, (
                            SELECT COALESCE(MAX(position), 0) + 1 FROM records
                        ))
                        """,
                        (kind.value, record["id"], json.dumps(record))
                    )
        except sqlite3.Error as e:
            raise StoreUnavailableError(
                f"Could not write {kind.value} record {record['id']}: {e}"
            ) from e

        logger.debug("Stored %s record %s", kind.value, record["id"])
        return record

    def delete(self, kind: RecordKind, record_id: str) -> bool:
        """Delete a record by ID."""
        try:
            with self.db.transaction() as conn:
                cursor = conn.execute(
                    "DELETE FROM records WHERE kind = ? AND id = ?",
                    (kind.value, record_id)
                )
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StoreUnavailableError(
                f"Could not delete {kind.value} record {record_id}: {e}"
            ) from e
