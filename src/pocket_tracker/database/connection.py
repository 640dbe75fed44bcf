"""
SQLite access for the record store and the suppression ledger.

A `watch` process and one-off CLI commands may open the same file at
once, so connections run in WAL mode and wait on a locked database
instead of failing straight away.
"""
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

DEFAULT_DB_PATH = Path("data/tracker.db")


class DatabaseConfig:
    """Where the tracker database lives and how long to wait on a lock."""

    def __init__(self, db_path: Union[Path, str] = DEFAULT_DB_PATH, busy_timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)


def configure_connection(conn: sqlite3.Connection) -> None:
    # Readers keep working while another process writes
    conn.execute("PRAGMA journal_mode = WAL")
    # Rows as dict-like objects; records are read by column name
    conn.row_factory = sqlite3.Row


class DatabaseManager:
    """
    Owns the single connection shared by the stores.

    Usage:
        with DatabaseManager(DatabaseConfig("data/tracker.db")) as db:
            db.initialize()
            store = SQLiteRecordStore(db)
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection: Optional[sqlite3.Connection] = None

    def get_connection(self) -> sqlite3.Connection:
        """Open the connection on first use"""
        if self._connection is None:
            conn = sqlite3.connect(
                str(self.config.db_path.absolute()),
                timeout=self.config.busy_timeout,
                check_same_thread=False,
            )
            configure_connection(conn)
            self._connection = conn
        return self._connection

    def initialize(self, schema_path: Path = SCHEMA_PATH) -> None:
        """Create missing tables. Safe on an existing database."""
        execute_schema(self.get_connection(), schema_path)

    def close(self) -> None:
        if self._connection:
            self._connection.close()
            self._connection = None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Commit the block's writes together, or none of them.

        Usage:
            with db_manager.transaction() as conn:
                conn.execute("UPDATE records ...")
                conn.execute("INSERT INTO records ...")
        """
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def execute_schema(conn: sqlite3.Connection, schema_path: Path = SCHEMA_PATH) -> None:
    """Run every statement in a .sql file and commit"""
    conn.executescript(schema_path.read_text())
    conn.commit()
