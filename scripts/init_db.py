#!/usr/bin/env python3
"""
Initialize the tracker database.

Run this script to create the database schema.
"""
import sys
from pathlib import Path

from pocket_tracker.database.connection import DatabaseConfig, DatabaseManager, SCHEMA_PATH, execute_schema

def main():
    """initialize the database."""

    db_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("data/tracker.db")

    # Create database
    config = DatabaseConfig(db_path)
    print(f"Initializing database at: {config.db_path}")

    with DatabaseManager(config) as db:
        conn = db.get_connection()

        print(f"Executing schema from: {SCHEMA_PATH}")
        execute_schema(conn, SCHEMA_PATH)

        cursor = conn.execute(
            "SELECT version, description FROM schema_version ORDER BY version DESC LIMIT 1"
        )
        row = cursor.fetchone()

        if row:
            print(f"✓ Database initialized successfully!")
            print(f"  Schema version: {row['version']}")
            print(f"  Description: {row['description']}")
        else:
            print("✗ Database initialization may have failed")

if __name__ == "__main__":
    main()
