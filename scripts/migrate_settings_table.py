#!/usr/bin/env python3
"""Idempotent SQLite migration for the journal_settings table."""

import sqlite3
import sys
from pathlib import Path

DB_PATH = Path(__file__).resolve().parent.parent / "journal.db"

CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS journal_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    schema_version INTEGER NOT NULL DEFAULT 0,
    payload TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP
);
"""

# Early builds stored the payload without a version column; rows default to v0
NEW_COLUMNS = [
    ("schema_version", "INTEGER NOT NULL DEFAULT 0"),
    ("updated_at", "TIMESTAMP"),
]


def migrate(db_path: Path = DB_PATH) -> None:
    if not db_path.exists():
        print(f"Database not found at {db_path}, nothing to migrate (tables will be created on startup)")
        return

    conn = sqlite3.connect(str(db_path))
    cursor = conn.cursor()

    cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='journal_settings'")
    if not cursor.fetchone():
        cursor.executescript(CREATE_TABLE)
        conn.commit()
        conn.close()
        print("Migration complete, created journal_settings table")
        return

    cursor.execute("PRAGMA table_info(journal_settings)")
    existing = {row[1] for row in cursor.fetchall()}

    added = []
    for col_name, col_type in NEW_COLUMNS:
        if col_name not in existing:
            cursor.execute(f"ALTER TABLE journal_settings ADD COLUMN {col_name} {col_type}")
            added.append(col_name)

    conn.commit()
    conn.close()

    if added:
        print(f"Migration complete, added columns: {', '.join(added)}")
    else:
        print("Migration: journal_settings is up to date, nothing to do")


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DB_PATH
    migrate(path)
