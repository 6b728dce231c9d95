"""
SQLite persistence for parsed bank transactions.

Rows are keyed by (owner, date, amount, bank) so a re-synced alert updates
the existing row instead of duplicating it. A small sync_log table remembers
when each mailbox was last synced.
"""

import os
import sqlite3
from contextlib import contextmanager
from typing import Iterable, Optional

from alertas.config import DEFAULT_DB_PATH
from alertas.models import TransactionRecord


@contextmanager
def get_connection(db_path: str = DEFAULT_DB_PATH):
    """Yield a SQLite connection with row_factory set."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create tables if they don't exist."""
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with get_connection(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner TEXT NOT NULL,
                date TEXT NOT NULL,
                amount REAL NOT NULL,
                bank TEXT NOT NULL,
                type TEXT NOT NULL,
                description TEXT NOT NULL,
                category TEXT NOT NULL,
                message_id TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(owner, date, amount, bank)
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS sync_log (
                mailbox TEXT PRIMARY KEY,
                last_sync_at TEXT NOT NULL
            )
        """)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

def save_transactions(
    records: Iterable[TransactionRecord],
    owner: str,
    db_path: str = DEFAULT_DB_PATH,
) -> int:
    """Upsert records keyed by (owner, date, amount, bank). Returns rows written."""
    rows = [{**record.to_dict(), "owner": owner} for record in records]
    if not rows:
        return 0

    with get_connection(db_path) as conn:
        conn.executemany(
            """
            INSERT INTO transactions
                (owner, date, amount, bank, type, description, category, message_id)
            VALUES
                (:owner, :date, :amount, :bank, :type, :description, :category, :message_id)
            ON CONFLICT(owner, date, amount, bank) DO UPDATE SET
                type = excluded.type,
                description = excluded.description,
                category = excluded.category,
                message_id = excluded.message_id
            """,
            rows,
        )
    return len(rows)


def get_transactions(
    db_path: str = DEFAULT_DB_PATH,
    owner: Optional[str] = None,
    bank: Optional[str] = None,
) -> list[dict]:
    """Fetch stored transactions with optional filters, newest first."""
    query = "SELECT * FROM transactions WHERE 1=1"
    params: list = []

    if owner is not None:
        query += " AND owner = ?"
        params.append(owner)
    if bank is not None:
        query += " AND bank = ?"
        params.append(bank)
    query += " ORDER BY date DESC, id DESC"

    with get_connection(db_path) as conn:
        rows = conn.execute(query, params).fetchall()
    return [dict(r) for r in rows]


# ---------------------------------------------------------------------------
# Sync log
# ---------------------------------------------------------------------------

def get_last_sync(mailbox: str, db_path: str = DEFAULT_DB_PATH) -> Optional[str]:
    """Return the ISO timestamp of the mailbox's last completed sync, or None."""
    with get_connection(db_path) as conn:
        row = conn.execute(
            "SELECT last_sync_at FROM sync_log WHERE mailbox = ?", (mailbox,)
        ).fetchone()
    return row["last_sync_at"] if row else None


def record_sync(mailbox: str, synced_at: str, db_path: str = DEFAULT_DB_PATH) -> None:
    with get_connection(db_path) as conn:
        conn.execute(
            """
            INSERT INTO sync_log (mailbox, last_sync_at) VALUES (?, ?)
            ON CONFLICT(mailbox) DO UPDATE SET last_sync_at = excluded.last_sync_at
            """,
            (mailbox, synced_at),
        )
