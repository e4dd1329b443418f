"""SQLite-backed history store for signed-in users."""

import sqlite3

from utils.logger import get_logger

logger = get_logger(__name__)


def _get_conn(db_path: str) -> sqlite3.Connection:
    """Return a SQLite connection with row_factory."""
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str) -> None:
    """Create the search_history table if it doesn't exist."""
    with _get_conn(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS search_history (
                identity    TEXT NOT NULL,
                position    INTEGER NOT NULL,
                query       TEXT NOT NULL,
                PRIMARY KEY (identity, position)
            )
        """)
        conn.commit()
    logger.info("Database initialised at %s", db_path)


class SqliteHistoryStore:
    """
    HistoryStore persisting one identity's ledger.

    ``save`` replaces the whole ordered list in one transaction, so the stored
    order always matches the ledger (position 0 is the most recent query).
    """

    def __init__(self, identity: str, db_path: str):
        self.identity = identity
        self.db_path = db_path
        init_db(db_path)

    def load(self) -> list[str]:
        with _get_conn(self.db_path) as conn:
            rows = conn.execute(
                "SELECT query FROM search_history WHERE identity = ? ORDER BY position ASC",
                (self.identity,),
            ).fetchall()
        return [row["query"] for row in rows]

    def save(self, entries: list[str]) -> None:
        with _get_conn(self.db_path) as conn:
            conn.execute("DELETE FROM search_history WHERE identity = ?", (self.identity,))
            conn.executemany(
                "INSERT INTO search_history (identity, position, query) VALUES (?, ?, ?)",
                [(self.identity, position, query) for position, query in enumerate(entries)],
            )
            conn.commit()
