# ===== IMPORTS & DEPENDENCIES =====
import os
import sqlite3
import logging
from datetime import datetime
from typing import Optional

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# ===== CORE BUSINESS LOGIC =====
class Database:
    """
    Local persistent state: a small key/value table holding JSON documents
    under fixed string keys (the delivery queue and the last computed report).
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._create_tables()
        logger.info(f"[{self.__class__.__name__}] Database initialized at: {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Returns a new database connection."""
        return sqlite3.connect(self.db_path)

    def _create_tables(self):
        """Creates required tables if they don't exist."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
            logger.debug(f"[{self.__class__.__name__}] Database tables verified/created.")

    def get_item(self, key: str) -> Optional[str]:
        """Returns the raw stored document for `key`, or None."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Inserts or replaces the document stored under `key`."""
        with self._get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, datetime.now().isoformat())
            )
            conn.commit()
        logger.debug(f"💾 [{self.__class__.__name__}] Stored {len(value)} bytes under '{key}'.")

    def remove_item(self, key: str) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
            if cursor.rowcount > 0:
                logger.info(f"[{self.__class__.__name__}] Removed '{key}'.")

