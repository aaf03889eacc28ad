"""Local key-value storage for session identifiers.

Each chat user is treated as one device: values are namespaced by an owner
key (the Discord user id).
"""

import logging
import sqlite3

logger = logging.getLogger("koperasi.storage")


class SessionStorage:
    """Small key-value store kept in a local SQLite file."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize the storage with a database connection.

        Args:
            conn: SQLite database connection
        """
        self._conn = conn
        self._conn.row_factory = sqlite3.Row

    @classmethod
    def open(cls, path: str) -> "SessionStorage":
        """Open (and create if needed) the storage file at ``path``.

        The connection is shared with worker threads running backend calls.
        """
        storage = cls(sqlite3.connect(path, check_same_thread=False))
        storage.create_table()
        return storage

    def create_table(self) -> None:
        """Create the Storage table if it doesn't exist."""
        cursor = self._conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS Storage (
                Owner TEXT NOT NULL,
                Key TEXT NOT NULL,
                Value TEXT,
                PRIMARY KEY (Owner, Key)
            )
        """
        )
        self._conn.commit()

    def set_item(self, owner: str, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            sqlite3.Error: If the write fails
        """
        try:
            cursor = self._conn.cursor()
            cursor.execute(
                "INSERT OR REPLACE INTO Storage (Owner, Key, Value) VALUES (?, ?, ?)",
                (owner, key, value),
            )
            self._conn.commit()
        except sqlite3.Error:
            logger.exception("Error storing %s", key)
            raise

    def get_item(self, owner: str, key: str) -> str | None:
        """Retrieve a stored value; read errors are logged and yield None."""
        try:
            cursor = self._conn.cursor()
            cursor.execute("SELECT Value FROM Storage WHERE Owner = ? AND Key = ?", (owner, key))
            row = cursor.fetchone()
        except sqlite3.Error:
            logger.exception("Error retrieving %s", key)
            return None
        return row["Value"] if row else None

    def remove_item(self, owner: str, key: str) -> None:
        """
        Delete a stored value.

        Raises:
            sqlite3.Error: If the delete fails
        """
        try:
            cursor = self._conn.cursor()
            cursor.execute("DELETE FROM Storage WHERE Owner = ? AND Key = ?", (owner, key))
            self._conn.commit()
        except sqlite3.Error:
            logger.exception("Error removing %s", key)
            raise

    def owners_with(self, key: str) -> list[str]:
        """Return every owner that has a value stored under ``key``."""
        cursor = self._conn.cursor()
        cursor.execute("SELECT Owner FROM Storage WHERE Key = ? ORDER BY Owner", (key,))
        return [row["Owner"] for row in cursor.fetchall()]
