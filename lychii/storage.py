"""
Optional key-value store for plugins.

Uses SQLite for persistence. The bot only opens the database; reading
and writing is left to the plugins that need it.
"""

import sqlite3
import json
import logging
from pathlib import Path
from typing import Any
from datetime import datetime, timezone
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class Storage:
    """Per-plugin JSON values keyed by (plugin, key)."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @contextmanager
    def get_connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init(self) -> None:
        """Create the database file and tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS plugin_data (
                    plugin TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (plugin, key)
                )
            """)

        logger.info(f"Database initialized at {self.db_path}")

    def get(self, plugin: str, key: str, default: Any = None) -> Any:
        """Get a stored value, or default if unset."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT value FROM plugin_data WHERE plugin = ? AND key = ?",
                (plugin, key)
            )
            row = cursor.fetchone()

        if row is None or row["value"] is None:
            return default
        return json.loads(row["value"])

    def set(self, plugin: str, key: str, value: Any) -> None:
        """Store a JSON-serializable value."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO plugin_data (plugin, key, value, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(plugin, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, (plugin, key, json.dumps(value), datetime.now(timezone.utc).isoformat()))

    def delete(self, plugin: str, key: str) -> None:
        """Remove a stored value."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM plugin_data WHERE plugin = ? AND key = ?",
                (plugin, key)
            )

    def keys(self, plugin: str) -> list[str]:
        """List the keys stored for a plugin."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT key FROM plugin_data WHERE plugin = ? ORDER BY key",
                (plugin,)
            )
            return [row["key"] for row in cursor.fetchall()]


def open_storage(db_path: Path) -> Storage:
    """Open and initialize the store at db_path."""
    storage = Storage(db_path)
    storage.init()
    return storage
