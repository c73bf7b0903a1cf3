"""
Database module for TaskFlow

Handles SQLite connection and schema management.
"""

import contextlib
import logging
import os
from pathlib import Path
import sqlite3
from typing import Optional

logger = logging.getLogger(__name__)


def like_pattern(text: str) -> str:
    """Wrap text for a substring LIKE match; use with ESCAPE '\\'."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DatabaseManager:
    """Manages SQLite database connection and schema."""

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize database manager.

        Args:
            db_path: Optional custom database path. Defaults to ~/.taskflow/tasks.db
        """
        if db_path:
            self.db_path = Path(db_path)
        else:
            # Check for environment variable first
            env_db_path = os.environ.get("TASKFLOW_DB_PATH")
            if env_db_path:
                self.db_path = Path(env_db_path)
            else:
                self.db_path = Path.home() / ".taskflow" / "tasks.db"

        # Ensure directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_database()
        logger.debug("DatabaseManager using path: %s", self.db_path)

    def _init_database(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS projects (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    description TEXT DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'active',
                    aliases TEXT NOT NULL DEFAULT '[]',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """
            )

            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'pending',
                    priority TEXT NOT NULL DEFAULT 'medium',
                    tags TEXT NOT NULL DEFAULT '[]',
                    project_id INTEGER NULL REFERENCES projects(id),
                    due_date TIMESTAMP NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """
            )

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_project_id ON tasks(project_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")

            conn.commit()

    def get_connection(self):
        """Get a database connection that is closed when the block exits."""

        @contextlib.contextmanager
        def connection_context():
            conn = sqlite3.connect(self.db_path)
            try:
                yield conn
            finally:
                conn.close()

        return connection_context()
