"""Database manager for SQLite connections and path management."""

import sqlite3
from contextlib import contextmanager
from config import Config, get_migrations_dir


class DatabaseManager:
    """Manages database connections and paths.

    Every call to ``connect`` opens its own connection, so the manager can be
    shared by worker threads running store operations concurrently.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config, timeout: float = 10.0):
        """Initialize the database manager.

        Args:
            config: Config object containing database configuration.
            timeout: Seconds to wait on a locked database before failing.
        """
        self.config = config
        self.timeout = timeout

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path, timeout=self.timeout)
        try:
            yield conn
        finally:
            conn.close()

    def get_db_path(self):
        """Get the current database path."""
        return self.config.db_path

    def get_migrations_dir(self):
        """Get the migrations directory path."""
        return get_migrations_dir()
