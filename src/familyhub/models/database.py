"""
Database initialization and management for familyhub.

DuckDB stands in for the relational side of the hosted backend: every
entity table lives in one database file that the data service reads and
writes through :class:`DatabaseManager`.
"""

import threading
from pathlib import Path
from typing import Any

import duckdb

from ..logging_config import get_logger
from .schema import REQUIRED_COLUMNS, get_schema_statements

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages a DuckDB connection and the family schema.
    """

    def __init__(self, db_path: str):
        """
        Args:
            db_path: DuckDB file, or ":memory:"
        """
        self.db_path = db_path
        self._connection: duckdb.DuckDBPyConnection | None = None
        # Streamlit serves sessions from worker threads; DuckDB connections are not thread-safe.
        self._lock = threading.RLock()

    def connect(self) -> duckdb.DuckDBPyConnection:
        """Open the connection on first use and reuse it afterwards."""
        if self._connection is None:
            self._connection = duckdb.connect(self.db_path)
            logger.info("database_connected", db_path=self.db_path)

        return self._connection

    def close(self) -> None:
        """Release the connection; the next call to connect() reopens it."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.info("database_closed", db_path=self.db_path)

    def initialize_schema(self) -> None:
        """
        Create all tables and indexes if they don't exist.

        Raises:
            duckdb.Error: If a DDL statement fails
        """
        with self._lock:
            conn = self.connect()
            try:
                for statement in get_schema_statements():
                    conn.execute(statement)
                logger.info("database_schema_initialized", db_path=self.db_path)
            except duckdb.Error as e:
                logger.error("database_schema_initialization_failed", db_path=self.db_path, error=str(e))
                raise

    def verify_schema(self) -> bool:
        """
        Verify that every table exists with its required columns.

        Returns:
            bool: False if a table or column is missing, or the check itself failed
        """
        with self._lock:
            conn = self.connect()
            try:
                for table, required in REQUIRED_COLUMNS.items():
                    rows = conn.execute(
                        "SELECT column_name FROM information_schema.columns WHERE table_name = ?", [table]
                    ).fetchall()
                    missing = required - {row[0] for row in rows}
                    if missing:
                        logger.warning("schema_columns_missing", table=table, missing=sorted(missing))
                        return False
                return True
            except duckdb.Error as e:
                logger.error("schema_verification_failed", error=str(e))
                return False

    def fetch_all(self, query: str, parameters: list[Any] | None = None) -> list[dict[str, Any]]:
        """
        Run a query and return rows as column-name dictionaries.

        Raises:
            duckdb.Error: If query execution fails
        """
        with self._lock:
            cursor = self.connect().execute(query, parameters or [])
            columns = [description[0] for description in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def fetch_one(self, query: str, parameters: list[Any] | None = None) -> dict[str, Any] | None:
        """Run a query and return the first row, or None."""
        rows = self.fetch_all(query, parameters)
        return rows[0] if rows else None

    def execute(self, query: str, parameters: list[Any] | None = None) -> None:
        """
        Execute a statement that returns no rows.

        Raises:
            duckdb.Error: If execution fails
        """
        with self._lock:
            self.connect().execute(query, parameters or [])

    def snapshot_bytes(self) -> bytes:
        """
        Contents of the database file with the write-ahead log flushed into it.

        The lock is held from the checkpoint until the file is read, so no
        write from another session lands in between.

        Raises:
            ValueError: For an in-memory database
        """
        if self.db_path == ":memory:":
            raise ValueError("An in-memory database has no file to snapshot")
        with self._lock:
            self.connect().execute("CHECKPOINT")
            return Path(self.db_path).read_bytes()

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def create_database(db_path: str) -> DatabaseManager:
    """
    Create the database file and its schema. Parent directories are created as needed.

    Raises:
        RuntimeError: If the schema cannot be created or does not verify
    """
    try:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        db_manager = DatabaseManager(db_path)
        db_manager.initialize_schema()

        if not db_manager.verify_schema():
            raise RuntimeError("Schema verification failed after creation")

        return db_manager

    except Exception as e:
        logger.error("database_creation_failed", db_path=db_path, error=str(e))
        raise RuntimeError(f"Database creation failed: {e}") from e


def get_database_manager(db_path: str, create_if_missing: bool = True) -> DatabaseManager:
    """
    Get a DatabaseManager, optionally creating the database if it doesn't exist.

    Raises:
        FileNotFoundError: If the file is missing and create_if_missing is False
        RuntimeError: If a new database cannot be created
    """
    if db_path == ":memory:" or not Path(db_path).exists():
        if create_if_missing:
            return create_database(db_path)
        raise FileNotFoundError(f"Database file not found: {db_path}")

    db_manager = DatabaseManager(db_path)
    if not db_manager.verify_schema():
        logger.warning("schema_reinitializing", db_path=db_path)
        db_manager.initialize_schema()

    return db_manager
