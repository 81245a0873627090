"""SQLite adapter implementation."""

import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Any

from fluent_mapper.database.implementations.sql import SQLQueryBuilder
from fluent_mapper.database.interfaces import DatabaseAdapter, QueryOptions
from fluent_mapper.log import get_logger, log_statement
from fluent_mapper.types import DatabaseParamType, Dialect, DocumentData

logger = get_logger(__name__)

MEMORY_PATH = ":memory:"


def _to_sqlite(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _prepare_params(params: DatabaseParamType) -> DatabaseParamType:
    if params is None:
        return None
    if isinstance(params, dict):
        return {key: _to_sqlite(value) for key, value in params.items()}
    return tuple(_to_sqlite(value) for value in params)


class SQLiteAdapter(DatabaseAdapter):
    """SQLite adapter backed by the standard library driver.

    The connection is opened lazily on first use and runs in autocommit
    mode; ``begin_transaction`` issues an explicit ``BEGIN``.
    """

    supports_raw = True
    supports_transactions = True

    def __init__(self, db_path: Path | str, timeout: float = 60.0) -> None:
        """Initialize SQLite adapter.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            timeout: Seconds to wait on a locked database
        """
        self.db_path = db_path if db_path == MEMORY_PATH else Path(db_path)
        self.timeout = timeout
        self.builder = SQLQueryBuilder(Dialect.SQLITE)
        self._connection: sqlite3.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._connection is not None

    def _connect(self) -> sqlite3.Connection:
        if self._connection is not None:
            return self._connection
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=self.timeout,
                isolation_level=None,
            )
            self._connection.row_factory = sqlite3.Row
            self._configure_connection()
            logger.info(f"Connected to SQLite: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to SQLite database: {e}")
            raise
        return self._connection

    def _configure_connection(self) -> None:
        """Configure SQLite connection settings."""
        if not self._connection:
            return

        self._connection.execute("PRAGMA foreign_keys = ON")
        self._connection.execute(f"PRAGMA busy_timeout = {int(self.timeout * 1000)}")

    def _execute(self, query: str, params: DatabaseParamType = None) -> sqlite3.Cursor:
        connection = self._connect()
        log_statement(query, params, source="sqlite")
        try:
            cursor = connection.cursor()
            prepared = _prepare_params(params)
            if prepared:
                cursor.execute(query, prepared)
            else:
                cursor.execute(query)
            return cursor
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {e}")
            raise

    async def get(self, options: QueryOptions) -> list[DocumentData]:
        """Fetch rows matching the options.

        Args:
            options: Normalized query options

        Returns:
            List of rows as dictionaries
        """
        query, params = self.builder.select(options)
        cursor = self._execute(query, params)
        return [dict(row) for row in cursor.fetchall()]

    async def add_document(self, collection_name: str, data: DocumentData) -> str:
        """Insert a row and return its id.

        An explicit ``id`` in the data is returned as-is; otherwise the new
        rowid is used.
        """
        query, params = self.builder.insert(collection_name, data)
        cursor = self._execute(query, params)
        if data.get("id") is not None:
            return str(data["id"])
        return str(cursor.lastrowid)

    async def update_document(
        self, collection_name: str, doc_id: str, data: DocumentData
    ) -> None:
        query, params = self.builder.update_by_id(collection_name, doc_id, data)
        self._execute(query, params)

    async def delete_document(self, collection_name: str, doc_id: str) -> None:
        query, params = self.builder.delete_by_id(collection_name, doc_id)
        self._execute(query, params)

    async def raw(
        self,
        statement: str,
        params: DatabaseParamType = None,
        transaction: Any = None,
    ) -> Any:
        """Execute a raw SQL statement.

        Args:
            statement: SQL with ``?`` or ``:name`` placeholders
            params: Positional or named parameters
            transaction: Unused; the single connection carries the transaction

        Returns:
            Rows as dictionaries for statements returning rows, otherwise a
            dict with ``changes`` and ``last_id``
        """
        cursor = self._execute(statement, params)
        if cursor.description is not None:
            return [dict(row) for row in cursor.fetchall()]
        return {"changes": cursor.rowcount, "last_id": cursor.lastrowid}

    async def begin_transaction(self) -> sqlite3.Connection:
        connection = self._connect()
        connection.execute("BEGIN")
        return connection

    async def commit_transaction(self, handle: sqlite3.Connection) -> None:
        handle.execute("COMMIT")

    async def rollback_transaction(self, handle: sqlite3.Connection) -> None:
        handle.execute("ROLLBACK")

    async def close(self) -> None:
        """Close SQLite database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("Disconnected from SQLite")
