"""SQLAlchemy-backed adapter for MySQL and PostgreSQL (and any SQLAlchemy URL)."""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from fluent_mapper.database.implementations.sql import SQLQueryBuilder
from fluent_mapper.database.interfaces import DatabaseAdapter, QueryOptions
from fluent_mapper.log import get_logger, log_statement
from fluent_mapper.types import DatabaseParamType, Dialect, DocumentData

logger = get_logger(__name__)

ENGINE_DIALECTS = {
    "mysql": Dialect.MYSQL,
    "mariadb": Dialect.MYSQL,
    "postgresql": Dialect.POSTGRES,
    "sqlite": Dialect.SQLITE,
}


def create_sql_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for a database URL.

    Args:
        database_url: SQLAlchemy database URL
        echo: Enable SQL echo for debugging

    Returns:
        Configured engine
    """
    logger.info(f"Creating database engine for: {database_url}")
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 60.0},
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=10,
    )


class SQLAlchemyAdapter(DatabaseAdapter):
    """Adapter running parameterized SQL through a SQLAlchemy engine."""

    supports_raw = True
    supports_transactions = True

    def __init__(self, engine: Engine | str, echo: bool = False) -> None:
        """Initialize the adapter.

        Args:
            engine: Engine, or a database URL to build one from
            echo: Enable SQL echo when building from a URL
        """
        self.engine = (
            create_sql_engine(engine, echo=echo) if isinstance(engine, str) else engine
        )
        self.dialect = ENGINE_DIALECTS.get(self.engine.dialect.name, Dialect.POSTGRES)
        self.builder = SQLQueryBuilder(self.dialect)

    def _run(
        self,
        statement: str,
        params: DatabaseParamType = None,
        connection: Connection | None = None,
    ) -> tuple[list[dict[str, Any]] | None, dict[str, Any]]:
        log_statement(statement, params, source=self.dialect.value)
        try:
            if connection is not None:
                return self._run_on(connection, statement, params)
            with self.engine.begin() as conn:
                return self._run_on(conn, statement, params)
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {e}")
            raise

    @staticmethod
    def _run_on(
        conn: Connection, statement: str, params: DatabaseParamType
    ) -> tuple[list[dict[str, Any]] | None, dict[str, Any]]:
        """Run one statement; the status dict is read before the cursor closes."""
        if isinstance(params, (list, tuple)):
            result = conn.exec_driver_sql(statement, tuple(params))
        else:
            result = conn.execute(text(statement), params or {})
        if result.returns_rows:
            return [dict(row) for row in result.mappings()], {}
        return None, {"changes": result.rowcount, "last_id": result.lastrowid}

    async def get(self, options: QueryOptions) -> list[DocumentData]:
        query, params = self.builder.select(options)
        rows, _ = self._run(query, params)
        return rows or []

    async def add_document(self, collection_name: str, data: DocumentData) -> str:
        """Insert a row and return its id.

        PostgreSQL reads the id back with ``RETURNING``; the other dialects
        use the driver's last row id.
        """
        query, params = self.builder.insert(collection_name, data)
        if data.get("id") is not None:
            self._run(query, params)
            return str(data["id"])
        if self.dialect == Dialect.POSTGRES:
            rows, _ = self._run(f"{query} RETURNING {self.builder.quote('id')}", params)
            return str(rows[0]["id"]) if rows else ""
        _, status = self._run(query, params)
        return str(status["last_id"])

    async def update_document(
        self, collection_name: str, doc_id: str, data: DocumentData
    ) -> None:
        query, params = self.builder.update_by_id(collection_name, doc_id, data)
        self._run(query, params)

    async def delete_document(self, collection_name: str, doc_id: str) -> None:
        query, params = self.builder.delete_by_id(collection_name, doc_id)
        self._run(query, params)

    async def raw(
        self,
        statement: str,
        params: DatabaseParamType = None,
        transaction: Connection | None = None,
    ) -> Any:
        """Execute a raw SQL statement.

        Named parameters use ``:name`` placeholders; positional parameters are
        passed to the driver unchanged and use its own paramstyle.

        Returns:
            Rows as dictionaries for statements returning rows, otherwise a
            dict with ``changes`` and ``last_id``
        """
        rows, status = self._run(statement, params, transaction)
        if rows is not None:
            return rows
        if self.dialect == Dialect.POSTGRES:
            status["last_id"] = None
        return status

    async def begin_transaction(self) -> Connection:
        connection = self.engine.connect()
        connection.begin()
        return connection

    async def commit_transaction(self, handle: Connection) -> None:
        try:
            handle.commit()
        finally:
            handle.close()

    async def rollback_transaction(self, handle: Connection) -> None:
        try:
            handle.rollback()
        finally:
            handle.close()

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()
        logger.info(f"Disposed {self.dialect.value} engine")
