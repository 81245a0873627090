"""Per-table DDL action queue and the command builders on top of it."""

from dataclasses import dataclass
from typing import Any

from fluent_mapper.constants import CONNECTION_DIALECTS, DEFAULT_CONNECTION_NAME
from fluent_mapper.database.connections import Connections
from fluent_mapper.database.executor import Executor
from fluent_mapper.exceptions import MigrationError
from fluent_mapper.log import get_logger
from fluent_mapper.types import Dialect, MigratorActionType

from .column import ColumnBuilder
from .dialects import DDLCompiler, get_compiler

logger = get_logger(__name__)


@dataclass
class MigratorAction:
    """One queued DDL operation.

    ``payload`` is a ColumnBuilder for add/modify actions and a table or
    column name for the others.
    """

    type: MigratorActionType
    payload: ColumnBuilder | str


def resolve_target(connections: Connections, name: str) -> tuple[str, Dialect]:
    """Resolve a connection name and the SQL dialect it speaks.

    Connection types without a SQL dialect fall back to sqlite.

    Raises:
        MigrationError: If the connection is not registered
    """
    resolved = connections.resolve_name(name)
    config = connections.get(resolved)
    if config is None:
        raise MigrationError(f"Connection '{resolved}' not found.")
    return resolved, CONNECTION_DIALECTS.get(config.type.value, Dialect.SQLITE)


class Migrator:
    """Ordered queue of DDL actions for one table.

    In create mode ``exec()`` emits a single CREATE TABLE statement for every
    added column; a failure there is logged and re-raised. Otherwise each
    queued action becomes one statement, run in order; a failing action is
    logged and the remaining ones still run. The queue is emptied after
    every ``exec()``, whatever the outcome.
    """

    def __init__(
        self,
        table: str,
        connections: Connections,
        connection: str = DEFAULT_CONNECTION_NAME,
        create: bool = False,
    ) -> None:
        if not table:
            raise MigrationError("Table name is required for a migration.")
        self.table = table
        self._connections = connections
        self._connection = connection
        self._create_mode = create
        self._columns: list[ColumnBuilder] = []
        self._actions: list[MigratorAction] = []

    @property
    def actions(self) -> list[MigratorAction]:
        return list(self._actions)

    def use_connection(self, name: str) -> "Migrator":
        self._connection = name
        return self

    def add_column(self, name: str) -> ColumnBuilder:
        column = ColumnBuilder(name, self)
        self._columns.append(column)
        self._actions.append(MigratorAction(MigratorActionType.ADD_COLUMN, column))
        return column

    def modify_column(self, name: str) -> ColumnBuilder:
        column = ColumnBuilder(name, self)
        self._actions.append(MigratorAction(MigratorActionType.MODIFY_COLUMN, column))
        return column

    def select_column(self, name: str) -> ColumnBuilder:
        """Alias of modify_column()."""
        return self.modify_column(name)

    def drop_column(self, name: str) -> "Migrator":
        self._actions.append(MigratorAction(MigratorActionType.DROP_COLUMN, name))
        return self

    def drop_table(self, name: str | None = None) -> "Migrator":
        self._actions.append(
            MigratorAction(MigratorActionType.DROP_TABLE, name or self.table)
        )
        return self

    def drop_unique(self, column: str) -> "Migrator":
        self._actions.append(MigratorAction(MigratorActionType.DROP_UNIQUE, column))
        return self

    def drop_primary_key(self, column: str) -> "Migrator":
        self._actions.append(
            MigratorAction(MigratorActionType.DROP_PRIMARY_KEY, column)
        )
        return self

    def _action_sql(self, compiler: DDLCompiler, action: MigratorAction) -> str:
        payload = action.payload
        if action.type == MigratorActionType.ADD_COLUMN:
            return compiler.add_column_sql(self.table, payload.get_definition())
        if action.type == MigratorActionType.MODIFY_COLUMN:
            return compiler.modify_column_sql(self.table, payload.get_definition())
        if action.type == MigratorActionType.DROP_COLUMN:
            return compiler.drop_column_sql(self.table, payload)
        if action.type == MigratorActionType.DROP_TABLE:
            return compiler.drop_table_sql(payload)
        if action.type == MigratorActionType.DROP_UNIQUE:
            return compiler.drop_unique_sql(self.table, payload)
        return compiler.drop_primary_key_sql(self.table, payload)

    def to_sql(self, dialect: Dialect | str) -> list[str]:
        """Compile the queue without executing or clearing it.

        Args:
            dialect: Target SQL dialect

        Returns:
            Statements in execution order
        """
        compiler = get_compiler(dialect)
        if self._create_mode:
            if not self._columns:
                return []
            definitions = [col.get_definition() for col in self._columns]
            return [compiler.create_table_sql(self.table, definitions)]
        return [self._action_sql(compiler, action) for action in self._actions]

    async def exec(self) -> None:
        """Execute the queued actions against the target connection.

        Raises:
            MigrationError: If the connection is not registered
        """
        name, dialect = resolve_target(self._connections, self._connection)
        statements = self.to_sql(dialect)
        try:
            if self._create_mode:
                await self._run_create(statements, name)
            else:
                await self._run_actions(statements, name)
        finally:
            self._actions = []
            self._columns = []

    async def _run_create(self, statements: list[str], name: str) -> None:
        if not statements:
            logger.warning(f"No columns to create for table '{self.table}'")
            return
        try:
            result = await Executor(self._connections, statements[0], name).execute()
            logger.info(f"Created table '{self.table}' on '{name}': {result}")
        except Exception as e:
            logger.error(f"Create table '{self.table}' failed: {e}")
            raise

    async def _run_actions(self, statements: list[str], name: str) -> None:
        for sql in statements:
            try:
                result = await Executor(self._connections, sql, name).execute()
                logger.info(f"Migration action result: {result}")
            except Exception as e:
                logger.error(f"Migration action failed ({sql}): {e}")

    async def execute(self) -> None:
        """Alias of exec()."""
        await self.exec()


class _TableCommand:
    """Shared connection handling of the command builders."""

    def __init__(
        self,
        table: str,
        connections: Connections,
        connection: str = DEFAULT_CONNECTION_NAME,
    ) -> None:
        self.table = table
        self._connections = connections
        self._connection = connection

    def use_connection(self, name: str) -> Any:
        self._connection = name
        return self


class CreateTableBuilder(_TableCommand):
    """Collects columns and emits one CREATE TABLE statement."""

    def __init__(
        self,
        table: str,
        connections: Connections,
        connection: str = DEFAULT_CONNECTION_NAME,
    ) -> None:
        super().__init__(table, connections, connection)
        self._migrator = Migrator(table, connections, connection, create=True)

    def use_connection(self, name: str) -> "CreateTableBuilder":
        self._migrator.use_connection(name)
        return super().use_connection(name)

    def add_column(self, name: str) -> ColumnBuilder:
        return self._migrator.add_column(name)

    def to_sql(self, dialect: Dialect | str) -> list[str]:
        return self._migrator.to_sql(dialect)

    async def exec(self) -> None:
        await self._migrator.exec()


class UpdateTableBuilder(_TableCommand):
    """Queues ALTER TABLE actions."""

    def __init__(
        self,
        table: str,
        connections: Connections,
        connection: str = DEFAULT_CONNECTION_NAME,
    ) -> None:
        super().__init__(table, connections, connection)
        self._migrator = Migrator(table, connections, connection)

    def use_connection(self, name: str) -> "UpdateTableBuilder":
        self._migrator.use_connection(name)
        return super().use_connection(name)

    def add_column(self, name: str) -> ColumnBuilder:
        return self._migrator.add_column(name)

    def modify_column(self, name: str) -> ColumnBuilder:
        return self._migrator.modify_column(name)

    def drop_column(self, name: str) -> "UpdateTableBuilder":
        self._migrator.drop_column(name)
        return self

    def drop_unique(self, column: str) -> "UpdateTableBuilder":
        self._migrator.drop_unique(column)
        return self

    def drop_primary_key(self, column: str) -> "UpdateTableBuilder":
        self._migrator.drop_primary_key(column)
        return self

    def to_sql(self, dialect: Dialect | str) -> list[str]:
        return self._migrator.to_sql(dialect)

    async def exec(self) -> None:
        await self._migrator.exec()


class DropTableBuilder(_TableCommand):
    """Drops the table if it exists."""

    async def exec(self) -> None:
        migrator = Migrator(self.table, self._connections, self._connection)
        await migrator.drop_table().exec()


class TruncateTableBuilder(_TableCommand):
    """Deletes every row of the table."""

    async def exec(self) -> Any:
        name, dialect = resolve_target(self._connections, self._connection)
        sql = get_compiler(dialect).truncate_table_sql(self.table)
        result = await Executor(self._connections, sql, name).execute()
        logger.info(f"Truncated table '{self.table}' on '{name}'")
        return result
