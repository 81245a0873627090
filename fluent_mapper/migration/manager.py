"""Versioned migration tracking."""

from collections.abc import Awaitable, Callable
from typing import Any

from fluent_mapper.database.interfaces import DatabaseAdapter
from fluent_mapper.exceptions import UnsupportedOperationError
from fluent_mapper.log import get_logger
from fluent_mapper.types import ColumnType, Dialect

from .column import ColumnDefinition
from .dialects import get_compiler

logger = get_logger(__name__)

MigrationFunc = Callable[[DatabaseAdapter], Awaitable[Any]]


class MigrationManager:
    """Manage database migrations through an adapter's raw statements."""

    def __init__(
        self,
        adapter: DatabaseAdapter,
        dialect: Dialect | str = Dialect.SQLITE,
        migrations_table: str = "schema_migrations",
        native_types: bool = False,
    ) -> None:
        if not adapter.supports_raw:
            raise UnsupportedOperationError(adapter.name, "raw")
        self.adapter = adapter
        self.compiler = get_compiler(dialect, native_types=native_types)
        self.migrations_table = migrations_table

    def _columns(self) -> list[ColumnDefinition]:
        return [
            ColumnDefinition(
                name="id", type=ColumnType.INT, is_primary=True, auto_increment=True
            ),
            ColumnDefinition(
                name="version", type=ColumnType.STRING, not_null=True, is_unique=True
            ),
            ColumnDefinition(
                name="applied_at", type=ColumnType.DATE, default_value="NOW()"
            ),
        ]

    async def ensure_migrations_table(self) -> None:
        """Create migrations table if it doesn't exist."""
        create_sql = self.compiler.create_table_sql(
            self.migrations_table, self._columns()
        )
        await self.adapter.raw(create_sql)

    async def get_applied_migrations(self) -> list[str]:
        """Get list of applied migration versions."""
        table = self.compiler.quote(self.migrations_table)
        rows = await self.adapter.raw(f"SELECT version FROM {table} ORDER BY id")
        return [row["version"] for row in rows]

    async def apply_migration(
        self, version: str, migration_func: MigrationFunc
    ) -> None:
        """Apply a single migration.

        Args:
            version: Migration version identifier
            migration_func: Async function that performs the migration
        """
        await migration_func(self.adapter)

        table = self.compiler.quote(self.migrations_table)
        await self.adapter.raw(
            f"INSERT INTO {table} (version) VALUES (:version)", {"version": version}
        )
        logger.info(f"Applied migration {version}")

    async def run_migrations(self, migrations: dict[str, MigrationFunc]) -> list[str]:
        """Run all pending migrations in version order.

        Args:
            migrations: Dictionary mapping version to migration function

        Returns:
            Versions applied by this call
        """
        await self.ensure_migrations_table()
        applied = set(await self.get_applied_migrations())

        newly_applied = []
        for version, migration_func in sorted(migrations.items()):
            if version not in applied:
                await self.apply_migration(version, migration_func)
                newly_applied.append(version)
        return newly_applied

    async def get_migration_status(
        self, migrations: dict[str, MigrationFunc]
    ) -> dict[str, bool]:
        """Get status of all known migrations.

        Args:
            migrations: Dictionary of known migrations

        Returns:
            Dictionary mapping version to applied status
        """
        await self.ensure_migrations_table()
        applied = set(await self.get_applied_migrations())
        return {version: version in applied for version in migrations}
