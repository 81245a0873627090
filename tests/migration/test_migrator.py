"""Tests for the migration action queue and table commands."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from fluent_mapper.database import Connections
from fluent_mapper.database.implementations import SQLiteAdapter
from fluent_mapper.exceptions import MigrationError
from fluent_mapper.migration import (
    CreateTableBuilder,
    DropTableBuilder,
    Migrator,
    TruncateTableBuilder,
    UpdateTableBuilder,
)
from fluent_mapper.migration.migrator import resolve_target
from fluent_mapper.types import ConnectionType, Dialect, MigratorActionType


@pytest.fixture
def mysql_connections(mock_adapter: AsyncMock) -> Connections:
    """Provide a MySQL connection backed by a mocked adapter."""
    registry = Connections()
    registry.create("main", ConnectionType.MYSQL).key({})
    registry.attach_adapter("main", mock_adapter)
    return registry


def executed(mock_adapter: AsyncMock) -> list[str]:
    return [call.args[0] for call in mock_adapter.raw.await_args_list]


def test_requires_table(mysql_connections: Connections) -> None:
    """Test that a migration needs a table name."""
    with pytest.raises(MigrationError):
        Migrator("", mysql_connections)


def test_resolve_target(mysql_connections: Connections) -> None:
    """Test dialect resolution from connection types."""
    assert resolve_target(mysql_connections, "default") == ("main", Dialect.MYSQL)

    mysql_connections.create("docs", ConnectionType.MONGODB).key({})
    assert resolve_target(mysql_connections, "docs") == ("docs", Dialect.SQLITE)

    with pytest.raises(MigrationError, match="not found"):
        resolve_target(mysql_connections, "ghost")


def test_actions_keep_order(mysql_connections: Connections) -> None:
    """Test that actions queue in call order."""
    migrator = Migrator("t", mysql_connections)
    migrator.add_column("a").type("int")
    migrator.drop_column("b")
    migrator.select_column("c").type("text")
    migrator.drop_unique("d")
    migrator.drop_primary_key("id")
    migrator.drop_table()

    assert [action.type for action in migrator.actions] == [
        MigratorActionType.ADD_COLUMN,
        MigratorActionType.DROP_COLUMN,
        MigratorActionType.MODIFY_COLUMN,
        MigratorActionType.DROP_UNIQUE,
        MigratorActionType.DROP_PRIMARY_KEY,
        MigratorActionType.DROP_TABLE,
    ]
    assert migrator.to_sql("mysql") == [
        "ALTER TABLE `t` ADD COLUMN `a` INTEGER",
        "ALTER TABLE `t` DROP COLUMN `b`",
        "ALTER TABLE `t` MODIFY COLUMN `c` TEXT",
        "ALTER TABLE `t` DROP INDEX `d`",
        "ALTER TABLE `t` DROP PRIMARY KEY",
        "DROP TABLE IF EXISTS `t`",
    ]


def test_column_drop_helpers_enqueue(mysql_connections: Connections) -> None:
    """Test that builder drop helpers enqueue on their migrator."""
    migrator = Migrator("t", mysql_connections)
    migrator.modify_column("email").drop_unique()

    assert [a.type for a in migrator.actions] == [
        MigratorActionType.MODIFY_COLUMN,
        MigratorActionType.DROP_UNIQUE,
    ]
    assert migrator.actions[1].payload == "email"


@pytest.mark.asyncio
async def test_create_mode_single_statement(
    mysql_connections: Connections, mock_adapter: AsyncMock
) -> None:
    """Test that create mode emits one CREATE TABLE."""
    migrator = Migrator("t", mysql_connections, create=True)
    migrator.add_column("id").type("int").is_primary().auto_increment()
    migrator.add_column("name").type("string").not_null()

    await migrator.exec()

    (statement,) = executed(mock_adapter)
    assert statement.startswith("CREATE TABLE IF NOT EXISTS `t`")
    assert "`id` INTEGER NOT NULL AUTO_INCREMENT PRIMARY KEY" in statement
    assert "`name` VARCHAR(255) NOT NULL" in statement
    assert migrator.actions == []


@pytest.mark.asyncio
async def test_create_mode_failure_propagates(
    mysql_connections: Connections, mock_adapter: AsyncMock
) -> None:
    """Test that a failed CREATE TABLE raises and still clears the queue."""
    mock_adapter.raw.side_effect = RuntimeError("syntax error")
    migrator = Migrator("t", mysql_connections, create=True)
    migrator.add_column("id").type("int")

    with pytest.raises(RuntimeError, match="syntax error"):
        await migrator.exec()
    assert migrator.actions == []
    assert migrator.to_sql("mysql") == []


@pytest.mark.asyncio
async def test_action_failures_do_not_stop_queue(
    mysql_connections: Connections, mock_adapter: AsyncMock
) -> None:
    """Test that a failing action is logged and the rest still run."""
    mock_adapter.raw.side_effect = [RuntimeError("no such column"), {"changes": 0}]
    migrator = Migrator("t", mysql_connections)
    migrator.drop_column("ghost")
    migrator.add_column("age").type("int")

    await migrator.exec()

    assert executed(mock_adapter) == [
        "ALTER TABLE `t` DROP COLUMN `ghost`",
        "ALTER TABLE `t` ADD COLUMN `age` INTEGER",
    ]
    assert migrator.actions == []


@pytest.mark.asyncio
async def test_exec_unknown_connection(mysql_connections: Connections) -> None:
    """Test that executing against an unknown connection fails."""
    migrator = Migrator("t", mysql_connections).use_connection("ghost")
    migrator.drop_column("a")

    with pytest.raises(MigrationError):
        await migrator.execute()


@pytest.mark.asyncio
async def test_table_commands(
    mysql_connections: Connections, mock_adapter: AsyncMock
) -> None:
    """Test the create, update, drop and truncate commands."""
    create = CreateTableBuilder("t", mysql_connections)
    create.add_column("id").type("int").is_primary()
    await create.exec()

    update = UpdateTableBuilder("t", mysql_connections)
    update.add_column("age").type("int")
    update.modify_column("name").type("text")
    update.drop_column("old").drop_unique("email").drop_primary_key("id")
    await update.exec()

    await DropTableBuilder("t", mysql_connections).exec()
    mock_adapter.raw.return_value = {"changes": 3, "last_id": 0}
    result = await TruncateTableBuilder("t", mysql_connections).exec()

    assert result == {"changes": 3, "last_id": 0}
    assert executed(mock_adapter)[1:] == [
        "ALTER TABLE `t` ADD COLUMN `age` INTEGER",
        "ALTER TABLE `t` MODIFY COLUMN `name` TEXT",
        "ALTER TABLE `t` DROP COLUMN `old`",
        "ALTER TABLE `t` DROP INDEX `email`",
        "ALTER TABLE `t` DROP PRIMARY KEY",
        "DROP TABLE IF EXISTS `t`",
        "DELETE FROM `t`",
    ]


@pytest.mark.asyncio
async def test_sqlite_round_trip(tmp_path: Path) -> None:
    """Test the commands against a real SQLite database."""
    adapter = SQLiteAdapter(str(tmp_path / "mig.db"))
    registry = Connections()
    registry.create("local", ConnectionType.SQLITE).key({})
    registry.attach_adapter("local", adapter)

    create = CreateTableBuilder("notes", registry)
    create.add_column("id").type("int").is_primary().auto_increment()
    create.add_column("body").type("text").not_null()
    await create.exec()

    update = UpdateTableBuilder("notes", registry)
    update.add_column("pinned").type("boolean").default(False)
    await update.exec()

    await adapter.add_document("notes", {"body": "hello"})
    rows = await adapter.raw("SELECT id, body, pinned FROM notes")
    assert rows == [{"id": 1, "body": "hello", "pinned": 0}]

    await TruncateTableBuilder("notes", registry).exec()
    assert await adapter.raw("SELECT * FROM notes") == []

    await DropTableBuilder("notes", registry).exec()
    tables = await adapter.raw(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'notes'"
    )
    assert tables == []
    await adapter.close()
