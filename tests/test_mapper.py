"""Tests for the mapper facade."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from fluent_mapper import Mapper
from fluent_mapper.database.implementations import SQLiteAdapter
from fluent_mapper.exceptions import (
    AdapterMissingError,
    MigrationError,
    SchemaMissingError,
)
from fluent_mapper.migration import MigrationManager
from fluent_mapper.schema import Field
from fluent_mapper.types import ColumnType, ConnectionType

from conftest import MemoryAdapter


@pytest.fixture
async def mapper(tmp_path: Path) -> AsyncGenerator[Mapper, None]:
    """Provide a mapper with a SQLite 'app' connection and a users table."""
    mapper = Mapper().connect(
        "app", ConnectionType.SQLITE, {"filename": str(tmp_path / "app.db")}
    )
    create = mapper.table("users").create()
    create.add_column("id").type("int").is_primary().auto_increment()
    create.add_column("name").type("string").not_null()
    create.add_column("age").type("int")
    await create.exec()

    mapper.schema("users").use(connection="app", collection="users").set_structure(
        {"id": "integer auto-increment", "name": "string", "age": "int"}
    )
    yield mapper
    await mapper.close()


@pytest.mark.asyncio
async def test_crud_through_facade(mapper: Mapper) -> None:
    """Test the shorthand operations end to end."""
    ann = await mapper.add("users", {"name": "Ann", "age": 31})
    await mapper.add("users", {"name": "Bob", "age": 25})

    assert ann == "1"
    assert [u["name"] for u in await mapper.get("users")] == ["Ann", "Bob"]
    assert (await mapper.get_one("users", {"name": "Bob"}))["age"] == 25

    assert await mapper.update("users", {"name": "Bob"}, {"age": 26}) == 1
    assert (await mapper.get_one("users", {"name": "Bob"}))["age"] == 26

    assert await mapper.delete("users", {"name": "Ann"}) == 1
    assert [u["name"] for u in await mapper.get("users")] == ["Bob"]


@pytest.mark.asyncio
async def test_use_returns_query(mapper: Mapper) -> None:
    """Test the fluent query entry point."""
    await mapper.add("users", {"name": "Ann", "age": 31})
    rows = await mapper.use("users").where("age", 30, ">").select_fields(["name"]).get()
    assert rows == [{"name": "Ann"}]


@pytest.mark.asyncio
async def test_raw_executor(mapper: Mapper) -> None:
    """Test raw statements through the default connection."""
    await mapper.add("users", {"name": "Ann", "age": 31})
    rows = await mapper.raw("SELECT name FROM users WHERE age > ?").bind(30).execute()
    assert rows == [{"name": "Ann"}]


@pytest.mark.asyncio
async def test_truncate_and_drop(mapper: Mapper) -> None:
    """Test table commands through the facade."""
    await mapper.add("users", {"name": "Ann"})
    await mapper.table("users").truncate().exec()
    assert await mapper.get("users") == []

    await mapper.table("users").drop().exec()
    tables = await mapper.raw(
        "SELECT name FROM sqlite_master WHERE name = 'users'"
    ).execute()
    assert tables == []


@pytest.mark.asyncio
async def test_define_schema_replaces_fields(mapper: Mapper) -> None:
    """Test that define_schema() swaps the field set in place."""
    definition = mapper.define_schema("users", {"id": "int", "?field": ""})

    assert definition.field_names == ["id"]
    assert definition.allow_undefined_fields is True

    definition = mapper.define_schema("users", [Field(name="name")])
    assert definition.fields_map["name"].type == ColumnType.STRING


@pytest.mark.asyncio
async def test_define_unknown_schema(mapper: Mapper) -> None:
    """Test that define_schema() needs a registered schema."""
    with pytest.raises(SchemaMissingError):
        mapper.define_schema("ghost", {"id": "int"})


@pytest.mark.asyncio
async def test_migrations(mapper: Mapper) -> None:
    """Test the migration manager bound to a connection."""
    manager = mapper.migrations("app")

    assert isinstance(manager, MigrationManager)
    assert await manager.run_migrations({}) == []


def test_migrations_errors() -> None:
    """Test migration manager lookup failures."""
    mapper = Mapper()
    with pytest.raises(MigrationError):
        mapper.migrations("ghost")

    mapper.connections.create("bare", ConnectionType.SQLITE).key({})
    with pytest.raises(AdapterMissingError):
        mapper.migrations("bare")


def test_connect_with_explicit_adapter(memory_adapter: MemoryAdapter) -> None:
    """Test that an explicit adapter is attached as given."""
    mapper = Mapper().connect("mem", ConnectionType.API, {}, adapter=memory_adapter)
    assert mapper.connections.get_adapter("mem") is memory_adapter


def test_connect_failure_leaves_connection_bare() -> None:
    """Test that adapter creation failures are logged, not raised."""
    mapper = Mapper().connect("store", ConnectionType.FIRESTORE, {})

    assert mapper.connections.get("store") is not None
    assert mapper.connections.get_adapter("store") is None


@pytest.mark.asyncio
async def test_sqlite_adapter_attached(mapper: Mapper) -> None:
    """Test that a SQLite config builds a SQLite adapter."""
    assert isinstance(mapper.connections.get_adapter("app"), SQLiteAdapter)
