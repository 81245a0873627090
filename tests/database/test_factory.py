"""Tests for the adapter factory."""

from pathlib import Path

import pytest

from fluent_mapper.database import Connections
from fluent_mapper.database.factory import (
    _sql_url,
    auto_attach_adapter,
    create_adapter,
    create_adapter_from_url,
    infer_connection_type,
)
from fluent_mapper.database.implementations import (
    APIAdapter,
    MongoDBAdapter,
    SQLiteAdapter,
)
from fluent_mapper.types import ConnectionType


@pytest.mark.parametrize(
    "url,expected",
    [
        ("mysql://user:pw@db/app", ConnectionType.MYSQL),
        ("postgresql+psycopg://db/app", ConnectionType.POSTGRES),
        ("postgres://db/app", ConnectionType.POSTGRES),
        ("mongodb+srv://cluster.example.com/app", ConnectionType.MONGODB),
        ("https://api.example.com/v1", ConnectionType.API),
        ("sqlite:///data/app.db", ConnectionType.SQLITE),
        ("data/app.sqlite3", ConnectionType.SQLITE),
    ],
)
def test_infer_connection_type(url: str, expected: ConnectionType) -> None:
    """Test connection type inference from URL schemes and file paths."""
    assert infer_connection_type(url) == expected


def test_infer_unsupported_scheme() -> None:
    """Test that unknown schemes are rejected."""
    with pytest.raises(ValueError, match="Unsupported protocol: ftp"):
        infer_connection_type("ftp://files.example.com")


def test_sql_url_adds_driver() -> None:
    """Test that bare SQL schemes get the bundled driver."""
    assert _sql_url("mysql://u:p@db/app", ConnectionType.MYSQL) == (
        "mysql+pymysql://u:p@db/app"
    )
    assert _sql_url("postgresql+asyncpg://db/app", ConnectionType.POSTGRES) == (
        "postgresql+asyncpg://db/app"
    )


def test_create_sqlite_adapter(tmp_path: Path) -> None:
    """Test SQLite adapter creation from a key config."""
    adapter = create_adapter(
        "sqlite", {"filename": str(tmp_path / "app.db"), "timeout": 5}
    )

    assert isinstance(adapter, SQLiteAdapter)
    assert adapter.db_path == tmp_path / "app.db"
    assert adapter.timeout == 5.0


def test_create_sqlite_adapter_defaults_to_memory() -> None:
    """Test that a SQLite config without a file is in-memory."""
    adapter = create_adapter(ConnectionType.SQLITE, {})
    assert adapter.db_path == ":memory:"


def test_create_api_adapter() -> None:
    """Test API adapter creation from a key config."""
    adapter = create_adapter(
        ConnectionType.API,
        {"base_url": "https://api.example.com/", "headers": {"X-Key": "k"}},
    )

    assert isinstance(adapter, APIAdapter)
    assert adapter.base_url == "https://api.example.com"
    assert adapter.headers == {"X-Key": "k"}


@pytest.mark.asyncio
async def test_create_mongodb_adapter() -> None:
    """Test MongoDB adapter creation from a key config."""
    adapter = create_adapter(
        ConnectionType.MONGODB,
        {"uri": "mongodb://localhost:27017", "database": "app"},
    )

    assert isinstance(adapter, MongoDBAdapter)
    assert adapter.database == "app"
    await adapter.close()


def test_create_unsupported_type() -> None:
    """Test that types without a bundled adapter are rejected."""
    with pytest.raises(ValueError, match="No adapter available"):
        create_adapter(ConnectionType.FIRESTORE, {})


@pytest.mark.parametrize(
    "url,expected",
    [
        ("sqlite:///data/app.db", Path("data/app.db")),
        ("sqlite:////tmp/app.db", Path("/tmp/app.db")),
        ("data/app.db", Path("data/app.db")),
        ("sqlite://", ":memory:"),
    ],
)
def test_sqlite_from_url(url: str, expected: Path | str) -> None:
    """Test SQLite paths as SQLAlchemy reads them."""
    adapter = create_adapter_from_url(url)

    assert isinstance(adapter, SQLiteAdapter)
    assert adapter.db_path == expected


def test_api_from_url() -> None:
    """Test that HTTP URLs build API adapters."""
    adapter = create_adapter_from_url("http://localhost:8000/api")
    assert isinstance(adapter, APIAdapter)
    assert adapter.base_url == "http://localhost:8000/api"


def test_auto_attach_prefers_url(tmp_path: Path) -> None:
    """Test that a 'url' key wins over the other settings."""
    registry = Connections()
    key = {"url": f"sqlite:///{tmp_path / 'app.db'}", "filename": "ignored.db"}
    registry.create("main", ConnectionType.SQLITE).key(key)

    adapter = auto_attach_adapter(registry, "main", ConnectionType.SQLITE, key)

    assert registry.get_adapter("main") is adapter
    assert adapter.db_path == tmp_path / "app.db"


def test_auto_attach_failure_is_logged() -> None:
    """Test that non-strict attach failures leave the connection bare."""
    registry = Connections()
    registry.create("store", ConnectionType.FIRESTORE).key({})

    result = auto_attach_adapter(
        registry, "store", ConnectionType.FIRESTORE, {}, strict=False
    )

    assert result is None
    assert registry.get_adapter("store") is None


def test_auto_attach_strict_raises() -> None:
    """Test that strict mode propagates attach failures."""
    registry = Connections()
    registry.create("store", ConnectionType.FIRESTORE).key({})

    with pytest.raises(ValueError):
        auto_attach_adapter(
            registry, "store", ConnectionType.FIRESTORE, {}, strict=True
        )
