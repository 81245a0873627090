"""Tests for mapper bootstrap from settings."""

import logging
import logging.handlers
from collections.abc import Generator
from pathlib import Path

import pytest

import fluent_mapper.bootstrap as bootstrap
from fluent_mapper import Settings, close_default_mapper, create_mapper
from fluent_mapper.database.implementations import APIAdapter, SQLiteAdapter
from fluent_mapper.log import PACKAGE_LOGGER, STATEMENT_LOGGER, setup_test_logging
from fluent_mapper.types import Environment


@pytest.fixture(autouse=True)
def restore_test_logging() -> Generator[None, None, None]:
    """Reinstall the test logging preset after each bootstrap."""
    yield
    setup_test_logging()


def test_create_mapper_without_url() -> None:
    """Test that no connection is registered without a database URL."""
    mapper = create_mapper(Settings(database_url=None))
    assert mapper.connections.list() == []


@pytest.mark.asyncio
async def test_create_mapper_sqlite_url(tmp_path: Path) -> None:
    """Test that DATABASE_URL becomes the default connection."""
    mapper = create_mapper(
        Settings(
            database_url=f"sqlite:///{tmp_path / 'app.db'}",
            default_connection="primary",
        )
    )

    config = mapper.connections.default_connection()
    assert config.name == "primary"
    assert isinstance(mapper.connections.get_adapter("primary"), SQLiteAdapter)
    await mapper.close()


def test_create_mapper_api_url() -> None:
    """Test connection type inference for HTTP URLs."""
    mapper = create_mapper(Settings(database_url="https://api.example.com"))
    assert isinstance(mapper.connections.get_adapter("default"), APIAdapter)


def test_create_mapper_sqlite_path(tmp_path: Path) -> None:
    """Test that a bare database file path opens SQLite."""
    mapper = create_mapper(Settings(database_url=str(tmp_path / "app.sqlite")))
    assert isinstance(mapper.connections.get_adapter("default"), SQLiteAdapter)


@pytest.mark.asyncio
async def test_default_mapper_lifecycle(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the global mapper is created once and reset on close."""
    monkeypatch.setattr(bootstrap, "settings", Settings(database_url=None))
    monkeypatch.setattr(bootstrap, "_default_mapper", None)

    first = bootstrap.get_default_mapper()
    assert bootstrap.get_default_mapper() is first

    await close_default_mapper()
    assert bootstrap._default_mapper is None
    assert bootstrap.get_default_mapper() is not first


def test_log_level_from_settings() -> None:
    """Test that the configured level reaches the package logger."""
    create_mapper(Settings(log_level="WARNING"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    assert package_logger.level == logging.WARNING
    assert logging.getLogger(STATEMENT_LOGGER).level == logging.WARNING
    assert all(
        not isinstance(h, logging.FileHandler) for h in package_logger.handlers
    )


def test_testing_environment_writes_test_log(tmp_path: Path) -> None:
    """Test that the testing preset logs statements into an overwritten file."""
    create_mapper(
        Settings(environment=Environment.TESTING, log_level="INFO", log_dir=tmp_path)
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    assert package_logger.level == logging.INFO
    assert logging.getLogger(STATEMENT_LOGGER).level == logging.DEBUG
    [file_handler] = [
        h for h in package_logger.handlers if isinstance(h, logging.FileHandler)
    ]
    assert Path(file_handler.baseFilename) == tmp_path / "test" / "test.log"


def test_production_environment_rotates(tmp_path: Path) -> None:
    """Test that the production preset uses a rotating log file."""
    create_mapper(
        Settings(
            environment=Environment.PRODUCTION,
            log_dir=tmp_path,
            echo_statements=True,
        )
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    [file_handler] = [
        h
        for h in package_logger.handlers
        if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert Path(file_handler.baseFilename) == tmp_path / "fluent_mapper.log"
    assert logging.getLogger(STATEMENT_LOGGER).level == logging.DEBUG


def test_invalid_log_level() -> None:
    """Test that an unknown level name is rejected."""
    with pytest.raises(ValueError, match="LOUD"):
        create_mapper(Settings(log_level="LOUD"))


def test_create_mapper_keeps_logging() -> None:
    """Test that logging can be left to the application."""
    setup_test_logging()
    create_mapper(Settings(log_level="ERROR"), configure_logs=False)
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
