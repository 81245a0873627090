"""Unit tests for logging functionality."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from fluent_mapper import get_logger, setup_logging, setup_test_logging
from fluent_mapper.log import (
    MAX_STATEMENT_LENGTH,
    PACKAGE_LOGGER,
    STATEMENT_LOGGER,
    format_statement,
    log_statement,
    resolve_level,
)


@pytest.fixture(autouse=True)
def restore_test_logging() -> Generator[None, None, None]:
    """Reinstall the test logging preset after each test."""
    yield
    setup_test_logging()


def _flush() -> None:
    for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
        handler.flush()


def test_setup_logging_defaults() -> None:
    """Test setup_logging with default parameters."""
    package_logger = setup_logging()

    assert package_logger.name == PACKAGE_LOGGER
    assert package_logger.level == logging.INFO
    assert package_logger.propagate is False
    assert len(package_logger.handlers) == 1
    assert logging.getLogger(STATEMENT_LOGGER).level == logging.WARNING


def test_setup_logging_level_name() -> None:
    """Test that levels may be given by name."""
    assert setup_logging("debug").level == logging.DEBUG


def test_setup_logging_replaces_handlers(tmp_path: Path) -> None:
    """Test that a second call does not stack handlers."""
    setup_logging(log_file=tmp_path / "a.log")
    package_logger = setup_logging()
    assert len(package_logger.handlers) == 1


def test_setup_logging_without_colors() -> None:
    """Test that plain formatting is used when colors are disabled."""
    handler = setup_logging(use_colors=False).handlers[0]
    assert type(handler.formatter) is logging.Formatter


def test_root_logger_untouched() -> None:
    """Test that configuration stays on the package logger."""
    root_handlers = list(logging.getLogger().handlers)
    setup_logging()
    assert logging.getLogger().handlers == root_handlers


@pytest.mark.parametrize(
    "level,expected",
    [(logging.ERROR, logging.ERROR), ("warning", logging.WARNING), (" INFO ", 20)],
)
def test_resolve_level(level: int | str, expected: int) -> None:
    """Test numeric and named levels."""
    assert resolve_level(level) == expected


def test_resolve_level_unknown() -> None:
    """Test that unknown level names are rejected."""
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_file_logging(tmp_path: Path) -> None:
    """Test that file logging writes into the given file."""
    log_file = tmp_path / "nested" / "mapper.log"
    setup_logging(log_file=log_file, overwrite_log_file=True)
    get_logger("test_file").warning("written to file")
    _flush()

    assert "written to file" in log_file.read_text()


def test_get_logger_namespaces() -> None:
    """Test that loggers live under the package logger."""
    assert get_logger("test_logger").name == f"{PACKAGE_LOGGER}.test_logger"
    assert get_logger("fluent_mapper.schema").name == "fluent_mapper.schema"
    assert get_logger(PACKAGE_LOGGER).name == PACKAGE_LOGGER


def test_format_statement() -> None:
    """Test whitespace collapsing and parameter rendering."""
    statement = "SELECT *\n  FROM users\n WHERE id = :p0"
    assert format_statement(statement, {"p0": 1}) == (
        "SELECT * FROM users WHERE id = :p0 {'p0': 1}"
    )


def test_format_statement_truncates() -> None:
    """Test that long statements are cut."""
    text = format_statement("x" * (MAX_STATEMENT_LENGTH + 10))
    assert text == "x" * MAX_STATEMENT_LENGTH + "..."


def test_statements_follow_echo(tmp_path: Path) -> None:
    """Test that statements are only logged when echo is enabled."""
    log_file = tmp_path / "statements.log"

    setup_logging("DEBUG", log_file=log_file, overwrite_log_file=True)
    log_statement("SELECT 1", source="sqlite")
    _flush()
    assert "SELECT 1" not in log_file.read_text()

    setup_logging(
        "DEBUG", log_file=log_file, echo_statements=True, overwrite_log_file=True
    )
    log_statement("SELECT 2", source="sqlite")
    _flush()
    assert "sqlite: SELECT 2" in log_file.read_text()
