"""Logging for fluent_mapper.

Handlers are attached to the ``fluent_mapper`` package logger rather than
the root logger, so an application embedding the mapper keeps control of
its own logging. Statements sent to a backend (SQL, DDL, HTTP requests) are
logged on the ``fluent_mapper.statements`` child logger, which stays at
WARNING unless statement echo is turned on.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import colorlog

if TYPE_CHECKING:
    from fluent_mapper.config import Settings

PACKAGE_LOGGER = "fluent_mapper"
STATEMENT_LOGGER = f"{PACKAGE_LOGGER}.statements"

# Statements longer than this are cut in log records
MAX_STATEMENT_LENGTH = 500

LOG_FORMAT = "%(asctime)s %(levelname)8s [%(name)s] %(message)s"
COLOR_LOG_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)8s%(reset)s "
    "\033[90m[%(name)s]\033[0m %(message)s"
)
DATE_FORMAT = "%m-%d %H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def resolve_level(level: int | str) -> int:
    """Turn a level name such as ``"debug"`` into its numeric value.

    Raises:
        ValueError: If the name is not a logging level
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: int | str = logging.INFO,
    use_colors: bool = True,
    log_file: Path | None = None,
    echo_statements: bool = False,
    overwrite_log_file: bool = False,
) -> logging.Logger:
    """Configure the package logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Level of the package logger, as a number or a name
        use_colors: Colour the console output with colorlog
        log_file: Also write records to this file
        echo_statements: Log every backend statement at DEBUG
        overwrite_log_file: Truncate the file instead of rotating it

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.setLevel(resolve_level(level))
    package_logger.propagate = False
    package_logger.addHandler(_console_handler(use_colors))
    if log_file is not None:
        package_logger.addHandler(_file_handler(log_file, overwrite_log_file))

    logging.getLogger(STATEMENT_LOGGER).setLevel(
        logging.DEBUG if echo_statements else logging.WARNING
    )
    return package_logger


def _console_handler(use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if use_colors:
        formatter: logging.Formatter = colorlog.ColoredFormatter(
            COLOR_LOG_FORMAT, datefmt=DATE_FORMAT, log_colors=LOG_COLORS
        )
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handler.setFormatter(formatter)
    return handler


def _file_handler(log_file: Path, overwrite: bool) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    if overwrite:
        handler: logging.Handler = logging.FileHandler(
            log_file, mode="w", encoding="utf-8"
        )
    else:
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=4,
            encoding="utf-8",
        )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the package namespace.

    Args:
        name: Module name; names outside ``fluent_mapper`` are nested under it

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def format_statement(statement: str, params: Any = None) -> str:
    """Collapse whitespace in a statement and cut it for logging."""
    text = " ".join(statement.split())
    if len(text) > MAX_STATEMENT_LENGTH:
        text = text[:MAX_STATEMENT_LENGTH] + "..."
    if params:
        text += f" {params!r}"
    return text


def log_statement(statement: str, params: Any = None, source: str = "") -> None:
    """Log a backend statement when statement echo is enabled."""
    statement_logger = logging.getLogger(STATEMENT_LOGGER)
    if statement_logger.isEnabledFor(logging.DEBUG):
        prefix = f"{source}: " if source else ""
        statement_logger.debug(prefix + format_statement(statement, params))


def setup_production_logging(
    level: int | str = logging.INFO, log_dir: Path = Path("logs")
) -> logging.Logger:
    """Setup logging for production with a rotating file."""
    return setup_logging(level=level, log_file=log_dir / "fluent_mapper.log")


def setup_test_logging(
    level: int | str = logging.DEBUG, log_dir: Path = Path("logs") / "test"
) -> logging.Logger:
    """Setup logging for tests; the file is overwritten on every run."""
    return setup_logging(
        level=level,
        log_file=log_dir / "test.log",
        echo_statements=True,
        overwrite_log_file=True,
    )


def configure_logging(config: "Settings") -> logging.Logger:
    """Configure logging from settings.

    The environment picks the preset: testing and production write a log
    file, development only logs to the console.
    """
    if config.is_testing:
        return setup_test_logging(config.log_level, config.log_dir / "test")
    if config.is_production:
        package_logger = setup_production_logging(config.log_level, config.log_dir)
    else:
        package_logger = setup_logging(config.log_level)
    logging.getLogger(STATEMENT_LOGGER).setLevel(
        logging.DEBUG if config.echo_statements else logging.WARNING
    )
    return package_logger
