"""Schema-validated query and migration engine."""

from .bootstrap import close_default_mapper, create_mapper, get_default_mapper
from .config import Settings, settings
from .database import Connections, DatabaseAdapter, Executor, QueryOptions
from .exceptions import MapperError
from .log import (
    configure_logging,
    get_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from .mapper import Mapper, TableSchema
from .schema import Field, SchemaDef, SchemaManager, SchemaQuery
from .types import ColumnType, ConnectionType, DeleteType, Environment

__all__ = [
    "configure_logging",
    "ColumnType",
    "ConnectionType",
    "Connections",
    "DatabaseAdapter",
    "DeleteType",
    "Environment",
    "Executor",
    "Field",
    "Mapper",
    "MapperError",
    "QueryOptions",
    "SchemaDef",
    "SchemaManager",
    "SchemaQuery",
    "Settings",
    "TableSchema",
    "close_default_mapper",
    "create_mapper",
    "get_default_mapper",
    "get_logger",
    "settings",
    "setup_logging",
    "setup_production_logging",
    "setup_test_logging",
]
