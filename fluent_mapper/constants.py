"""Constants shared across fluent_mapper."""

from typing import Final

from .types import ColumnType, ConnectionType, Dialect

# Descriptor key that opts a schema into accepting unknown fields
ALLOW_UNDEFINED_FIELDS_KEY: Final[str] = "?field"

# Default-value sentinel resolved to the current timestamp at write time
NOW_SENTINEL: Final[str] = "NOW()"

# Column stamped by soft deletes
SOFT_DELETE_FIELD: Final[str] = "deletedOn"

DEFAULT_CONNECTION_NAME: Final[str] = "default"

# First-token aliases accepted by the descriptor parser
TYPE_ALIASES: Final[dict[str, ColumnType]] = {
    "string": ColumnType.STRING,
    "integer": ColumnType.INT,
    "int": ColumnType.INT,
    "number": ColumnType.NUMBER,
    "boolean": ColumnType.BOOLEAN,
    "datetime": ColumnType.DATE,
    "date": ColumnType.DATE,
    "text": ColumnType.TEXT,
}

# Connection type -> SQL dialect; anything else compiles as sqlite
CONNECTION_DIALECTS: Final[dict[str, Dialect]] = {
    ConnectionType.MYSQL.value: Dialect.MYSQL,
    ConnectionType.POSTGRES.value: Dialect.POSTGRES,
    ConnectionType.SQL.value: Dialect.POSTGRES,
    ConnectionType.SQLITE.value: Dialect.SQLITE,
}

DEFAULT_VARCHAR_LENGTH: Final[int] = 255
