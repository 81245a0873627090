"""Common type definitions for fluent_mapper."""

from enum import Enum
from typing import Any, TypeAlias

DatabaseParamType: TypeAlias = dict[str, Any] | list[Any] | tuple[Any, ...] | None
DocumentData: TypeAlias = dict[str, Any]
Descriptor: TypeAlias = dict[str, str | list[Any]]


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ColumnType(str, Enum):
    """Logical field types understood by schemas and migrations."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    INT = "int"
    TEXT = "text"


class ConnectionType(str, Enum):
    """Kinds of backend a connection can point at."""

    MYSQL = "mysql"
    SQL = "sql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"
    MONGODB = "mongodb"
    API = "api"
    FIRESTORE = "firestore"


class Dialect(str, Enum):
    """SQL dialects the migration compiler can target."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"


class DeleteType(str, Enum):
    """How a schema handles delete requests."""

    HARD_DELETE = "hardDelete"
    SOFT_DELETE = "softDelete"


class FilterOperator(str, Enum):
    """Comparison operators accepted by where()."""

    EQ = "="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    NE = "!="
    LIKE = "LIKE"
    IN = "IN"


class SortDirection(str, Enum):
    """Sort order for query results."""

    ASC = "asc"
    DESC = "desc"


class MigratorActionType(str, Enum):
    """Kinds of queued DDL actions."""

    ADD_COLUMN = "addColumn"
    DROP_COLUMN = "dropColumn"
    MODIFY_COLUMN = "modifyColumn"
    DROP_TABLE = "dropTable"
    DROP_UNIQUE = "dropUnique"
    DROP_PRIMARY_KEY = "dropPrimaryKey"
