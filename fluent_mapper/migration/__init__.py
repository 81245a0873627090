"""Schema migrations: column builders, DDL compilers and action queues."""

from .column import ColumnBuilder, ColumnDefinition, ForeignKeyRef
from .dialects import DDLCompiler, PostgresNativeCompiler, get_compiler
from .manager import MigrationManager
from .migrator import (
    CreateTableBuilder,
    DropTableBuilder,
    Migrator,
    MigratorAction,
    TruncateTableBuilder,
    UpdateTableBuilder,
)

__all__ = [
    "ColumnBuilder",
    "ColumnDefinition",
    "CreateTableBuilder",
    "DDLCompiler",
    "DropTableBuilder",
    "ForeignKeyRef",
    "MigrationManager",
    "Migrator",
    "MigratorAction",
    "PostgresNativeCompiler",
    "TruncateTableBuilder",
    "UpdateTableBuilder",
    "get_compiler",
]
