"""DDL compilers for the supported SQL dialects.

Each compiler turns ``ColumnDefinition`` records and migration actions into
one SQL statement. Unique constraints are dropped by name; outside MySQL the
name is assumed to follow the ``{column}_unique`` convention, which holds
for constraints created by this package but not for arbitrary schemas.
"""

from abc import ABC, abstractmethod
from typing import Any

from fluent_mapper.constants import DEFAULT_VARCHAR_LENGTH, NOW_SENTINEL
from fluent_mapper.types import ColumnType, Dialect

from .column import ColumnDefinition

TYPE_MAP = {
    ColumnType.INT: "INTEGER",
    ColumnType.NUMBER: "DECIMAL(10,2)",
    ColumnType.BOOLEAN: "TINYINT(1)",
    ColumnType.DATE: "DATETIME",
    ColumnType.TEXT: "TEXT",
}


class DDLCompiler(ABC):
    """Abstract DDL compiler for different SQL backends."""

    dialect: Dialect
    quote_char = "`"

    def quote(self, name: str) -> str:
        return f"{self.quote_char}{name}{self.quote_char}"

    def column_type(self, column: ColumnDefinition) -> str:
        """Map a logical column type to the SQL type."""
        return TYPE_MAP.get(
            column.type, f"VARCHAR({column.length or DEFAULT_VARCHAR_LENGTH})"
        )

    def literal(self, value: Any) -> str:
        """Render a DEFAULT literal; strings are quoted."""
        if value == NOW_SENTINEL:
            return "CURRENT_TIMESTAMP"
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, str):
            return "'" + value.replace("'", "''") + "'"
        return str(value)

    def _enum_check(self, column: ColumnDefinition) -> str:
        values = ", ".join(self.literal(v) for v in column.enum_values)
        return f" CHECK ({self.quote(column.name)} IN ({values}))"

    def _tail(self, column: ColumnDefinition) -> str:
        """DEFAULT, UNIQUE, enum CHECK and REFERENCES clauses."""
        sql = ""
        if column.default_value is not None:
            sql += f" DEFAULT {self.literal(column.default_value)}"
        if column.is_unique and not column.is_primary:
            sql += " UNIQUE"
        if column.enum_values:
            sql += self._enum_check(column)
        if column.foreign_key is not None:
            ref = column.foreign_key
            sql += f" REFERENCES {self.quote(ref.table)}({self.quote(ref.column)})"
        return sql

    @abstractmethod
    def column_sql(self, column: ColumnDefinition) -> str:
        """Generate the column definition clause.

        Args:
            column: Column definition

        Returns:
            Column clause usable in CREATE TABLE and ADD COLUMN
        """
        pass

    def create_table_sql(self, table: str, columns: list[ColumnDefinition]) -> str:
        """Generate CREATE TABLE SQL.

        Args:
            table: Name of the table
            columns: Column definitions in declaration order

        Returns:
            CREATE TABLE SQL statement
        """
        body = ",\n".join(f"  {self.column_sql(col)}" for col in columns)
        return f"CREATE TABLE IF NOT EXISTS {self.quote(table)} (\n{body}\n)"

    def drop_table_sql(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {self.quote(table)}"

    def truncate_table_sql(self, table: str) -> str:
        return f"DELETE FROM {self.quote(table)}"

    def add_column_sql(self, table: str, column: ColumnDefinition) -> str:
        return f"ALTER TABLE {self.quote(table)} ADD COLUMN {self.column_sql(column)}"

    def modify_column_sql(self, table: str, column: ColumnDefinition) -> str:
        return (
            f"ALTER TABLE {self.quote(table)} ALTER COLUMN "
            f"{self.quote(column.name)} TYPE {self.column_type(column)}"
        )

    def drop_column_sql(self, table: str, column: str) -> str:
        return f"ALTER TABLE {self.quote(table)} DROP COLUMN {self.quote(column)}"

    def drop_unique_sql(self, table: str, column: str) -> str:
        return (
            f"ALTER TABLE {self.quote(table)} "
            f"DROP CONSTRAINT {self.quote(f'{column}_unique')}"
        )

    def drop_primary_key_sql(self, table: str, column: str) -> str:
        return f"ALTER TABLE {self.quote(table)} DROP PRIMARY KEY"


class MySQLCompiler(DDLCompiler):
    """MySQL DDL compiler."""

    dialect = Dialect.MYSQL

    def column_type(self, column: ColumnDefinition) -> str:
        if column.enum_values:
            return f"ENUM({', '.join(self.literal(v) for v in column.enum_values)})"
        return super().column_type(column)

    def _enum_check(self, column: ColumnDefinition) -> str:
        # Carried by the ENUM type itself
        return ""

    def column_sql(self, column: ColumnDefinition) -> str:
        sql = f"{self.quote(column.name)} {self.column_type(column)}"
        if column.not_null or column.is_primary:
            sql += " NOT NULL"
        if column.auto_increment:
            sql += " AUTO_INCREMENT"
        if column.is_primary:
            sql += " PRIMARY KEY"
        return sql + self._tail(column)

    def modify_column_sql(self, table: str, column: ColumnDefinition) -> str:
        return (
            f"ALTER TABLE {self.quote(table)} MODIFY COLUMN {self.column_sql(column)}"
        )

    def drop_unique_sql(self, table: str, column: str) -> str:
        return f"ALTER TABLE {self.quote(table)} DROP INDEX {self.quote(column)}"


class PostgresCompiler(DDLCompiler):
    """PostgreSQL DDL compiler using the shared column type table."""

    dialect = Dialect.POSTGRES
    quote_char = '"'

    def column_sql(self, column: ColumnDefinition) -> str:
        sql_type = "SERIAL" if column.auto_increment else self.column_type(column)
        sql = f"{self.quote(column.name)} {sql_type}"
        if column.not_null or column.is_primary:
            sql += " NOT NULL"
        if column.is_primary:
            sql += " PRIMARY KEY"
        return sql + self._tail(column)

    def drop_primary_key_sql(self, table: str, column: str) -> str:
        # Default name PostgreSQL gives an unnamed primary key constraint
        return (
            f"ALTER TABLE {self.quote(table)} "
            f"DROP CONSTRAINT {self.quote(f'{table}_pkey')}"
        )


class PostgresNativeCompiler(PostgresCompiler):
    """PostgreSQL compiler emitting native TIMESTAMP and BOOLEAN columns.

    Opt-in through ``get_compiler("postgres", native_types=True)``.
    """

    def column_type(self, column: ColumnDefinition) -> str:
        if column.type == ColumnType.DATE:
            return "TIMESTAMP"
        if column.type == ColumnType.BOOLEAN:
            return "BOOLEAN"
        return super().column_type(column)

    def literal(self, value: Any) -> str:
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        return super().literal(value)


class SQLiteCompiler(DDLCompiler):
    """SQLite DDL compiler.

    A non-primary auto-increment column compiles to a bare ``AUTOINCREMENT``
    modifier, which SQLite itself rejects; the statement is emitted as
    configured rather than silently altered.
    """

    dialect = Dialect.SQLITE

    def column_sql(self, column: ColumnDefinition) -> str:
        sql = f"{self.quote(column.name)} {self.column_type(column)}"
        if column.not_null:
            sql += " NOT NULL"
        if column.auto_increment:
            if column.is_primary:
                sql += " PRIMARY KEY AUTOINCREMENT"
            else:
                sql += " AUTOINCREMENT"
        elif column.is_primary:
            sql += " PRIMARY KEY"
        return sql + self._tail(column)


COMPILERS: dict[Dialect, type[DDLCompiler]] = {
    Dialect.MYSQL: MySQLCompiler,
    Dialect.POSTGRES: PostgresCompiler,
    Dialect.SQLITE: SQLiteCompiler,
}


def get_compiler(dialect: Dialect | str, native_types: bool = False) -> DDLCompiler:
    """Get the DDL compiler of a dialect.

    Args:
        dialect: Dialect name
        native_types: Use PostgreSQL's TIMESTAMP and BOOLEAN instead of the
            shared DATETIME and TINYINT(1) mapping; ignored by other dialects

    Example:
        >>> get_compiler("mysql").quote("users")
        '`users`'
    """
    dialect = Dialect(dialect)
    if native_types and dialect == Dialect.POSTGRES:
        return PostgresNativeCompiler()
    return COMPILERS[dialect]()
