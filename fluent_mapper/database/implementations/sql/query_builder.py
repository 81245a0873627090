"""SQL statement builder shared by the relational adapters."""

from typing import Any

from fluent_mapper.database.interfaces import QueryOptions
from fluent_mapper.database.utils import (
    build_limit_clause,
    build_order_by_clause,
    build_where_clause,
    quote_identifier,
)
from fluent_mapper.types import Dialect


class SQLQueryBuilder:
    """Builds parameterized statements with ``:name`` placeholders."""

    def __init__(self, dialect: Dialect = Dialect.SQLITE) -> None:
        self.dialect = dialect

    def quote(self, name: str) -> str:
        return quote_identifier(name, self.dialect)

    def select(self, options: QueryOptions) -> tuple[str, dict[str, Any]]:
        """Build SELECT query.

        A raw predicate replaces the structured filters entirely.

        Args:
            options: Normalized query options

        Returns:
            Tuple of (query, parameters)
        """
        cols = (
            ", ".join(self.quote(col) for col in options.fields)
            if options.fields
            else "*"
        )
        query = f"SELECT {cols} FROM {self.quote(options.collection_name)}"
        params: dict[str, Any] = {}

        if options.raw_where:
            query += f" WHERE {options.raw_where}"
        else:
            where_clause, params = build_where_clause(options.filters, self.dialect)
            if where_clause:
                query += f" {where_clause}"

        order_clause = build_order_by_clause(options.sort_by, self.dialect)
        if order_clause:
            query += f" {order_clause}"

        limit_clause = build_limit_clause(options.limit, options.offset, self.dialect)
        if limit_clause:
            query += f" {limit_clause}"

        return query, params

    def insert(self, table: str, data: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Build INSERT query.

        Args:
            table: Table name
            data: Data dictionary to insert

        Returns:
            Tuple of (query, parameters)
        """
        if not data:
            # MySQL has no DEFAULT VALUES form
            if self.dialect == Dialect.MYSQL:
                return f"INSERT INTO {self.quote(table)} () VALUES ()", {}
            return f"INSERT INTO {self.quote(table)} DEFAULT VALUES", {}

        columns = [self.quote(col) for col in data]
        params = {f"v{i}": value for i, value in enumerate(data.values())}
        placeholders = [f":{name}" for name in params]

        query = (
            f"INSERT INTO {self.quote(table)} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)})"
        )
        return query, params

    def update_by_id(
        self, table: str, doc_id: str, data: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """Build UPDATE query for one row.

        Args:
            table: Table name
            doc_id: Value of the row's id column
            data: Data dictionary to update

        Returns:
            Tuple of (query, parameters)
        """
        if not data:
            raise ValueError("Cannot update with empty data")

        params = {f"v{i}": value for i, value in enumerate(data.values())}
        set_clause = ", ".join(
            f"{self.quote(col)} = :{name}" for col, name in zip(data, params)
        )
        params["doc_id"] = doc_id
        query = (
            f"UPDATE {self.quote(table)} SET {set_clause} "
            f"WHERE {self.quote('id')} = :doc_id"
        )
        return query, params

    def delete_by_id(self, table: str, doc_id: str) -> tuple[str, dict[str, Any]]:
        """Build DELETE query for one row."""
        query = f"DELETE FROM {self.quote(table)} WHERE {self.quote('id')} = :doc_id"
        return query, {"doc_id": doc_id}
