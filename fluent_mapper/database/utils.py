"""Helpers shared by the SQL and document adapters."""

import re
from collections.abc import Sequence
from typing import Any

from fluent_mapper.types import Dialect, FilterOperator, SortDirection

from .interfaces import Filter, SortBy

COMPARISON_OPERATORS = frozenset(
    {
        FilterOperator.EQ.value,
        FilterOperator.GT.value,
        FilterOperator.LT.value,
        FilterOperator.GTE.value,
        FilterOperator.LTE.value,
        FilterOperator.NE.value,
    }
)

# Largest LIMIT MySQL accepts; used when only an offset is requested
MYSQL_MAX_LIMIT = 18446744073709551615


def quote_char(dialect: Dialect) -> str:
    """Identifier quote character for a dialect."""
    return "`" if dialect == Dialect.MYSQL else '"'


def quote_identifier(name: str, dialect: Dialect) -> str:
    """Quote an identifier, doubling any embedded quote characters.

    Example:
        >>> quote_identifier("user", Dialect.MYSQL)
        '`user`'
    """
    quote = quote_char(dialect)
    return f"{quote}{name.replace(quote, quote * 2)}{quote}"


def normalize_operator(operator: str) -> str:
    """Uppercase an operator; unknown operators become equality."""
    op = operator.strip().upper()
    if op in COMPARISON_OPERATORS or op in (FilterOperator.LIKE, FilterOperator.IN):
        return op
    return FilterOperator.EQ.value


def build_where_clause(
    filters: Sequence[Filter], dialect: Dialect, prefix: str = "p"
) -> tuple[str, dict[str, Any]]:
    """Build a WHERE clause from structured filters.

    Args:
        filters: Filters to AND together
        dialect: Target SQL dialect (for identifier quoting)
        prefix: Parameter name prefix

    Returns:
        Tuple of (where_clause, parameters_dict); the clause is empty when
        there are no filters

    Example:
        >>> build_where_clause([Filter(field="age", operator=">", value=3)],
        ...                    Dialect.SQLITE)
        ('WHERE "age" > :p0', {'p0': 3})
    """
    if not filters:
        return "", {}

    clauses: list[str] = []
    params: dict[str, Any] = {}

    for item in filters:
        column = quote_identifier(item.field, dialect)
        op = normalize_operator(item.operator)

        if op == FilterOperator.IN:
            values = (
                list(item.value)
                if isinstance(item.value, (list, tuple, set))
                else [item.value]
            )
            if not values:
                clauses.append("1 = 0")
                continue
            names = []
            for value in values:
                name = f"{prefix}{len(params)}"
                params[name] = value
                names.append(f":{name}")
            clauses.append(f"{column} IN ({', '.join(names)})")
            continue

        name = f"{prefix}{len(params)}"
        params[name] = item.value
        clauses.append(f"{column} {op} :{name}")

    return f"WHERE {' AND '.join(clauses)}", params


def build_order_by_clause(sort_by: SortBy | None, dialect: Dialect) -> str:
    """Build ORDER BY clause.

    Example:
        >>> build_order_by_clause(SortBy(field="name", direction="desc"),
        ...                       Dialect.POSTGRES)
        'ORDER BY "name" DESC'
    """
    if sort_by is None:
        return ""
    direction = "DESC" if sort_by.direction == SortDirection.DESC else "ASC"
    return f"ORDER BY {quote_identifier(sort_by.field, dialect)} {direction}"


def build_limit_clause(
    limit: int | None, offset: int | None, dialect: Dialect
) -> str:
    """Build LIMIT/OFFSET clause.

    SQLite and MySQL cannot take an OFFSET without a LIMIT, so an unbounded
    limit is emitted for them when only an offset is given.

    Example:
        >>> build_limit_clause(10, 20, Dialect.SQLITE)
        'LIMIT 10 OFFSET 20'
    """
    if limit is None and offset is None:
        return ""

    if limit is not None:
        clause = f"LIMIT {int(limit)}"
    elif dialect == Dialect.SQLITE:
        clause = "LIMIT -1"
    elif dialect == Dialect.MYSQL:
        clause = f"LIMIT {MYSQL_MAX_LIMIT}"
    else:
        clause = ""

    if offset is not None:
        clause = f"{clause} OFFSET {int(offset)}".strip()

    return clause


def like_to_regex(pattern: str) -> str:
    """Translate a SQL LIKE pattern into an anchored regular expression.

    Example:
        >>> like_to_regex("Ann%")
        '^Ann.*$'
    """
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return f"^{''.join(parts)}$"
