"""Database interfaces module."""

from .adapter import (
    AdapterTransaction,
    DatabaseAdapter,
    Filter,
    QueryOptions,
    SortBy,
)

__all__ = [
    "AdapterTransaction",
    "DatabaseAdapter",
    "Filter",
    "QueryOptions",
    "SortBy",
]
