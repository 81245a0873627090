"""Database connections, adapters and raw execution."""

from .connections import ConnectionBuilder, ConnectionConfig, Connections
from .executor import Executor
from .interfaces import (
    AdapterTransaction,
    DatabaseAdapter,
    Filter,
    QueryOptions,
    SortBy,
)

__all__ = [
    "AdapterTransaction",
    "ConnectionBuilder",
    "ConnectionConfig",
    "Connections",
    "DatabaseAdapter",
    "Executor",
    "Filter",
    "QueryOptions",
    "SortBy",
]
