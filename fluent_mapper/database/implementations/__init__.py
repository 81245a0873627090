"""Database implementations package."""

from .api import APIAdapter
from .mongodb import MongoDBAdapter
from .sql import SQLQueryBuilder
from .sqlalchemy import SQLAlchemyAdapter
from .sqlite import SQLiteAdapter

__all__ = [
    "APIAdapter",
    "MongoDBAdapter",
    "SQLAlchemyAdapter",
    "SQLiteAdapter",
    "SQLQueryBuilder",
]
