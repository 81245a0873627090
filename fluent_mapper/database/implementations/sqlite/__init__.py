"""SQLite adapter."""

from .sqlite_adapter import SQLiteAdapter

__all__ = ["SQLiteAdapter"]
