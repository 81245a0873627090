"""Shared SQL statement building."""

from .query_builder import SQLQueryBuilder

__all__ = ["SQLQueryBuilder"]
