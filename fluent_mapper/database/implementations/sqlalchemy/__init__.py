"""SQLAlchemy adapter."""

from .sqlalchemy_adapter import SQLAlchemyAdapter, create_sql_engine

__all__ = ["SQLAlchemyAdapter", "create_sql_engine"]
