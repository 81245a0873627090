"""Schema definitions, registry and query builder."""

from .definition import Field, SchemaDef
from .descriptor import parse_descriptor, parse_field
from .query import SchemaQuery
from .registry import SchemaBuilder, SchemaManager

__all__ = [
    "Field",
    "SchemaDef",
    "SchemaBuilder",
    "SchemaManager",
    "SchemaQuery",
    "parse_descriptor",
    "parse_field",
]
