"""Field descriptor parser.

A descriptor maps field names to a shorthand token list, either a
whitespace-separated string or a literal list::

    {
        "id": "integer auto-increment unique",
        "status": ["string", ["draft", "published"]],
        "created": "datetime default.currentDatetime",
        "owner": "int foreignKey.users.id",
        "?field": "",
    }

The first token may name a type. Every token is then applied as a rule.
Tokens the parser does not recognise are ignored; descriptors written for
newer rule sets therefore still load, with the unknown rules dropped.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from fluent_mapper.constants import (
    ALLOW_UNDEFINED_FIELDS_KEY,
    NOW_SENTINEL,
    TYPE_ALIASES,
)
from fluent_mapper.types import ColumnType

from .definition import Field

FOREIGN_KEY_PREFIX = "foreignKey."
DEFAULT_VALUE_TOKEN = "default.value"
DEFAULT_NOW_TOKENS = frozenset({"default_current_datetime", "default.currentDatetime"})


def _tokenize(descriptor: str | Sequence[Any]) -> list[Any]:
    if isinstance(descriptor, str):
        return descriptor.split()
    return list(descriptor)


def _apply_rule(attrs: dict[str, Any], rule: Any) -> None:
    """Apply one rule token to the field attributes being accumulated."""
    if isinstance(rule, (list, tuple)):
        attrs["enum_values"] = tuple(rule)
        attrs["type"] = ColumnType.STRING
        return
    if not isinstance(rule, str):
        return

    if rule == "auto-increment":
        attrs["auto_increment"] = True
    elif rule == "unique":
        attrs["is_unique"] = True
    elif rule in DEFAULT_NOW_TOKENS:
        attrs["default_value"] = NOW_SENTINEL
    elif rule.startswith(FOREIGN_KEY_PREFIX):
        attrs["is_foreign_key"] = True
        attrs["foreign_ref"] = rule[len(FOREIGN_KEY_PREFIX) :]


def parse_field(name: str, descriptor: str | Sequence[Any]) -> Field:
    """Parse a single field descriptor.

    Args:
        name: Field name
        descriptor: Token string or token list

    Returns:
        Parsed field
    """
    tokens = _tokenize(descriptor)
    attrs: dict[str, Any] = {"name": name, "config": tuple(tokens)}

    if tokens and isinstance(tokens[0], str):
        column_type = TYPE_ALIASES.get(tokens[0].lower())
        if column_type is not None:
            attrs["type"] = column_type

    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token == DEFAULT_VALUE_TOKEN and i + 1 < len(tokens):
            attrs["default_value"] = tokens[i + 1]
            i += 2
            continue
        _apply_rule(attrs, token)
        i += 1

    return Field(**attrs)


def parse_descriptor(
    descriptor: Mapping[str, str | Sequence[Any]],
) -> tuple[list[Field], bool]:
    """Turn a descriptor mapping into fields.

    Args:
        descriptor: Mapping of field name to shorthand tokens

    Returns:
        Tuple of (fields in declaration order, allow_undefined_fields)
    """
    allow_undefined_fields = False
    fields: list[Field] = []

    for name, value in descriptor.items():
        if name == ALLOW_UNDEFINED_FIELDS_KEY:
            allow_undefined_fields = True
            continue
        fields.append(parse_field(name, value))

    return fields, allow_undefined_fields
