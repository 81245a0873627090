"""Schema definition records."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from fluent_mapper.types import ColumnType, DeleteType


@dataclass(frozen=True)
class Field:
    """One column/property of a registered collection."""

    name: str
    type: ColumnType = ColumnType.STRING
    auto_increment: bool = False
    nullable: bool = True
    default_value: Any = None
    is_unique: bool = False
    is_foreign_key: bool = False
    foreign_ref: str | None = None
    enum_values: tuple[Any, ...] | None = None
    # Descriptor tokens as the user wrote them, kept for introspection
    config: tuple[Any, ...] = ()

    @property
    def has_default(self) -> bool:
        return self.default_value is not None


@dataclass
class SchemaDef:
    """A named binding of a collection to a connection, fields and policies.

    Instances are owned by a SchemaManager. After registration they only
    change through the explicit setters below.
    """

    name: str
    connection_name: str | None
    collection_name: str | None
    fields: list[Field] = field(default_factory=list)
    allow_undefined_fields: bool = False
    insertable_fields: list[str] | None = None
    updatable_fields: list[str] | None = None
    delete_type: DeleteType = DeleteType.HARD_DELETE
    mass_delete_allowed: bool = True
    mass_edit_allowed: bool = True
    fields_map: dict[str, Field] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.fields_map = {f.name: f for f in self.fields}

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def set_fields(
        self, fields: Iterable[Field], allow_undefined_fields: bool | None = None
    ) -> None:
        """Replace the field set and rebuild the lookup map."""
        self.fields = list(fields)
        self.fields_map = {f.name: f for f in self.fields}
        if allow_undefined_fields is not None:
            self.allow_undefined_fields = allow_undefined_fields

    def set_connection(self, connection_name: str) -> None:
        self.connection_name = connection_name

    def set_policies(
        self,
        insertable_fields: list[str] | None = None,
        updatable_fields: list[str] | None = None,
        delete_type: DeleteType | str | None = None,
        mass_delete_allowed: bool | None = None,
        mass_edit_allowed: bool | None = None,
    ) -> None:
        """Update write policies; arguments left as None keep their value."""
        if insertable_fields is not None:
            self.insertable_fields = list(insertable_fields)
        if updatable_fields is not None:
            self.updatable_fields = list(updatable_fields)
        if delete_type is not None:
            self.delete_type = DeleteType(delete_type)
        if mass_delete_allowed is not None:
            self.mass_delete_allowed = mass_delete_allowed
        if mass_edit_allowed is not None:
            self.mass_edit_allowed = mass_edit_allowed
