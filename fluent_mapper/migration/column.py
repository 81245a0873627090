"""Column definitions and their fluent builder."""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from fluent_mapper.constants import TYPE_ALIASES
from fluent_mapper.types import ColumnType

if TYPE_CHECKING:
    from .migrator import Migrator


@dataclass(frozen=True)
class ForeignKeyRef:
    """Referenced table and column of a foreign key."""

    table: str
    column: str


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    name: str
    type: ColumnType | str = ColumnType.STRING
    length: int | None = None
    is_primary: bool = False
    is_unique: bool = False
    not_null: bool = False
    auto_increment: bool = False
    default_value: Any = None
    enum_values: list[Any] = field(default_factory=list)
    foreign_key: ForeignKeyRef | None = None


class ColumnBuilder:
    """Chainable column setters.

    Builders created by a migrator can also enqueue drop actions for their
    column on that migrator.
    """

    def __init__(self, name: str, migrator: "Migrator | None" = None) -> None:
        self._definition = ColumnDefinition(name=name)
        self._migrator = migrator

    @property
    def name(self) -> str:
        return self._definition.name

    def type(self, column_type: ColumnType | str) -> "ColumnBuilder":
        # Unknown names are kept and compile as VARCHAR
        self._definition.type = TYPE_ALIASES.get(str(column_type).lower(), column_type)
        return self

    def length(self, length: int) -> "ColumnBuilder":
        self._definition.length = length
        return self

    def is_primary(self) -> "ColumnBuilder":
        self._definition.is_primary = True
        return self

    def is_unique(self) -> "ColumnBuilder":
        self._definition.is_unique = True
        return self

    def unique(self) -> "ColumnBuilder":
        return self.is_unique()

    def not_null(self) -> "ColumnBuilder":
        self._definition.not_null = True
        return self

    def is_nullable(self) -> "ColumnBuilder":
        self._definition.not_null = False
        return self

    def auto_increment(self) -> "ColumnBuilder":
        self._definition.auto_increment = True
        return self

    def default(self, value: Any) -> "ColumnBuilder":
        self._definition.default_value = value
        return self

    def values(self, values: list[Any]) -> "ColumnBuilder":
        """Restrict the column to an enumerated set of values."""
        self._definition.enum_values = list(values)
        return self

    def foreign_key(self, table: str, column: str) -> "ColumnBuilder":
        self._definition.foreign_key = ForeignKeyRef(table=table, column=column)
        return self

    def drop_unique(self) -> "ColumnBuilder":
        if self._migrator is not None:
            self._migrator.drop_unique(self.name)
        return self

    def drop_primary_key(self) -> "ColumnBuilder":
        if self._migrator is not None:
            self._migrator.drop_primary_key(self.name)
        return self

    def drop(self) -> "ColumnBuilder":
        if self._migrator is not None:
            self._migrator.drop_column(self.name)
        return self

    def get_definition(self) -> ColumnDefinition:
        """Snapshot of the column as configured so far."""
        return replace(
            self._definition, enum_values=list(self._definition.enum_values)
        )
