"""Schema registry."""

from collections.abc import Mapping, Sequence
from typing import Any

from fluent_mapper.database.connections import Connections
from fluent_mapper.database.interfaces import DatabaseAdapter
from fluent_mapper.exceptions import (
    SchemaConfigurationError,
    SchemaExistingError,
    SchemaMissingError,
)
from fluent_mapper.log import get_logger
from fluent_mapper.types import DeleteType

from .definition import Field, SchemaDef
from .descriptor import parse_descriptor
from .query import SchemaQuery

logger = get_logger(__name__)


class SchemaBuilder:
    """Builder chain ``create(name).use(...).set_options(...).set_structure(...)``.

    ``set_structure`` is the terminal call: it finalizes the definition and
    registers it with the owning manager.
    """

    def __init__(self, manager: "SchemaManager", name: str) -> None:
        self._manager = manager
        self._name = name
        self._connection_name: str | None = None
        self._collection_name: str | None = None
        self._insertable_fields: list[str] | None = None
        self._updatable_fields: list[str] | None = None
        self._delete_type = DeleteType.HARD_DELETE
        self._mass_delete_allowed = True
        self._mass_edit_allowed = True

    def use(self, connection: str, collection: str) -> "SchemaBuilder":
        """Bind the schema to a connection and a physical collection."""
        self._connection_name = connection
        self._collection_name = collection
        return self

    def set_options(
        self,
        insertable_fields: Sequence[str] | None = None,
        updatable_fields: Sequence[str] | None = None,
        delete_type: DeleteType | str | None = None,
        mass_delete_allowed: bool | None = None,
        mass_edit_allowed: bool | None = None,
    ) -> "SchemaBuilder":
        """Merge write policies; options left as None keep their value."""
        if insertable_fields is not None:
            self._insertable_fields = list(insertable_fields)
        if updatable_fields is not None:
            self._updatable_fields = list(updatable_fields)
        if delete_type is not None:
            self._delete_type = DeleteType(delete_type)
        if mass_delete_allowed is not None:
            self._mass_delete_allowed = mass_delete_allowed
        if mass_edit_allowed is not None:
            self._mass_edit_allowed = mass_edit_allowed
        return self

    def set_structure(
        self, structure: Mapping[str, Any] | Sequence[Field]
    ) -> "SchemaManager":
        """Finalize and register the schema.

        Args:
            structure: Descriptor mapping, or a list of Field records used
                verbatim (undefined fields are then rejected)

        Returns:
            The owning SchemaManager

        Raises:
            SchemaConfigurationError: If a field list holds non-Field items
            SchemaExistingError: If the name was registered meanwhile
        """
        if isinstance(structure, Mapping):
            fields, allow_undefined_fields = parse_descriptor(structure)
        else:
            fields = list(structure)
            allow_undefined_fields = False
            invalid = [f for f in fields if not isinstance(f, Field)]
            if invalid:
                raise SchemaConfigurationError(
                    f"Schema '{self._name}' structure contains non-Field items: "
                    f"{invalid!r}"
                )

        if self._connection_name is None or self._collection_name is None:
            logger.warning(
                f"Schema '{self._name}' registered without connection/collection"
            )

        definition = SchemaDef(
            name=self._name,
            connection_name=self._connection_name,
            collection_name=self._collection_name,
            fields=fields,
            allow_undefined_fields=allow_undefined_fields,
            insertable_fields=self._insertable_fields,
            updatable_fields=self._updatable_fields,
            delete_type=self._delete_type,
            mass_delete_allowed=self._mass_delete_allowed,
            mass_edit_allowed=self._mass_edit_allowed,
        )
        return self._manager.register(definition)


class SchemaManager:
    """Owns every SchemaDef, keyed by schema name."""

    def __init__(self, connections: Connections | None = None) -> None:
        self.connections = connections if connections is not None else Connections()
        self._schemas: dict[str, SchemaDef] = {}

    def create(self, name: str) -> SchemaBuilder:
        """Start defining a schema.

        Raises:
            SchemaExistingError: If the name is already registered
        """
        if name in self._schemas:
            raise SchemaExistingError(name)
        return SchemaBuilder(self, name)

    def register(self, definition: SchemaDef) -> "SchemaManager":
        """Register a finalized definition.

        Raises:
            SchemaExistingError: If the name is already registered
        """
        if definition.name in self._schemas:
            raise SchemaExistingError(definition.name)
        self._schemas[definition.name] = definition
        logger.debug(
            f"Registered schema '{definition.name}' -> "
            f"{definition.connection_name}/{definition.collection_name} "
            f"({len(definition.fields)} fields)"
        )
        return self

    def drop(self, name: str) -> SchemaDef:
        """Remove a schema so the name can be defined again.

        Raises:
            SchemaMissingError: If the name is not registered
        """
        if name not in self._schemas:
            raise SchemaMissingError(name)
        logger.debug(f"Dropped schema '{name}'")
        return self._schemas.pop(name)

    def use(self, name: str) -> SchemaQuery:
        """Get a fresh query builder bound to a schema.

        Raises:
            SchemaMissingError: If the name is not registered
        """
        definition = self._schemas.get(name)
        if definition is None:
            raise SchemaMissingError(name)
        return SchemaQuery(self, definition)

    def get(self, name: str) -> SchemaDef | None:
        return self._schemas.get(name)

    def has(self, name: str) -> bool:
        return name in self._schemas

    def list(self) -> list[SchemaDef]:
        return list(self._schemas.values())

    def get_adapter(self, connection_name: str | None) -> DatabaseAdapter | None:
        """Get the adapter of a connection; None when unattached."""
        if connection_name is None:
            return None
        resolved = self.connections.resolve_name(connection_name)
        return self.connections.get_adapter(resolved)
