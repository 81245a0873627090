"""High-level facade over connections, schemas, queries and migrations."""

from collections.abc import Mapping, Sequence
from typing import Any

from fluent_mapper.constants import DEFAULT_CONNECTION_NAME
from fluent_mapper.database.connections import Connections
from fluent_mapper.database.executor import Executor
from fluent_mapper.database.factory import auto_attach_adapter
from fluent_mapper.database.interfaces import DatabaseAdapter
from fluent_mapper.exceptions import AdapterMissingError, SchemaMissingError
from fluent_mapper.log import get_logger
from fluent_mapper.migration import (
    CreateTableBuilder,
    DropTableBuilder,
    MigrationManager,
    Migrator,
    TruncateTableBuilder,
    UpdateTableBuilder,
)
from fluent_mapper.migration.migrator import resolve_target
from fluent_mapper.schema import (
    Field,
    SchemaBuilder,
    SchemaDef,
    SchemaManager,
    SchemaQuery,
    parse_descriptor,
)
from fluent_mapper.types import ConnectionType, DocumentData

logger = get_logger(__name__)


class TableSchema:
    """Migration entry point for one table."""

    def __init__(
        self,
        connections: Connections,
        table: str,
        connection: str = DEFAULT_CONNECTION_NAME,
    ) -> None:
        self.table = table
        self._connections = connections
        self._connection = connection

    def use_connection(self, name: str) -> "TableSchema":
        self._connection = name
        return self

    def create(self) -> CreateTableBuilder:
        return CreateTableBuilder(self.table, self._connections, self._connection)

    def update(self) -> UpdateTableBuilder:
        return UpdateTableBuilder(self.table, self._connections, self._connection)

    def drop(self) -> DropTableBuilder:
        return DropTableBuilder(self.table, self._connections, self._connection)

    def truncate(self) -> TruncateTableBuilder:
        return TruncateTableBuilder(self.table, self._connections, self._connection)

    def migrator(self) -> Migrator:
        """Raw action queue for this table."""
        return Migrator(self.table, self._connections, self._connection)


class Mapper:
    """Owns a connection registry and the schema registry built on it."""

    def __init__(self, connections: Connections | None = None) -> None:
        self.connections = connections if connections is not None else Connections()
        self.schemas = SchemaManager(self.connections)

    def connect(
        self,
        name: str,
        connection_type: ConnectionType | str,
        config: dict[str, Any],
        adapter: DatabaseAdapter | None = None,
    ) -> "Mapper":
        """Register a connection and attach its adapter.

        Without an explicit adapter one is built from the config; a failure
        to build it is logged and leaves the connection unattached (see
        ``Settings.strict_adapters``).
        """
        self.connections.create(name, connection_type).key(config)
        if adapter is not None:
            self.connections.attach_adapter(name, adapter)
        else:
            auto_attach_adapter(self.connections, name, connection_type, config)
        return self

    def schema(self, name: str) -> SchemaBuilder:
        return self.schemas.create(name)

    def use(self, name: str) -> SchemaQuery:
        return self.schemas.use(name)

    def define_schema(
        self, name: str, structure: Mapping[str, Any] | Sequence[Field]
    ) -> SchemaDef:
        """Replace the field set of a registered schema in place.

        Raises:
            SchemaMissingError: If the name is not registered
        """
        definition = self.schemas.get(name)
        if definition is None:
            raise SchemaMissingError(name)
        if isinstance(structure, Mapping):
            fields, allow_undefined_fields = parse_descriptor(structure)
            definition.set_fields(fields, allow_undefined_fields)
        else:
            definition.set_fields(structure)
        return definition

    def _filtered(self, name: str, filters: Mapping[str, Any] | None) -> SchemaQuery:
        query = self.use(name)
        if filters:
            query.where(filters)
        return query

    async def get(
        self, name: str, filters: Mapping[str, Any] | None = None
    ) -> list[DocumentData]:
        return await self._filtered(name, filters).get()

    async def get_one(
        self, name: str, filters: Mapping[str, Any] | None = None
    ) -> DocumentData | None:
        return await self._filtered(name, filters).get_one()

    async def add(self, name: str, data: Mapping[str, Any]) -> str:
        return await self.use(name).add(data)

    async def update(
        self, name: str, filters: Mapping[str, Any], data: Mapping[str, Any]
    ) -> int:
        return await self._filtered(name, filters).to(data).update()

    async def delete(self, name: str, filters: Mapping[str, Any]) -> int:
        return await self._filtered(name, filters).delete()

    def table(self, name: str) -> TableSchema:
        return TableSchema(self.connections, name)

    def raw(self, statement: str) -> Executor:
        return Executor(self.connections, statement)

    def migrations(
        self, connection: str = DEFAULT_CONNECTION_NAME
    ) -> MigrationManager:
        """Version tracker bound to a connection's adapter.

        Raises:
            MigrationError: If the connection is not registered
            AdapterMissingError: If no adapter is attached to it
        """
        name, dialect = resolve_target(self.connections, connection)
        adapter = self.connections.get_adapter(name)
        if adapter is None:
            raise AdapterMissingError(name)
        return MigrationManager(adapter, dialect)

    async def close(self) -> None:
        """Close every attached adapter."""
        await self.connections.close_all()
