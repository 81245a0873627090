"""Query/mutation builder bound to one registered schema."""

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from fluent_mapper.constants import NOW_SENTINEL, SOFT_DELETE_FIELD
from fluent_mapper.database.interfaces import (
    DatabaseAdapter,
    Filter,
    QueryOptions,
    SortBy,
)
from fluent_mapper.exceptions import (
    AdapterMissingError,
    DocumentMissingIdError,
    SchemaConfigurationError,
    UpdatePayloadMissingError,
)
from fluent_mapper.log import get_logger
from fluent_mapper.types import DeleteType, DocumentData, SortDirection

from .definition import SchemaDef

if TYPE_CHECKING:
    from .registry import SchemaManager

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SchemaQuery:
    """Accumulates filters, projection, paging and a pending update.

    Chainable methods mutate the builder and return it. Terminal methods
    (get, get_one, add, update, update_one, delete, delete_one) perform I/O
    with whatever state has accumulated; they never reset it. A builder is
    meant for a single operation chain and is not safe to share between
    concurrent tasks. Every ``SchemaManager.use()`` call returns a new one.
    """

    def __init__(self, manager: "SchemaManager", definition: SchemaDef) -> None:
        self._manager = manager
        self._definition = definition
        self._filters: list[Filter] = []
        self._raw_where: str | None = None
        self._pending_update: DocumentData | None = None
        self._limit: int | None = None
        self._offset: int | None = None
        self._sort_by: SortBy | None = None
        self._fields: list[str] = []
        self._adapter: DatabaseAdapter | None = None

    @property
    def definition(self) -> SchemaDef:
        return self._definition

    # Accumulators

    def where(
        self,
        field: str | Mapping[str, Any],
        value: Any = None,
        operator: str = "=",
    ) -> "SchemaQuery":
        """Append a predicate; all predicates are ANDed.

        Args:
            field: Field name, or a mapping of field -> value equalities
            value: Value to compare against
            operator: One of = > < >= <= != LIKE IN

        Returns:
            This builder
        """
        if isinstance(field, Mapping):
            for name, item in field.items():
                self._filters.append(Filter(field=name, operator="=", value=item))
            return self

        self._filters.append(
            Filter(field=field, operator=operator.strip().upper(), value=value)
        )
        return self

    def where_complex(self, raw: str) -> "SchemaQuery":
        """Set a backend-native predicate.

        Structured filters stay stored; adapters decide precedence and the
        bundled ones prefer the raw predicate.
        """
        self._raw_where = raw
        return self

    def limit(self, n: int) -> "SchemaQuery":
        self._limit = n
        return self

    def offset(self, n: int) -> "SchemaQuery":
        self._offset = n
        return self

    def order_by(
        self, field: str, direction: SortDirection | str = SortDirection.ASC
    ) -> "SchemaQuery":
        self._sort_by = SortBy(
            field=field, direction=SortDirection(direction.lower())
        )
        return self

    def select_fields(self, fields: Sequence[str]) -> "SchemaQuery":
        """Replace the projection; an empty list selects everything."""
        self._fields = list(fields)
        return self

    def set(self, data: Mapping[str, Any]) -> "SchemaQuery":
        """Store the pending update payload, replacing any previous one."""
        self._pending_update = dict(data)
        return self

    def to(self, data: Mapping[str, Any]) -> "SchemaQuery":
        """Alias of set()."""
        return self.set(data)

    # Internals

    def _resolve_adapter(self) -> DatabaseAdapter:
        if self._adapter is not None:
            return self._adapter
        connection_name = self._definition.connection_name
        adapter = self._manager.get_adapter(connection_name)
        if adapter is None:
            raise AdapterMissingError(connection_name or "<unbound>")
        self._adapter = adapter
        return adapter

    def _collection(self) -> str:
        collection_name = self._definition.collection_name
        if not collection_name:
            raise SchemaConfigurationError(
                f"Schema '{self._definition.name}' has no collection bound."
            )
        return collection_name

    def _build_options(self) -> QueryOptions:
        return QueryOptions(
            collection_name=self._collection(),
            filters=list(self._filters),
            raw_where=self._raw_where,
            limit=self._limit,
            offset=self._offset,
            sort_by=self._sort_by,
            fields=list(self._fields),
        )

    def _is_unscoped(self) -> bool:
        return not self._filters and self._raw_where is None and self._limit is None

    def _allowlist(
        self, data: Mapping[str, Any], allowed: list[str] | None
    ) -> DocumentData:
        if allowed is not None:
            keep = set(allowed)
            return {k: v for k, v in data.items() if k in keep}
        if not self._definition.allow_undefined_fields:
            fields_map = self._definition.fields_map
            return {k: v for k, v in data.items() if k in fields_map}
        return dict(data)

    def _apply_defaults(self, data: DocumentData) -> DocumentData:
        for field in self._definition.fields:
            if field.name not in data and field.has_default:
                if field.default_value == NOW_SENTINEL:
                    data[field.name] = _now()
                else:
                    data[field.name] = field.default_value
        return data

    # Terminal operations

    async def get(self) -> list[DocumentData]:
        """Fetch every document matching the accumulated state."""
        adapter = self._resolve_adapter()
        options = self._build_options()
        logger.debug(f"get {options.collection_name} via {adapter.name}")
        return await adapter.get(options)

    async def get_one(self) -> DocumentData | None:
        """Fetch the first matching document; always requests limit=1."""
        adapter = self._resolve_adapter()
        options = self._build_options()
        options.limit = 1
        logger.debug(f"get_one {options.collection_name} via {adapter.name}")
        return await adapter.get_one(options)

    async def add(self, data: Mapping[str, Any]) -> str:
        """Insert a document after applying the insert allowlist and defaults.

        Args:
            data: Document to insert

        Returns:
            Identifier of the new document
        """
        adapter = self._resolve_adapter()
        collection_name = self._collection()
        payload = self._allowlist(data, self._definition.insertable_fields)
        payload = self._apply_defaults(payload)
        logger.debug(f"add to {collection_name}: {sorted(payload)}")
        doc_id = await adapter.add_document(collection_name, payload)
        return str(doc_id)

    async def insert(self, data: Mapping[str, Any]) -> str:
        """Alias of add()."""
        return await self.add(data)

    async def update(self, data: Mapping[str, Any] | None = None) -> int:
        """Update every matching document.

        Args:
            data: Payload; replaces anything given to set()/to()

        Returns:
            Number of documents updated

        Raises:
            UpdatePayloadMissingError: If no payload was ever provided
            DocumentMissingIdError: If a matched document has no 'id'
        """
        if data is not None:
            self.set(data)
        if self._pending_update is None:
            raise UpdatePayloadMissingError()

        payload = self._allowlist(
            self._pending_update, self._definition.updatable_fields
        )
        return await self._update_matches(payload, "update")

    async def update_one(self, data: Mapping[str, Any] | None = None) -> int:
        """Update at most one matching document."""
        self._limit = 1
        return await self.update(data)

    async def delete(self) -> int:
        """Delete matching documents, or stamp them for soft-delete schemas.

        Returns:
            Number of documents deleted or stamped

        Raises:
            DocumentMissingIdError: If a matched document has no 'id'
        """
        if not self._definition.mass_delete_allowed and self._is_unscoped():
            self._limit = 1

        if self._definition.delete_type == DeleteType.SOFT_DELETE:
            stamp = {SOFT_DELETE_FIELD: _now()}
            self.set(stamp)
            # The stamp bypasses the update allowlist
            return await self._update_matches(stamp, "delete")

        adapter = self._resolve_adapter()
        collection_name = self._collection()
        docs = await self.get()
        for doc in docs:
            doc_id = doc.get("id")
            if doc_id is None:
                raise DocumentMissingIdError("delete")
            await adapter.delete_document(collection_name, str(doc_id))
        logger.debug(f"Deleted {len(docs)} documents from {collection_name}")
        return len(docs)

    async def delete_one(self) -> int:
        """Delete at most one matching document."""
        self._limit = 1
        return await self.delete()

    async def _update_matches(self, payload: DocumentData, operation: str) -> int:
        if not self._definition.mass_edit_allowed and self._is_unscoped():
            self._limit = 1

        adapter = self._resolve_adapter()
        collection_name = self._collection()
        docs = await self.get()
        for doc in docs:
            doc_id = doc.get("id")
            if doc_id is None:
                raise DocumentMissingIdError(operation)
            await adapter.update_document(collection_name, str(doc_id), payload)
        logger.debug(f"Updated {len(docs)} documents in {collection_name}")
        return len(docs)
