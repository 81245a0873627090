"""Backend adapter interface."""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

from pydantic import BaseModel, Field

from fluent_mapper.exceptions import UnsupportedOperationError
from fluent_mapper.log import get_logger
from fluent_mapper.types import DatabaseParamType, DocumentData, SortDirection

logger = get_logger(__name__)


class Filter(BaseModel):
    """One structured predicate: ``field operator value``."""

    field: str = Field(..., description="Field the predicate applies to")
    operator: str = Field(default="=", description="Comparison operator")
    value: Any = Field(default=None, description="Right-hand side value")


class SortBy(BaseModel):
    """Result ordering."""

    field: str = Field(..., description="Field to sort on")
    direction: SortDirection = Field(
        default=SortDirection.ASC, description="Sort direction"
    )


class QueryOptions(BaseModel):
    """Normalized read request handed to an adapter.

    When ``raw_where`` is set, every adapter shipped with fluent_mapper uses
    it and ignores ``filters``. Third-party adapters must document the
    precedence they apply.
    """

    collection_name: str = Field(..., description="Physical collection name")
    filters: list[Filter] = Field(
        default_factory=list, description="Structured predicates (AND)"
    )
    raw_where: str | None = Field(default=None, description="Raw backend predicate")
    limit: int | None = Field(default=None, description="Maximum documents")
    offset: int | None = Field(default=None, description="Documents to skip")
    sort_by: SortBy | None = Field(default=None, description="Result ordering")
    fields: list[str] = Field(
        default_factory=list, description="Projection; empty means all fields"
    )


class DatabaseAdapter(ABC):
    """Uniform storage contract implemented by every backend.

    Subclasses must implement the three write operations and at least one
    of ``get`` / ``get_documents``; each defaults to the other. The
    remaining operations are optional: ``get_one`` falls back to ``get``,
    while ``raw`` and the transaction methods raise
    ``UnsupportedOperationError`` unless overridden. ``Connections`` checks
    the read operations once, when the adapter is attached.
    """

    supports_raw: bool = False
    supports_transactions: bool = False

    @property
    def name(self) -> str:
        """Adapter name used in logs and errors."""
        return type(self).__name__

    async def get(self, options: QueryOptions) -> list[DocumentData]:
        """Fetch documents matching the options.

        Args:
            options: Normalized query options

        Returns:
            List of documents
        """
        return await self.get_documents(options)

    async def get_documents(self, options: QueryOptions) -> list[DocumentData]:
        """Legacy alias of get()."""
        return await self.get(options)

    async def get_one(self, options: QueryOptions) -> DocumentData | None:
        """Fetch the first document matching the options.

        Args:
            options: Normalized query options

        Returns:
            First document or None
        """
        results = await self.get(options.model_copy(update={"limit": 1}))
        return results[0] if results else None

    @abstractmethod
    async def add_document(self, collection_name: str, data: DocumentData) -> str:
        """Insert a document.

        Args:
            collection_name: Target collection
            data: Document to insert

        Returns:
            Identifier usable with update_document/delete_document
        """
        pass

    @abstractmethod
    async def update_document(
        self, collection_name: str, doc_id: str, data: DocumentData
    ) -> None:
        """Update a document by identifier.

        Args:
            collection_name: Target collection
            doc_id: Document identifier
            data: Fields to update
        """
        pass

    @abstractmethod
    async def delete_document(self, collection_name: str, doc_id: str) -> None:
        """Delete a document by identifier.

        Args:
            collection_name: Target collection
            doc_id: Document identifier
        """
        pass

    async def raw(
        self,
        statement: str,
        params: DatabaseParamType = None,
        transaction: Any = None,
    ) -> Any:
        """Execute a backend-native statement.

        Args:
            statement: Statement in the backend's own language
            params: Statement parameters
            transaction: Handle from begin_transaction()

        Returns:
            Backend-specific result
        """
        raise UnsupportedOperationError(self.name, "raw")

    async def begin_transaction(self) -> Any:
        """Begin a transaction and return its handle."""
        raise UnsupportedOperationError(self.name, "begin_transaction")

    async def commit_transaction(self, handle: Any) -> None:
        """Commit the transaction identified by handle."""
        raise UnsupportedOperationError(self.name, "commit_transaction")

    async def rollback_transaction(self, handle: Any) -> None:
        """Roll back the transaction identified by handle."""
        raise UnsupportedOperationError(self.name, "rollback_transaction")

    async def transaction(self) -> "AdapterTransaction":
        """Begin a transaction wrapped for ``async with`` use."""
        if not self.supports_transactions:
            raise UnsupportedOperationError(self.name, "transaction")
        handle = await self.begin_transaction()
        return AdapterTransaction(self, handle)

    async def close(self) -> None:
        """Release backend resources."""
        pass

    async def __aenter__(self) -> "DatabaseAdapter":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


class AdapterTransaction:
    """Transaction handle bound to the adapter that opened it."""

    def __init__(self, adapter: DatabaseAdapter, handle: Any) -> None:
        self.adapter = adapter
        self.handle = handle

    async def raw(self, statement: str, params: DatabaseParamType = None) -> Any:
        """Execute a statement inside this transaction."""
        return await self.adapter.raw(statement, params, transaction=self.handle)

    async def commit(self) -> None:
        """Commit the transaction."""
        await self.adapter.commit_transaction(self.handle)

    async def rollback(self) -> None:
        """Rollback the transaction."""
        await self.adapter.rollback_transaction(self.handle)

    async def __aenter__(self) -> "AdapterTransaction":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            await self.commit()
        else:
            logger.warning(
                f"Rolling back transaction on {self.adapter.name}: {exc_val}"
            )
            await self.rollback()


def overrides_read(adapter: DatabaseAdapter) -> bool:
    """Check that an adapter implements get() or get_documents()."""
    cls = type(adapter)
    return (
        getattr(cls, "get", None) is not DatabaseAdapter.get
        or getattr(cls, "get_documents", None) is not DatabaseAdapter.get_documents
    )
