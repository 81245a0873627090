"""Global pytest configuration and fixtures."""

import operator
from collections.abc import AsyncGenerator
from logging import Logger
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from fluent_mapper import setup_test_logging
from fluent_mapper.database import Connections, DatabaseAdapter, QueryOptions
from fluent_mapper.database.implementations import SQLiteAdapter
from fluent_mapper.schema import SchemaManager
from fluent_mapper.types import ConnectionType, DocumentData

_COMPARE = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "IN": lambda left, right: left in right,
}


class MemoryAdapter(DatabaseAdapter):
    """List-backed adapter recording every call it receives."""

    def __init__(self) -> None:
        self.collections: dict[str, list[DocumentData]] = {}
        self.calls: list[tuple[Any, ...]] = []
        self._next_id = 1

    def seed(self, collection_name: str, docs: list[DocumentData]) -> None:
        self.collections.setdefault(collection_name, []).extend(
            dict(doc) for doc in docs
        )

    async def get(self, options: QueryOptions) -> list[DocumentData]:
        self.calls.append(("get", options))
        docs = [
            doc
            for doc in self.collections.get(options.collection_name, [])
            if all(
                f.field in doc and _COMPARE[f.operator](doc[f.field], f.value)
                for f in options.filters
            )
        ]
        if options.offset:
            docs = docs[options.offset :]
        if options.limit is not None:
            docs = docs[: options.limit]
        if options.fields:
            return [{k: d[k] for k in options.fields if k in d} for d in docs]
        return [dict(doc) for doc in docs]

    async def add_document(self, collection_name: str, data: DocumentData) -> str:
        self.calls.append(("add", collection_name, dict(data)))
        doc = dict(data)
        if "id" not in doc:
            doc["id"] = self._next_id
            self._next_id += 1
        self.collections.setdefault(collection_name, []).append(doc)
        return str(doc["id"])

    async def update_document(
        self, collection_name: str, doc_id: str, data: DocumentData
    ) -> None:
        self.calls.append(("update", collection_name, doc_id, dict(data)))
        for doc in self.collections.get(collection_name, []):
            if str(doc.get("id")) == doc_id:
                doc.update(data)

    async def delete_document(self, collection_name: str, doc_id: str) -> None:
        self.calls.append(("delete", collection_name, doc_id))
        self.collections[collection_name] = [
            doc
            for doc in self.collections.get(collection_name, [])
            if str(doc.get("id")) != doc_id
        ]

    def calls_of(self, kind: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    from fluent_mapper import get_logger

    return get_logger("test")


@pytest.fixture
def memory_adapter() -> MemoryAdapter:
    """Provide an empty in-memory adapter."""
    return MemoryAdapter()


@pytest.fixture
def connections(memory_adapter: MemoryAdapter) -> Connections:
    """Provide a registry with the in-memory adapter on 'main'."""
    registry = Connections()
    registry.create("main", ConnectionType.SQLITE).key({"filename": ":memory:"})
    registry.attach_adapter("main", memory_adapter)
    return registry


@pytest.fixture
def schemas(connections: Connections) -> SchemaManager:
    """Provide a schema manager over the test connections."""
    return SchemaManager(connections)


@pytest.fixture
def mock_adapter() -> AsyncMock:
    """Provide a mocked adapter that accepts raw statements."""
    adapter = AsyncMock(spec=DatabaseAdapter)
    adapter.supports_raw = True
    return adapter


@pytest.fixture
async def sqlite_adapter(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """Provide a file-backed SQLite adapter, closed after the test."""
    adapter = SQLiteAdapter(str(tmp_path / "test.db"))
    yield adapter
    await adapter.close()
