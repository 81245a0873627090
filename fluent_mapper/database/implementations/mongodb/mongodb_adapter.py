"""MongoDB adapter built on motor."""

import json
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from fluent_mapper.database.interfaces import DatabaseAdapter, QueryOptions
from fluent_mapper.database.utils import like_to_regex, normalize_operator
from fluent_mapper.exceptions import InvalidRawPredicateError
from fluent_mapper.log import get_logger, log_statement
from fluent_mapper.types import DatabaseParamType, DocumentData, SortDirection

logger = get_logger(__name__)

MONGO_OPERATORS = {
    ">": "$gt",
    "<": "$lt",
    ">=": "$gte",
    "<=": "$lte",
    "!=": "$ne",
}


def _normalize_document(doc: dict[str, Any]) -> DocumentData:
    """Stringify ``_id`` and mirror it into ``id`` when absent."""
    result = dict(doc)
    if "_id" in result:
        result["_id"] = str(result["_id"])
        result.setdefault("id", result["_id"])
    return result


def build_mongo_filter(options: QueryOptions) -> dict[str, Any]:
    """Translate query options into a MongoDB filter document.

    Raises:
        InvalidRawPredicateError: If the raw predicate is not a JSON object
    """
    if options.raw_where:
        try:
            parsed = json.loads(options.raw_where)
        except json.JSONDecodeError as e:
            raise InvalidRawPredicateError(options.raw_where, str(e)) from e
        if not isinstance(parsed, dict):
            raise InvalidRawPredicateError(options.raw_where, "not a JSON object")
        return parsed

    clauses: list[dict[str, Any]] = []
    for item in options.filters:
        op = normalize_operator(item.operator)
        if op == "=":
            condition: Any = item.value
        elif op == "IN":
            values = (
                item.value if isinstance(item.value, (list, tuple)) else [item.value]
            )
            condition = {"$in": list(values)}
        elif op == "LIKE":
            condition = {"$regex": like_to_regex(str(item.value)), "$options": "i"}
        else:
            condition = {MONGO_OPERATORS[op]: item.value}

        clauses.append({item.field: condition})

    # A repeated field cannot share one key, so every clause goes under $and
    fields = [item.field for item in options.filters]
    if len(set(fields)) < len(fields):
        return {"$and": clauses}
    query: dict[str, Any] = {}
    for clause in clauses:
        query.update(clause)
    return query


def _id_filter(doc_id: str) -> dict[str, Any]:
    if ObjectId.is_valid(doc_id):
        return {"_id": ObjectId(doc_id)}
    return {"$or": [{"_id": doc_id}, {"id": doc_id}]}


class MongoDBAdapter(DatabaseAdapter):
    """MongoDB adapter.

    The motor client is created lazily; creating it does not open a socket.
    """

    supports_raw = True

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        database: str = "fluent_mapper",
        client: AsyncIOMotorClient | None = None,
        max_pool_size: int = 10,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        """Initialize MongoDB adapter.

        Args:
            uri: MongoDB connection string
            database: Database name
            client: Existing motor (or compatible) client to reuse
            max_pool_size: Connection pool size
            server_selection_timeout_ms: Server selection timeout
        """
        self.uri = uri
        self.database = database
        self.max_pool_size = max_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client = client

    @property
    def db(self) -> AsyncIOMotorDatabase:
        if self._client is None:
            self._client = AsyncIOMotorClient(
                self.uri,
                maxPoolSize=self.max_pool_size,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
            )
            logger.info(f"Created MongoDB client for database '{self.database}'")
        return self._client[self.database]

    async def get(self, options: QueryOptions) -> list[DocumentData]:
        collection = self.db[options.collection_name]
        query = build_mongo_filter(options)
        projection = {field: 1 for field in options.fields} or None

        cursor = collection.find(query, projection)
        if options.sort_by is not None:
            direction = -1 if options.sort_by.direction == SortDirection.DESC else 1
            cursor = cursor.sort(options.sort_by.field, direction)
        if options.offset is not None:
            cursor = cursor.skip(options.offset)
        if options.limit is not None:
            cursor = cursor.limit(options.limit)

        docs = await cursor.to_list(length=None)
        return [_normalize_document(doc) for doc in docs]

    async def add_document(self, collection_name: str, data: DocumentData) -> str:
        result = await self.db[collection_name].insert_one(dict(data))
        return str(result.inserted_id)

    async def update_document(
        self, collection_name: str, doc_id: str, data: DocumentData
    ) -> None:
        await self.db[collection_name].update_one(_id_filter(doc_id), {"$set": data})

    async def delete_document(self, collection_name: str, doc_id: str) -> None:
        await self.db[collection_name].delete_one(_id_filter(doc_id))

    async def raw(
        self,
        statement: str,
        params: DatabaseParamType = None,
        transaction: Any = None,
    ) -> Any:
        """Run a database command given as a JSON document.

        Raises:
            InvalidRawPredicateError: If the statement is not a JSON object
        """
        try:
            command = json.loads(statement)
        except json.JSONDecodeError as e:
            raise InvalidRawPredicateError(statement, str(e)) from e
        if not isinstance(command, dict):
            raise InvalidRawPredicateError(statement, "not a JSON object")
        log_statement(statement, source="mongodb")
        return await self.db.command(command)

    async def aggregate(
        self, collection_name: str, pipeline: list[dict[str, Any]]
    ) -> list[DocumentData]:
        """Run an aggregation pipeline."""
        cursor = self.db[collection_name].aggregate(pipeline)
        docs = await cursor.to_list(length=None)
        return [_normalize_document(doc) for doc in docs]

    async def create_index(
        self, collection_name: str, keys: Any, **kwargs: Any
    ) -> str:
        """Create an index and return its name."""
        return await self.db[collection_name].create_index(keys, **kwargs)

    async def close(self) -> None:
        """Close the client (motor's close() is synchronous)."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Closed MongoDB client")
