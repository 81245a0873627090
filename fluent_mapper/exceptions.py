"""Exceptions raised by fluent_mapper.

Every error carries a machine-readable ``code`` and, where useful, a
``hint`` telling the caller how to fix the problem.
"""


class MapperError(Exception):
    """Base exception for mapper errors."""

    def __init__(self, message: str, code: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint


class AdapterMissingError(MapperError):
    """Raised when a connection has no adapter attached."""

    def __init__(self, connection_name: str) -> None:
        super().__init__(
            f"No adapter attached for connection '{connection_name}'.",
            "ADAPTER_MISSING",
            f"Ensure you have registered an adapter for '{connection_name}' "
            "with 'Connections.attach_adapter(...)' or 'Mapper.connect(...)'.",
        )
        self.connection_name = connection_name


class UpdatePayloadMissingError(MapperError):
    """Raised when update() runs without any payload."""

    def __init__(self) -> None:
        super().__init__(
            "No update payload set for the query.",
            "UPDATE_PAYLOAD_MISSING",
            "Call '.set({...})' or '.to({...})' with the data to update, or pass "
            "it to '.update(...)' / '.update_one(...)' directly.",
        )


class DocumentMissingIdError(MapperError):
    """Raised when a fetched document has no 'id' during update/delete."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Document is missing its 'id' field, which is required for "
            f"'{operation}'.",
            "DOCUMENT_MISSING_ID",
            f"Ensure the documents you {operation} have an 'id' property. If you "
            "restricted the projection, make sure 'id' is included in the fields.",
        )
        self.operation = operation


class ConnectionExistingError(MapperError):
    """Raised when a connection name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Connection with name '{name}' already exists.",
            "CONNECTION_EXISTS",
            "Use a unique name for each connection or check if you are "
            "registering the same connection twice.",
        )
        self.name = name


class ConnectionUnknownError(MapperError):
    """Raised when an operation references an unregistered connection."""

    def __init__(self, method: str, name: str) -> None:
        super().__init__(
            f"Cannot {method}: unknown connection '{name}'.",
            "CONNECTION_UNKNOWN",
            f"Check that the connection '{name}' has been created with "
            "'Connections.create(...)' or 'Mapper.connect(...)'.",
        )
        self.name = name


class SchemaExistingError(MapperError):
    """Raised when a schema name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Schema with name '{name}' already exists.",
            "SCHEMA_EXISTS",
            "Use a unique name for each schema, or drop the existing one first.",
        )
        self.name = name


class SchemaMissingError(MapperError):
    """Raised when a schema name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unknown schema '{name}'.",
            "SCHEMA_UNKNOWN",
            f"The schema '{name}' is not registered. Define it with "
            f"'SchemaManager.create(\"{name}\")' before using it.",
        )
        self.name = name


class SchemaConfigurationError(MapperError):
    """Raised for structural schema misconfiguration."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            "SCHEMA_CONFIG_ERROR",
            "Ensure 'connection' and 'collection' are set with "
            "'.use(connection=..., collection=...)' before defining structure.",
        )


class UnsupportedOperationError(MapperError):
    """Raised when an adapter cannot perform an optional operation."""

    def __init__(self, adapter: str, operation: str) -> None:
        super().__init__(
            f"Adapter '{adapter}' does not support '{operation}'.",
            "UNSUPPORTED_OPERATION",
            "Use a backend whose adapter implements this operation.",
        )
        self.adapter = adapter
        self.operation = operation


class AdapterContractError(MapperError):
    """Raised when an adapter does not satisfy the adapter contract."""

    def __init__(self, adapter: str, reason: str) -> None:
        super().__init__(
            f"Adapter '{adapter}' violates the adapter contract: {reason}",
            "ADAPTER_CONTRACT",
            "Subclass DatabaseAdapter and implement get() or get_documents().",
        )
        self.adapter = adapter


class AdapterRequestError(MapperError):
    """Raised when a remote backend request fails."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            "ADAPTER_REQUEST",
            "Check that the backend is reachable and the request is valid.",
        )


class InvalidRawPredicateError(MapperError):
    """Raised when a raw predicate cannot be interpreted by the backend."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(
            f"Invalid raw predicate {raw!r}: {reason}",
            "INVALID_RAW_PREDICATE",
            "Document-store predicates passed to where_complex() must be JSON.",
        )
        self.raw = raw


class MigrationError(MapperError):
    """Raised for migration builder misuse."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            "MIGRATION_ERROR",
            "Check the table name and the connection used by the migration.",
        )
