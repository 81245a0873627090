"""Connection registry and adapter table."""

from dataclasses import dataclass, field
from typing import Any

from fluent_mapper.constants import DEFAULT_CONNECTION_NAME
from fluent_mapper.exceptions import (
    AdapterContractError,
    ConnectionExistingError,
    ConnectionUnknownError,
)
from fluent_mapper.log import get_logger
from fluent_mapper.types import ConnectionType

from .interfaces.adapter import DatabaseAdapter, overrides_read

logger = get_logger(__name__)


@dataclass
class ConnectionConfig:
    """A named backend connection."""

    name: str
    type: ConnectionType
    key: dict[str, Any] = field(default_factory=dict)


class ConnectionBuilder:
    """Second half of ``Connections.create(name, type).key({...})``."""

    def __init__(
        self, manager: "Connections", name: str, connection_type: ConnectionType
    ) -> None:
        self._manager = manager
        self._name = name
        self._type = connection_type

    def key(self, config: dict[str, Any]) -> "Connections":
        """Register the connection with its backend configuration."""
        return self._manager.register(
            ConnectionConfig(name=self._name, type=self._type, key=dict(config))
        )


class Connections:
    """Owns connection configs and the adapters attached to them."""

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionConfig] = {}
        self._adapters: dict[str, DatabaseAdapter] = {}
        self._default_name: str | None = None

    def create(
        self, name: str, connection_type: ConnectionType | str
    ) -> ConnectionBuilder:
        """Start registering a connection.

        Raises:
            ConnectionExistingError: If the name is already registered
        """
        if name in self._connections:
            raise ConnectionExistingError(name)
        return ConnectionBuilder(self, name, ConnectionType(connection_type))

    def register(self, config: ConnectionConfig) -> "Connections":
        """Register a connection config.

        Raises:
            ConnectionExistingError: If the name is already registered
        """
        if config.name in self._connections:
            raise ConnectionExistingError(config.name)
        self._connections[config.name] = config
        logger.info(f"Registered connection '{config.name}' ({config.type.value})")
        return self

    def attach_adapter(self, name: str, adapter: DatabaseAdapter) -> "Connections":
        """Attach the adapter serving a registered connection.

        Raises:
            ConnectionUnknownError: If the connection is not registered
            AdapterContractError: If the adapter cannot serve reads
        """
        if name not in self._connections:
            raise ConnectionUnknownError("attach adapter", name)
        if not isinstance(adapter, DatabaseAdapter):
            raise AdapterContractError(
                type(adapter).__name__, "not a DatabaseAdapter instance"
            )
        if not overrides_read(adapter):
            raise AdapterContractError(
                adapter.name, "implements neither get() nor get_documents()"
            )
        self._adapters[name] = adapter
        logger.info(f"Attached {adapter.name} to connection '{name}'")
        return self

    def detach_adapter(self, name: str) -> DatabaseAdapter | None:
        """Detach and return the adapter of a connection, if any."""
        return self._adapters.pop(name, None)

    def get(self, name: str) -> ConnectionConfig | None:
        return self._connections.get(name)

    def get_adapter(self, name: str | None) -> DatabaseAdapter | None:
        """Get the adapter attached to a connection, or None."""
        if name is None:
            return None
        return self._adapters.get(name)

    def list(self) -> list[ConnectionConfig]:
        return list(self._connections.values())

    def set_default(self, name: str) -> "Connections":
        """Mark a registered connection as the default one.

        Raises:
            ConnectionUnknownError: If the connection is not registered
        """
        if name not in self._connections:
            raise ConnectionUnknownError("set default", name)
        self._default_name = name
        return self

    def default_connection(self) -> ConnectionConfig | None:
        """Resolve the default connection.

        The explicitly marked default wins, then a connection literally
        named "default", then the first registered connection.
        """
        if self._default_name is not None:
            return self._connections[self._default_name]
        if DEFAULT_CONNECTION_NAME in self._connections:
            return self._connections[DEFAULT_CONNECTION_NAME]
        return next(iter(self._connections.values()), None)

    def resolve_name(self, name: str) -> str:
        """Map the "default" placeholder to the default connection's name."""
        if name == DEFAULT_CONNECTION_NAME:
            default = self.default_connection()
            if default is not None:
                return default.name
        return name

    async def close_all(self) -> None:
        """Close every attached adapter."""
        for name, adapter in list(self._adapters.items()):
            await adapter.close()
            logger.info(f"Closed adapter for connection '{name}'")
