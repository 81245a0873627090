"""Raw statement execution against a named connection."""

from typing import Any

from fluent_mapper.constants import DEFAULT_CONNECTION_NAME
from fluent_mapper.exceptions import (
    AdapterMissingError,
    ConnectionUnknownError,
    UnsupportedOperationError,
)
from fluent_mapper.log import get_logger
from fluent_mapper.types import DatabaseParamType

from .connections import Connections

logger = get_logger(__name__)


class Executor:
    """Runs one backend-native statement through a connection's adapter.

    Example:
        >>> executor = Executor(connections, "SELECT * FROM users WHERE id = ?")
        >>> rows = await executor.bind([1]).execute()
    """

    def __init__(
        self,
        connections: Connections,
        statement: str,
        connection: str = DEFAULT_CONNECTION_NAME,
    ) -> None:
        self._connections = connections
        self._statement = statement
        self._connection = connection
        self._params: DatabaseParamType = None

    def bind(self, params: Any) -> "Executor":
        """Set statement parameters; a scalar becomes a one-item list."""
        if params is None or isinstance(params, (dict, list, tuple)):
            self._params = params
        else:
            self._params = [params]
        return self

    def use_connection(self, name: str) -> "Executor":
        self._connection = name
        return self

    async def execute(self) -> Any:
        """Execute the statement.

        Raises:
            ConnectionUnknownError: If the connection is not registered
            AdapterMissingError: If no adapter is attached to it
            UnsupportedOperationError: If the adapter cannot run raw statements
        """
        name = self._connections.resolve_name(self._connection)
        if self._connections.get(name) is None:
            raise ConnectionUnknownError("execute", name)
        adapter = self._connections.get_adapter(name)
        if adapter is None:
            raise AdapterMissingError(name)
        if not adapter.supports_raw:
            raise UnsupportedOperationError(adapter.name, "raw")
        logger.debug(f"Executing raw statement on '{name}'")
        return await adapter.raw(self._statement, self._params)
