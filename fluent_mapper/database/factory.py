"""Adapter factory."""

from typing import Any

from sqlalchemy.engine import URL, make_url

from fluent_mapper.config import settings
from fluent_mapper.log import get_logger
from fluent_mapper.types import ConnectionType

from .connections import Connections
from .implementations import (
    APIAdapter,
    MongoDBAdapter,
    SQLAlchemyAdapter,
    SQLiteAdapter,
)
from .interfaces import DatabaseAdapter

logger = get_logger(__name__)

SQL_DRIVERS = {
    ConnectionType.MYSQL: "mysql+pymysql",
    ConnectionType.POSTGRES: "postgresql+psycopg",
    ConnectionType.SQL: "postgresql+psycopg",
}

DEFAULT_PORTS = {
    ConnectionType.MYSQL: 3306,
    ConnectionType.POSTGRES: 5432,
    ConnectionType.SQL: 5432,
}

URL_SCHEMES = {
    "mysql": ConnectionType.MYSQL,
    "postgres": ConnectionType.POSTGRES,
    "postgresql": ConnectionType.POSTGRES,
    "mongodb": ConnectionType.MONGODB,
    "mongodb+srv": ConnectionType.MONGODB,
    "http": ConnectionType.API,
    "https": ConnectionType.API,
    "sqlite": ConnectionType.SQLITE,
    "sqlite3": ConnectionType.SQLITE,
}

SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


def infer_connection_type(url: str) -> ConnectionType:
    """Infer the connection type from a URL or a SQLite file path.

    Raises:
        ValueError: If the scheme is not supported
    """
    if url.endswith(SQLITE_SUFFIXES) and "://" not in url:
        return ConnectionType.SQLITE
    scheme = url.split("://", 1)[0].split("+", 1)[0].lower()
    if scheme not in URL_SCHEMES:
        raise ValueError(f"Unsupported protocol: {scheme}")
    return URL_SCHEMES[scheme]


def _sql_url(url: str, connection_type: ConnectionType) -> str:
    parsed = make_url(url)
    if "+" not in parsed.drivername:
        parsed = parsed.set(drivername=SQL_DRIVERS[connection_type])
    return parsed.render_as_string(hide_password=False)


def create_adapter(
    connection_type: ConnectionType | str, config: dict[str, Any]
) -> DatabaseAdapter:
    """Create an adapter from a connection type and its key config.

    Args:
        connection_type: Kind of backend
        config: Backend configuration (the connection's ``key``)

    Returns:
        Adapter instance

    Raises:
        ValueError: If the type has no bundled adapter
    """
    connection_type = ConnectionType(connection_type)

    if connection_type == ConnectionType.SQLITE:
        filename = config.get("filename") or config.get("database", ":memory:")
        return SQLiteAdapter(
            filename, timeout=float(config.get("timeout", settings.sqlite_timeout))
        )

    if connection_type in SQL_DRIVERS:
        url = URL.create(
            SQL_DRIVERS[connection_type],
            username=config.get("user"),
            password=config.get("password"),
            host=config.get("host", "localhost"),
            port=int(config.get("port", DEFAULT_PORTS[connection_type])),
            database=config.get("database"),
        )
        return SQLAlchemyAdapter(url.render_as_string(hide_password=False))

    if connection_type == ConnectionType.MONGODB:
        return MongoDBAdapter(
            uri=config.get("uri", "mongodb://localhost:27017"),
            database=config.get("database", "fluent_mapper"),
        )

    if connection_type == ConnectionType.API:
        return APIAdapter(
            base_url=config["base_url"],
            headers=config.get("headers"),
            timeout=float(config.get("timeout", settings.api_timeout)),
            endpoints=config.get("endpoints"),
            query_params=config.get("query_params"),
        )

    raise ValueError(f"No adapter available for connection type: {connection_type}")


def create_adapter_from_url(url: str) -> DatabaseAdapter:
    """Create an adapter from a connection URL.

    Bare paths ending in ``.db``/``.sqlite`` open a SQLite file.
    """
    connection_type = infer_connection_type(url)

    if connection_type == ConnectionType.SQLITE:
        path = url.split("://", 1)[1] if "://" in url else url
        # sqlite:///relative.db and sqlite:////abs.db, as SQLAlchemy reads them
        if path.startswith("/") and "://" in url:
            path = path[1:]
        return SQLiteAdapter(path or ":memory:", timeout=settings.sqlite_timeout)

    if connection_type in SQL_DRIVERS:
        return SQLAlchemyAdapter(_sql_url(url, connection_type))

    if connection_type == ConnectionType.MONGODB:
        database = make_url(url).database or "fluent_mapper"
        return MongoDBAdapter(uri=url, database=database.split("?", 1)[0])

    return APIAdapter(base_url=url, timeout=settings.api_timeout)


def auto_attach_adapter(
    connections: Connections,
    name: str,
    connection_type: ConnectionType | str,
    key: dict[str, Any],
    strict: bool | None = None,
) -> DatabaseAdapter | None:
    """Create and attach the adapter for a registered connection.

    A ``url`` entry in the key takes priority over the other settings.
    Failures are logged and swallowed unless strict mode is on.

    Returns:
        The attached adapter, or None when creation failed
    """
    strict = settings.strict_adapters if strict is None else strict
    try:
        if key.get("url"):
            adapter = create_adapter_from_url(key["url"])
        else:
            adapter = create_adapter(connection_type, key)
        connections.attach_adapter(name, adapter)
        return adapter
    except Exception as e:
        if strict:
            raise
        logger.warning(f"Failed to auto-attach adapter for '{name}': {e}")
        return None
