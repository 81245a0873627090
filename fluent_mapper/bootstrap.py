"""Mapper construction from settings."""

from fluent_mapper.config import Settings, settings
from fluent_mapper.database.factory import infer_connection_type
from fluent_mapper.log import configure_logging, get_logger
from fluent_mapper.mapper import Mapper
from fluent_mapper.types import ConnectionType

logger = get_logger(__name__)


def create_mapper(
    config: Settings | None = None, configure_logs: bool = True
) -> Mapper:
    """Create a mapper, connecting ``DATABASE_URL`` when it is set.

    Args:
        config: Settings to use; defaults to the environment settings
        configure_logs: Set up package logging from the same settings

    Returns:
        Configured mapper
    """
    config = config or settings
    if configure_logs:
        configure_logging(config)
    mapper = Mapper()

    if config.database_url:
        try:
            connection_type = infer_connection_type(config.database_url)
        except ValueError:
            logger.warning(
                f"Cannot infer connection type of {config.database_url}; "
                "assuming sqlite"
            )
            connection_type = ConnectionType.SQLITE
        mapper.connect(
            config.default_connection,
            connection_type,
            {"url": config.database_url},
        )
        mapper.connections.set_default(config.default_connection)

    return mapper


# Global instance for easy access
_default_mapper: Mapper | None = None


def get_default_mapper() -> Mapper:
    """Get the global mapper instance."""
    global _default_mapper
    if _default_mapper is None:
        _default_mapper = create_mapper()
    return _default_mapper


async def close_default_mapper() -> None:
    """Close the global mapper."""
    global _default_mapper
    if _default_mapper is not None:
        await _default_mapper.close()
        _default_mapper = None
