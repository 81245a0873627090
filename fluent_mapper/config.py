"""Configuration management for fluent_mapper."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import DEFAULT_CONNECTION_NAME
from .types import Environment


class Settings(BaseModel):
    """Application settings."""

    # Environment
    version: str = Field(default="0.1.0", description="Library version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")
    echo_statements: bool = Field(
        default=False, description="Log every statement sent to a backend"
    )

    # Bootstrap connection
    database_url: str | None = Field(
        default=None, description="URL of the connection registered at startup"
    )
    default_connection: str = Field(
        default=DEFAULT_CONNECTION_NAME,
        description="Name given to the bootstrap connection",
    )

    # Adapter settings
    api_timeout: float = Field(
        default=30.0, description="Timeout in seconds for HTTP adapter requests"
    )
    sqlite_timeout: float = Field(
        default=60.0, description="SQLite busy timeout in seconds"
    )
    strict_adapters: bool = Field(
        default=False,
        description="Raise instead of logging when an adapter cannot be attached",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ["true", "1", "yes", "on"]


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    return Settings(
        environment=Environment(os.getenv("FLUENT_MAPPER_ENV", "development")),
        log_level=os.getenv("FLUENT_MAPPER_LOG_LEVEL", "INFO").upper(),
        log_dir=Path(os.getenv("FLUENT_MAPPER_LOG_DIR", "logs")),
        echo_statements=_env_flag("FLUENT_MAPPER_ECHO_STATEMENTS"),
        database_url=os.getenv("DATABASE_URL") or None,
        default_connection=os.getenv(
            "FLUENT_MAPPER_DEFAULT_CONNECTION", DEFAULT_CONNECTION_NAME
        ),
        api_timeout=float(os.getenv("FLUENT_MAPPER_API_TIMEOUT", "30.0")),
        sqlite_timeout=float(os.getenv("FLUENT_MAPPER_SQLITE_TIMEOUT", "60.0")),
        strict_adapters=_env_flag("FLUENT_MAPPER_STRICT_ADAPTERS"),
    )


# Global settings instance
settings = load_settings()
