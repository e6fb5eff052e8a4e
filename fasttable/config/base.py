"""
Base configuration module for fasttable.

This module provides the base settings class that other settings classes inherit from.
It handles application identity, database connection, logging and the defaults
used when translating table requests into queries.
"""

from typing import Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings


class BaseAppSettings(BaseSettings):
    """
    Base settings class for application configuration.

    This class provides the foundation for all environment-specific settings classes.
    It includes basic settings that are common across all environments.

    Attributes:
        APP_NAME: The name of the application
        DEBUG: Flag to enable/disable debug mode
        VERSION: Application version string
        DATABASE_URL: Async database connection URL
        DB_ECHO: Enable SQL query logging (echo)
        DB_POOL_SIZE: Connection pool size for the database
        LOG_LEVEL: Logging level used when DEBUG is off
        LOG_JSON_FORMAT: Emit log records as JSON
        DATATABLES_DEFAULT_SORT_FIELD: Field sorted descending when a request has no order
        DATATABLES_COUNT_FILTERED: Compute recordsFiltered from the search/column filters
    """

    APP_NAME: str = Field(default="fasttable")
    DEBUG: bool = Field(default=False)
    VERSION: str = Field(default="0.1.0")

    # Database configuration
    DATABASE_URL: Optional[str] = Field(
        default=None, description="Database connection URL"
    )
    DB_ECHO: bool = Field(default=False, description="Enable SQL query logging (echo)")
    DB_POOL_SIZE: int = Field(
        default=5, description="Connection pool size for the database"
    )

    # Logging configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON_FORMAT: bool = Field(
        default=False, description="Emit log records as JSON"
    )

    # Table query configuration
    DATATABLES_DEFAULT_SORT_FIELD: str = Field(
        default="id",
        description="Field sorted descending when the request carries no order",
    )
    DATATABLES_COUNT_FILTERED: bool = Field(
        default=False,
        description=(
            "Count rows matching the search and column filters for recordsFiltered. "
            "When false, recordsFiltered mirrors recordsTotal."
        ),
    )

    @field_validator("DATABASE_URL", mode="before")
    def validate_database_url(cls, value):
        """
        Ensure DATABASE_URL uses an async driver.
        """
        if value and value.startswith("postgresql://"):
            raise ValueError(
                "DATABASE_URL must start with 'postgresql+asyncpg://' for asyncpg driver. "
                "You provided a URL starting with 'postgresql://', which will cause psycopg2 errors. "
                "Please update your DATABASE_URL to use the correct format."
            )
        if value and value.startswith("sqlite://"):
            raise ValueError(
                "DATABASE_URL must start with 'sqlite+aiosqlite://' for SQLite. "
                f"You provided: {value}"
            )
        return value

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, value):
        """Upper-case the level name and reject unknown levels."""
        level = str(value).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL: {value}")
        return level

    @field_validator("DATATABLES_DEFAULT_SORT_FIELD")
    def require_sort_field(cls, value):
        if not value.strip():
            raise ValueError("DATATABLES_DEFAULT_SORT_FIELD must not be empty")
        return value.strip()

    model_config = ConfigDict(env_file=".env", case_sensitive=True)
