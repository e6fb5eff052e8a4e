"""
Configuration module for fasttable.

This module provides:
- BaseAppSettings: The base class for application settings, supporting environment variable loading.
- Environment-specific settings (development, testing, production).
- get_settings: Factory for loading the correct settings class based on APP_ENV.

Example environment variables (to be placed in your consuming project's .env or environment):

# Application
APP_NAME="fasttable"
APP_ENV="development"  # Options: development, testing, production
VERSION="0.1.0"
DEBUG=true

# Database configuration
DATABASE_URL="postgresql+asyncpg://<username>:<password>@<host>:<port>/<database_name>"
DB_ECHO=false
DB_POOL_SIZE=5

# Logging configuration
LOG_LEVEL="INFO"
LOG_JSON_FORMAT=false

# Table query configuration
DATATABLES_DEFAULT_SORT_FIELD="id"
DATATABLES_COUNT_FILTERED=false
"""

from .base import BaseAppSettings
from .development import DevelopmentSettings
from .production import ProductionSettings
from .settings import get_settings
from .testing import TestingSettings

__all__ = [
    "BaseAppSettings",
    "get_settings",
    "DevelopmentSettings",
    "ProductionSettings",
    "TestingSettings",
]
