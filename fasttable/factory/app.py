"""
FastAPI application factory module.

This module provides a function to configure FastAPI applications
with standardized settings, error handling and database lifecycle.
"""

from typing import Optional

from fastapi import FastAPI

from fasttable.api.adapter import QueryAdapter
from fasttable.config import BaseAppSettings, get_settings
from fasttable.db import setup_db
from fasttable.errors import setup_errors
from fasttable.logging import ensure_logger


def configure_app(app: FastAPI, settings: Optional[BaseAppSettings] = None) -> None:
    """
    Configure a FastAPI application for serving table queries.

    The application instance should be created by the main application and passed
    to this function for configuration. A QueryAdapter built from the settings is
    stored on ``app.state.query_adapter``.

    Args:
        app: The FastAPI application to configure
        settings: Optional application settings, if not provided will be loaded
                 from environment
    """
    app_settings = settings or get_settings()

    logger = ensure_logger(None, __name__, app_settings)

    if not app.title:
        app.title = app_settings.APP_NAME
    if not app.version:
        app.version = app_settings.VERSION

    app.debug = app_settings.DEBUG

    # Configure error handling (required)
    setup_errors(app, app_settings, logger)
    # Configure database
    setup_db(app, app_settings, logger)

    app.state.query_adapter = QueryAdapter.from_settings(app_settings, logger)
