"""
Error management functionality for fasttable.

This module provides the main entry point for configuring error handling
in a FastAPI application, including exception handler registration.
"""

from typing import Optional

from fastapi import FastAPI

from fasttable.config.base import BaseAppSettings
from fasttable.errors.handlers import register_exception_handlers
from fasttable.logging import Logger, ensure_logger


def setup_errors(
    app: FastAPI,
    settings: Optional[BaseAppSettings] = None,
    logger: Optional[Logger] = None,
) -> None:
    """
    Configure error handling for a FastAPI application.

    This function registers exception handlers that convert fasttable
    exceptions into consistent error envelopes.

    Args:
        app: FastAPI application instance
        settings: Optional application settings
        logger: Optional logger for logging exceptions
    """
    log = ensure_logger(logger, __name__, settings)

    debug = bool(getattr(settings, "DEBUG", False))

    register_exception_handlers(app, logger=log, debug=debug)
