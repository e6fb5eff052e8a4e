"""
Error handling module for fasttable.

This module provides standardized error handling including custom exceptions,
error responses, and exception handlers.

Limitations:
- Error response structure is fixed; customization requires code changes.
- Store faults raised while a table query runs are not translated; they reach
  the generic handler unchanged.
"""

from fasttable.errors.exceptions import (
    AppError,
    BadRequestError,
    DBError,
    ValidationError,
)
from fasttable.errors.handlers import register_exception_handlers
from fasttable.errors.manager import setup_errors

__all__ = [
    # Main setup function
    "setup_errors",
    # Handler registration
    "register_exception_handlers",
    # Exception classes
    "AppError",
    "ValidationError",
    "BadRequestError",
    "DBError",
]
