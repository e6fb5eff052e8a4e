"""
Exception handlers for fasttable.

This module provides exception handlers that convert application exceptions
into the standardized error envelope defined in fasttable.schemas.
"""

import traceback
from functools import partial
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from fasttable.errors.exceptions import AppError
from fasttable.logging import Logger, ensure_logger
from fasttable.schemas.response.error import ErrorInfo, ErrorResponse
from fasttable.schemas.metadata import ResponseMetadata


def create_error_response(
    message: str,
    code: str = "ERROR",
    errors: Optional[List[ErrorInfo]] = None,
    metadata: Optional[ResponseMetadata] = None,
) -> ErrorResponse:
    """
    Create a standardized error response.

    Args:
        message: Error message
        code: Error code identifier
        errors: Detailed error information list
        metadata: Additional metadata for the response

    Returns:
        Standardized error response
    """
    return ErrorResponse(
        success=False,
        message=message,
        errors=errors or [ErrorInfo(code=code, message=message)],
        metadata=metadata or ResponseMetadata(),
    )


def _create_validation_errors(
    errors_data: List[Dict[str, Any]], exclude_body: bool = False
) -> List[ErrorInfo]:
    """
    Create a list of ErrorInfo objects from validation errors data.

    Args:
        errors_data: List of error dictionaries
        exclude_body: Whether to exclude 'body' from location paths

    Returns:
        List of ErrorInfo objects
    """
    errors = []

    for error in errors_data:
        loc = error.get("loc", [])

        if exclude_body:
            field_path = ".".join([str(item) for item in loc if item != "body"])
        else:
            field_path = ".".join([str(item) for item in loc])

        errors.append(
            ErrorInfo(
                code="VALIDATION_ERROR",
                message=error.get("msg", "Validation error"),
                field=field_path,
            )
        )

    return errors


async def app_error_handler(
    request: Request, exc: AppError, debug: bool = False
) -> JSONResponse:
    """
    Handler for AppError and its subclasses.

    Args:
        request: FastAPI request
        exc: AppError instance
        debug: Attach exception details to the error entries

    Returns:
        JSON response with error details
    """
    details = exc.details if debug and exc.details else None
    errors = [ErrorInfo(code=exc.code, message=exc.message, details=details)]

    # Field-level errors replace the generic entry
    if getattr(exc, "fields", None):
        errors = [
            ErrorInfo(
                code=field_error.get("code", exc.code),
                message=field_error.get("message", exc.message),
                field=field_error.get("field", ""),
            )
            for field_error in exc.fields
        ]

    response = create_error_response(
        message=exc.message,
        code=exc.code,
        errors=errors,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(response),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handler for FastAPI's RequestValidationError.

    Args:
        request: FastAPI request
        exc: RequestValidationError instance

    Returns:
        JSON response with validation error details
    """
    response = create_error_response(
        message="Request validation error",
        code="VALIDATION_ERROR",
        errors=_create_validation_errors(exc.errors(), exclude_body=True),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(response),
    )


async def pydantic_validation_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handler for Pydantic's ValidationError.

    Args:
        request: FastAPI request
        exc: Pydantic ValidationError instance

    Returns:
        JSON response with validation error details
    """
    response = create_error_response(
        message="Data validation error",
        code="VALIDATION_ERROR",
        errors=_create_validation_errors(exc.errors(), exclude_body=False),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(response),
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception, logger: Optional[Logger] = None
) -> JSONResponse:
    """
    Generic exception handler for unhandled exceptions.

    Store faults raised during a table query end up here.

    Args:
        request: FastAPI request
        exc: Unhandled exception
        logger: Optional logger to use instead of default logging

    Returns:
        JSON response with generic error message
    """
    log = ensure_logger(logger, __name__)
    log.error(f"Unhandled exception: {str(exc)}")
    log.error(traceback.format_exc())

    response = create_error_response(
        message="Internal server error",
        code="INTERNAL_ERROR",
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=jsonable_encoder(response),
    )


def register_exception_handlers(
    app: FastAPI, logger: Optional[Logger] = None, debug: bool = False
) -> None:
    """
    Register all exception handlers with a FastAPI application.

    Args:
        app: FastAPI application instance
        logger: Optional logger for logging exceptions
        debug: Whether to include exception details in AppError responses
    """
    # The AppError handler covers all subclasses
    app.exception_handler(AppError)(partial(app_error_handler, debug=debug))

    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(PydanticValidationError)(pydantic_validation_handler)

    app.exception_handler(Exception)(
        partial(unhandled_exception_handler, logger=logger)
    )
