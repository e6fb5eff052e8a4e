"""
Response schemas for fasttable.

This module exports all response schemas for easy access.
"""

from fasttable.schemas.response.error import ErrorInfo, ErrorResponse
from fasttable.schemas.response.table import TableResponse

__all__ = [
    "ErrorResponse",
    "ErrorInfo",
    "TableResponse",
]
