"""
Schemas for fasttable.

This module provides the pydantic models for table requests,
table responses and error envelopes, plus the shared query vocabulary.
"""

from fasttable.schemas.metadata import BaseMetadata, ResponseMetadata
from fasttable.schemas.query import (
    FieldKind,
    FilterOperator,
    LogicalOperator,
    SortDirection,
)
from fasttable.schemas.response import ErrorInfo, ErrorResponse, TableResponse
from fasttable.schemas.request import ColumnSpec, OrderSpec, SearchSpec, TableRequest
from fasttable.schemas.terms import parse_bool, parse_date, parse_number

__all__ = [
    # Metadata schemas
    "BaseMetadata",
    "ResponseMetadata",
    # Query vocabulary
    "FieldKind",
    "FilterOperator",
    "LogicalOperator",
    "SortDirection",
    # Request schemas
    "TableRequest",
    "SearchSpec",
    "OrderSpec",
    "ColumnSpec",
    # Response schemas
    "TableResponse",
    "ErrorResponse",
    "ErrorInfo",
    # Term readers
    "parse_number",
    "parse_date",
    "parse_bool",
]
