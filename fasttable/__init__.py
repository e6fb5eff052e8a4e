"""
fasttable - server-side table queries for FastAPI and SQLAlchemy.

This package translates the paging/search/sort requests of a DataTables
widget into store queries and returns the envelope the widget expects.

Usage:
    from fasttable import SQLAlchemyStore, datatables_query

    store = SQLAlchemyStore(session, User)
    response = await datatables_query(store, request_body)
    return response.to_dict()
"""

__version__ = "0.1.0"

# Public API exports
from fasttable.api import QueryAdapter, build_query, datatables_query
from fasttable.config import BaseAppSettings, get_settings
from fasttable.db import BaseStore, PendingQuery, SQLAlchemyStore
from fasttable.errors import AppError, ValidationError, setup_errors
from fasttable.factory import configure_app
from fasttable.logging import get_logger
from fasttable.schemas import FieldKind, TableRequest, TableResponse
