"""
Table query utilities.

This module translates server-side table requests (search, column filters,
multi-column sort, paging) into store queries and shapes the results into
the widget's response envelope.
"""

from fasttable.api.adapter import QueryAdapter, TableQuery, build_query, datatables_query
from fasttable.api.filtering import FilterCondition, infer_kind
from fasttable.api.pagination import PaginationParams
from fasttable.api.sorting import SortField, build_sort

__all__ = [
    "QueryAdapter",
    "TableQuery",
    "build_query",
    "datatables_query",
    "FilterCondition",
    "infer_kind",
    "PaginationParams",
    "SortField",
    "build_sort",
]
