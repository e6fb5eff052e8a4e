"""
Server-side table query adapter.

This module ties the filtering, sorting and pagination helpers together:
a table request is planned into a TableQuery without any I/O, the plan is
applied to a store's pending query, and the page of rows is returned with the
record counts in the envelope the widget expects.

Example:
    ```python
    @app.post("/users/table")
    async def users_table(body: dict, session: AsyncSession = Depends(get_db)):
        store = SQLAlchemyStore(session, User)
        response = await datatables_query(store, body, {"deleted": False})
        return response.to_dict()
    ```
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, TypeVar, Union

from fasttable.api.filtering import (
    Predicate,
    column_filter_conditions,
    general_search_conditions,
    merge_predicates,
)
from fasttable.api.pagination import PaginationParams
from fasttable.api.sorting import SortField, build_sort
from fasttable.config.base import BaseAppSettings
from fasttable.db.store import BaseStore, PendingQuery
from fasttable.logging import Logger, ensure_logger
from fasttable.schemas.query import FieldKind, LogicalOperator
from fasttable.schemas.request import TableRequest
from fasttable.schemas.response import TableResponse

Q = TypeVar("Q", bound=PendingQuery)


@dataclass
class TableQuery:
    """
    Query plan for one table draw.

    Attributes:
        predicate: Base predicate (``find`` merged with the caller's predicate)
        any_of: General-search clauses, of which at least one must match
        all_of: Column-filter clauses, all of which must match
        sort: Sort fields, primary first
        populate: Relations to load with each row
        pagination: Offset/limit window
    """

    predicate: Predicate
    any_of: List[Predicate] = field(default_factory=list)
    all_of: List[Predicate] = field(default_factory=list)
    sort: List[SortField] = field(default_factory=list)
    populate: List[str] = field(default_factory=list)
    pagination: PaginationParams = field(default_factory=PaginationParams)

    @property
    def filtered_predicate(self) -> Predicate:
        """Base predicate combined with the search and column filters."""
        clauses: List[Predicate] = [self.predicate] if self.predicate else []
        if self.any_of:
            clauses.append({LogicalOperator.OR.value: list(self.any_of)})
        clauses.extend(self.all_of)
        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {LogicalOperator.AND.value: clauses}

    def apply(self, query: Q) -> Q:
        """
        Attach populate, filters, sort and window to a pending query.

        Args:
            query: Pending query started from ``predicate``

        Returns:
            The same pending query
        """
        query.populate(self.populate)
        if self.any_of:
            query.or_(self.any_of)
        if self.all_of:
            query.and_(self.all_of)
        query.sort(self.sort)
        return self.pagination.apply(query)


def build_query(
    request: TableRequest,
    additional: Optional[Mapping[str, Any]] = None,
    field_kinds: Optional[Mapping[str, FieldKind]] = None,
    default_sort_field: str = "id",
) -> TableQuery:
    """
    Plan a table draw.

    Args:
        request: Validated table request
        additional: Caller predicate merged over ``request.find``
        field_kinds: Declared kind per field; needed only for a general search
        default_sort_field: Field sorted descending when the request has no order

    Returns:
        TableQuery ready to apply to a store's pending query
    """
    any_of = general_search_conditions(request.search, request.columns, field_kinds or {})
    all_of = column_filter_conditions(request.columns)

    return TableQuery(
        predicate=merge_predicates(request.find, additional),
        any_of=[condition.to_predicate() for condition in any_of],
        all_of=[condition.to_predicate() for condition in all_of],
        sort=build_sort(request.order, request.columns, default_sort_field),
        populate=list(request.populate),
        pagination=PaginationParams(request.start, request.length),
    )


class QueryAdapter:
    """
    Runs table requests against a store.

    The adapter holds configuration only, so one instance can serve
    concurrent requests.

    Attributes:
        default_sort_field: Field sorted descending when a request has no order
        count_filtered: Count rows matching the search and column filters for
            ``recordsFiltered``; when off it mirrors ``recordsTotal``
    """

    def __init__(
        self,
        default_sort_field: str = "id",
        count_filtered: bool = False,
        logger: Optional[Logger] = None,
    ):
        self.default_sort_field = default_sort_field
        self.count_filtered = count_filtered
        self.logger = ensure_logger(logger, __name__)

    @classmethod
    def from_settings(
        cls, settings: BaseAppSettings, logger: Optional[Logger] = None
    ) -> "QueryAdapter":
        """
        Build an adapter from application settings.

        Args:
            settings: Application settings
            logger: Optional logger

        Returns:
            Configured QueryAdapter
        """
        return cls(
            default_sort_field=settings.DATATABLES_DEFAULT_SORT_FIELD,
            count_filtered=settings.DATATABLES_COUNT_FILTERED,
            logger=ensure_logger(logger, __name__, settings),
        )

    def plan(
        self,
        store: BaseStore,
        request: TableRequest,
        additional: Optional[Mapping[str, Any]] = None,
    ) -> TableQuery:
        """Plan a validated request, reading field kinds only for a general search."""
        field_kinds = store.field_kinds() if request.search.value else {}
        table_query = build_query(request, additional, field_kinds, self.default_sort_field)

        if request.search.value:
            self.logger.debug(f"General search OR group: {table_query.any_of}")
        self.logger.debug(
            f"Sort: {[sort_field.to_dict() for sort_field in table_query.sort]}, "
            f"window: {table_query.pagination.to_dict()}"
        )

        return table_query

    async def execute(
        self,
        store: BaseStore,
        request: Union[TableRequest, Mapping[str, Any]],
        additional: Optional[Mapping[str, Any]] = None,
    ) -> TableResponse:
        """
        Run one table draw.

        The page is read first, then the rows matching the base predicate are
        counted. Store errors propagate unchanged.

        Args:
            store: Store for the table's collection
            request: Table request, validated here if given as a mapping
            additional: Caller predicate merged over ``request.find``

        Returns:
            TableResponse with the echoed draw, counts and rows

        Raises:
            ValidationError: If the request descriptor is malformed
        """
        table_request = TableRequest.parse(request)
        table_query = self.plan(store, table_request, additional)

        rows = await table_query.apply(store.find(table_query.predicate)).execute()

        records_total = await store.count_documents(table_query.predicate)
        records_filtered = records_total
        if self.count_filtered:
            records_filtered = await store.count_documents(table_query.filtered_predicate)

        self.logger.debug(
            f"Table draw {table_request.draw}: {len(rows)} rows, "
            f"recordsTotal={records_total}, recordsFiltered={records_filtered}"
        )

        return TableResponse(
            draw=table_request.draw,
            records_total=records_total,
            records_filtered=records_filtered,
            data=rows,
        )


async def datatables_query(
    store: BaseStore,
    query_options: Union[TableRequest, Mapping[str, Any]],
    additional: Optional[Mapping[str, Any]] = None,
    settings: Optional[BaseAppSettings] = None,
) -> TableResponse:
    """
    Run one table draw with an adapter built from settings.

    Args:
        store: Store for the table's collection
        query_options: Table request in the widget's wire format
        additional: Caller predicate merged over ``find``
        settings: Optional application settings; defaults apply when omitted

    Returns:
        TableResponse for the widget
    """
    if settings is not None:
        adapter = QueryAdapter.from_settings(settings)
    else:
        adapter = QueryAdapter()
    return await adapter.execute(store, query_options, additional)
