"""
Filtering utilities for server-side table queries.

This module turns the general search term and the per-column filters of a
table request into predicate clauses:

- the general search becomes an OR group with one clause per searchable field
  whose declared kind is compatible with the term;
- column filters become an AND group with one clause per column that carries
  its own term.

Clause construction dispatches on the declared FieldKind through a closed
table of pure builder functions, so it does not need a live schema to test.
"""

from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Pattern,
    Union,
)

from fasttable.schemas.query import FieldKind, FilterOperator
from fasttable.schemas.request import ColumnSpec, SearchSpec
from fasttable.schemas.terms import parse_date, parse_number

Predicate = Dict[str, Any]
Term = Union[str, Pattern[str]]


class FilterCondition:
    """
    Filter condition for a field.

    This class represents a single clause on a specific field,
    including the operator and value to compare with.

    Attributes:
        field: Field name to filter on
        operator: Filter operator
        value: Value to compare with
    """

    def __init__(self, field: str, operator: FilterOperator, value: Any = None):
        """
        Initialize filter condition.

        Args:
            field: Field name to filter on
            operator: Filter operator
            value: Value to compare with
        """
        self.field = field
        self.operator = operator
        self.value = value

    def to_predicate(self) -> Predicate:
        """
        Convert the condition to a predicate.

        Equality and regular expressions use the short form
        ``{field: value}``; other operators nest ``{field: {op: value}}``.

        Returns:
            Single-field predicate
        """
        if self.operator in (FilterOperator.EQ, FilterOperator.REGEX):
            return {self.field: self.value}
        return {self.field: {self.operator.value: self.value}}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert filter condition to dictionary.

        Returns:
            Dictionary with field, operator, and value
        """
        value = self.value
        if self.operator == FilterOperator.REGEX:
            value = value.pattern
        return {
            "field": self.field,
            "operator": self.operator.value,
            "value": value,
        }

    def __str__(self) -> str:
        data = self.to_dict()
        return f"{data['field']}:{data['operator']}:{data['value']}"

    def __repr__(self) -> str:
        return (
            f"FilterCondition(field='{self.field}', "
            f"operator={self.operator}, value={repr(self.value)})"
        )



def infer_kind(term: str) -> FieldKind:
    """
    Infer the kind of a general search term.

    Numbers win over dates, so ``2024`` is a number.

    Args:
        term: Search term

    Returns:
        FieldKind.NUMBER, FieldKind.DATE or FieldKind.STRING
    """
    if parse_number(term) is not None:
        return FieldKind.NUMBER
    if parse_date(term) is not None:
        return FieldKind.DATE
    return FieldKind.STRING


def _string_clause(
    field: str, term: str, inferred: FieldKind, compiled: Term
) -> Optional[FilterCondition]:
    if isinstance(compiled, str):
        return FilterCondition(field, FilterOperator.EQ, compiled)
    return FilterCondition(field, FilterOperator.REGEX, compiled)


def _number_clause(
    field: str, term: str, inferred: FieldKind, compiled: Term
) -> Optional[FilterCondition]:
    if inferred is not FieldKind.NUMBER:
        return None
    # Exact value, even for regex searches
    return FilterCondition(field, FilterOperator.EQ, parse_number(term))


def _date_clause(
    field: str, term: str, inferred: FieldKind, compiled: Term
) -> Optional[FilterCondition]:
    if inferred is not FieldKind.DATE:
        return None
    return FilterCondition(field, FilterOperator.GE, parse_date(term))


def _no_clause(
    field: str, term: str, inferred: FieldKind, compiled: Term
) -> Optional[FilterCondition]:
    return None


ClauseBuilder = Callable[[str, str, FieldKind, Term], Optional[FilterCondition]]

CLAUSE_BUILDERS: Dict[FieldKind, ClauseBuilder] = {
    FieldKind.STRING: _string_clause,
    FieldKind.NUMBER: _number_clause,
    FieldKind.DATE: _date_clause,
    FieldKind.OTHER: _no_clause,
}


def build_clause(
    field: str, kind: FieldKind, term: str, inferred: FieldKind, compiled: Term
) -> Optional[FilterCondition]:
    """
    Build the general-search clause for one field.

    Args:
        field: Field name
        kind: Declared kind of the field
        term: Raw search term
        inferred: Kind inferred from the term
        compiled: Literal term or compiled pattern

    Returns:
        FilterCondition, or None when the field kind and term kind do not match
    """
    return CLAUSE_BUILDERS[kind](field, term, inferred, compiled)


def searchable_fields(columns: Iterable[ColumnSpec]) -> List[str]:
    """Field names of the columns flagged as searchable, in column order."""
    return [col.data for col in columns if col.searchable and col.data]


def general_search_conditions(
    search: SearchSpec,
    columns: Iterable[ColumnSpec],
    field_kinds: Mapping[str, FieldKind],
) -> List[FilterCondition]:
    """
    Build the OR group for the general search.

    Fields missing from ``field_kinds`` are treated as FieldKind.OTHER and
    left out, as are fields whose kind does not match the term.

    Args:
        search: General search of the request
        columns: Column definitions of the request
        field_kinds: Declared kind per field, from the store

    Returns:
        One condition per compatible searchable field; empty when there is no term
    """
    if not search.value:
        return []

    inferred = infer_kind(search.value)
    compiled = search.compile()

    conditions: List[FilterCondition] = []
    for field in searchable_fields(columns):
        kind = field_kinds.get(field, FieldKind.OTHER)
        condition = build_clause(field, kind, search.value, inferred, compiled)
        if condition is not None:
            conditions.append(condition)
    return conditions


def column_filter_conditions(columns: Iterable[ColumnSpec]) -> List[FilterCondition]:
    """
    Build the AND group for per-column filters.

    Every column with a non-empty term contributes one clause, whether or
    not it is searchable.

    Args:
        columns: Column definitions of the request

    Returns:
        One condition per filtered column
    """
    conditions: List[FilterCondition] = []
    for col in columns:
        if not col.search.value or not col.data:
            continue
        compiled = col.search.compile()
        operator = FilterOperator.EQ if isinstance(compiled, str) else FilterOperator.REGEX
        conditions.append(FilterCondition(col.data, operator, compiled))
    return conditions


def merge_predicates(
    find: Optional[Mapping[str, Any]], additional: Optional[Mapping[str, Any]]
) -> Predicate:
    """
    Shallow-merge the request's ``find`` with the caller's predicate.

    Keys of ``additional`` overwrite same-named keys of ``find``.
    """
    return {**(find or {}), **(additional or {})}

