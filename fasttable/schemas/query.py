"""
Shared vocabulary for table queries.

These enums are used by the request schemas, the filter/sort builders in
fasttable.api and the store implementations in fasttable.db.
"""

from enum import Enum


class FieldKind(str, Enum):
    """
    Declared primitive kind of a stored field.

    Attributes:
        STRING: Text fields, matched by literal or regular expression
        NUMBER: Integer/decimal fields, matched by exact value
        DATE: Date/datetime fields, matched by lower bound
        OTHER: Anything else; never part of the general search
    """

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    OTHER = "other"


class FilterOperator(str, Enum):
    """
    Field operators understood in predicates.

    A predicate maps field names either to a bare value (equality),
    a compiled regular expression, or a mapping of these operators to values,
    e.g. ``{"created_at": {"$gte": datetime(2024, 1, 1)}}``.
    """

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GE = "$gte"
    LT = "$lt"
    LE = "$lte"
    IN = "$in"
    NOT_IN = "$nin"
    REGEX = "$regex"
    OPTIONS = "$options"


class LogicalOperator(str, Enum):
    """Top-level predicate keys combining lists of sub-predicates."""

    AND = "$and"
    OR = "$or"


class SortDirection(str, Enum):
    """
    Sort direction enum.

    Attributes:
        ASC: Ascending order
        DESC: Descending order
    """

    ASC = "asc"
    DESC = "desc"
