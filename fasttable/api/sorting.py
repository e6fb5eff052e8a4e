"""
Sorting utilities for server-side table queries.

This module maps the widget's ``order`` entries, which refer to columns by
index, onto the field names those columns display.
"""

from typing import Dict, List, Sequence

from fasttable.schemas.query import SortDirection
from fasttable.schemas.request import ColumnSpec, OrderSpec


class SortField:
    """
    Sort field definition.

    This class represents a field to sort by, including the field name
    and sort direction.

    Attributes:
        field: Field name to sort by
        direction: Sort direction (asc or desc)
    """

    def __init__(self, field: str, direction: SortDirection = SortDirection.ASC):
        """
        Initialize sort field.

        Args:
            field: Field name to sort by
            direction: Sort direction
        """
        self.field = field
        self.direction = direction

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC

    def to_dict(self) -> Dict[str, str]:
        """
        Convert sort field to dictionary.

        Returns:
            Dictionary with field and direction
        """
        return {"field": self.field, "direction": self.direction.value}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SortField):
            return NotImplemented
        return self.field == other.field and self.direction == other.direction

    def __str__(self) -> str:
        return f"{self.field}:{self.direction.value}"

    def __repr__(self) -> str:
        return f"SortField(field='{self.field}', direction={self.direction})"


def build_sort(
    order: Sequence[OrderSpec],
    columns: Sequence[ColumnSpec],
    default_field: str = "id",
) -> List[SortField]:
    """
    Build the composite sort key for a request.

    The first entry of ``order`` is the primary key. A column listed twice
    keeps its first position and takes the last direction given.
    Without any ``order`` the rows are sorted by ``default_field`` descending.

    Args:
        order: Order entries of the request
        columns: Column definitions of the request (already range-checked)
        default_field: Identity/creation-order field used when there is no order

    Returns:
        Sort fields in priority order
    """
    if not order:
        return [SortField(default_field, SortDirection.DESC)]

    directions: Dict[str, SortDirection] = {}
    for entry in order:
        directions[columns[entry.column].data] = entry.dir

    return [SortField(field, direction) for field, direction in directions.items()]
