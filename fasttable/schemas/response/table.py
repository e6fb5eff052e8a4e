"""
Table response schema.

This module contains the envelope returned to a DataTables widget for one draw.
Field names on the wire are the widget's (``recordsTotal``, ``recordsFiltered``);
Python code uses the snake_case attribute names.

Limitations:
- Rows are passed through as returned by the store; serializing ORM objects
  to JSON is left to the caller's response model.
"""

from typing import Any, Dict, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class TableResponse(BaseModel, Generic[T]):
    """
    Response envelope for a server-side table draw.

    Attributes:
        draw: Draw counter echoed from the request
        records_total: Number of rows matching the base predicate
        records_filtered: Number of rows after search and column filters
        data: Rows for the requested page
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    draw: int = Field(default=0, description="Draw counter echoed from the request")
    records_total: int = Field(
        default=0, alias="recordsTotal", description="Total number of records"
    )
    records_filtered: int = Field(
        default=0,
        alias="recordsFiltered",
        description="Number of records after filtering",
    )
    data: List[T] = Field(default_factory=list, description="Rows for this page")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the envelope to the widget's wire format.

        Returns:
            Dictionary keyed by draw, recordsTotal, recordsFiltered and data
        """
        return {
            "draw": self.draw,
            "recordsTotal": self.records_total,
            "recordsFiltered": self.records_filtered,
            "data": self.data,
        }
